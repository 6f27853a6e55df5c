"""Tests for the JSON document store."""

import pytest

from storyline import store
from storyline.store import DocumentStore, DuplicateKeyError, StoreError


@pytest.fixture
def docs(tmp_path) -> DocumentStore:
    return DocumentStore(tmp_path)


# ── create / find_one ───────────────────────────────────────


def test_create_and_find_one(docs):
    docs.create(store.PLAYERS, {"playerId": "p1", "name": "Mara"})
    assert docs.find_one(store.PLAYERS, {"playerId": "p1"})["name"] == "Mara"
    assert docs.find_one(store.PLAYERS, {"playerId": "nobody"}) is None


def test_create_duplicate_key(docs):
    docs.create(store.NPCS, {"npcId": "n1"})
    with pytest.raises(DuplicateKeyError):
        docs.create(store.NPCS, {"npcId": "n1"})


def test_create_assigns_event_id(docs):
    a = docs.create(store.PLAYER_EVENTS, {"playerId": "p1", "summary": "a"})
    b = docs.create(store.PLAYER_EVENTS, {"playerId": "p1", "summary": "b"})
    assert a["id"] and b["id"]
    assert a["id"] != b["id"]


def test_unknown_collection(docs):
    with pytest.raises(ValueError):
        docs.find_one("ghosts", {})


# ── find_many ───────────────────────────────────────────────


def test_find_many_sorted_desc_with_limit(docs):
    for day, summary in [(3, "c"), (1, "a"), (2, "b")]:
        docs.create(store.PLAYER_EVENTS, {
            "playerId": "p1", "summary": summary,
            "timestamp": f"2024-01-0{day}T00:00:00Z",
        })
    docs.create(store.PLAYER_EVENTS, {"playerId": "p2", "summary": "other",
                                      "timestamp": "2024-02-01T00:00:00Z"})
    result = docs.find_many(store.PLAYER_EVENTS, {"playerId": "p1"}, sort_desc="timestamp", limit=2)
    assert [d["summary"] for d in result] == ["c", "b"]


def test_find_many_ties_newest_insert_first(docs):
    for summary in ["first", "second", "third"]:
        docs.create(store.NPC_EVENTS, {"npcId": "n1", "summary": summary,
                                       "timestamp": "2024-01-01T00:00:00Z"})
    result = docs.find_many(store.NPC_EVENTS, {"npcId": "n1"}, sort_desc="timestamp")
    assert [d["summary"] for d in result] == ["third", "second", "first"]


def test_find_many_mixed_offsets(docs):
    docs.create(store.NPC_EVENTS, {"npcId": "n1", "summary": "early",
                                   "timestamp": "2024-01-01T10:00:00+02:00"})
    docs.create(store.NPC_EVENTS, {"npcId": "n1", "summary": "late",
                                   "timestamp": "2024-01-01T09:00:00Z"})
    result = docs.find_many(store.NPC_EVENTS, sort_desc="timestamp")
    assert result[0]["summary"] == "late"


def test_find_many_empty_collection(docs):
    assert docs.find_many(store.NPCS) == []


# ── update_one / push / upsert ──────────────────────────────


def test_update_one_shallow_merge(docs):
    docs.create(store.PLAYERS, {"playerId": "p1", "name": "Mara", "stats": {"money": 5}})
    updated = docs.update_one(store.PLAYERS, {"playerId": "p1"}, {"location": "Cafe"})
    assert updated == {"playerId": "p1", "name": "Mara", "stats": {"money": 5}, "location": "Cafe"}
    assert docs.update_one(store.PLAYERS, {"playerId": "nobody"}, {"name": "x"}) is None


def test_push_appends(docs):
    docs.create(store.NPCS, {"npcId": "n1"})
    assert docs.push(store.NPCS, {"npcId": "n1"}, "memories", {"summary": "a"})
    assert docs.push(store.NPCS, {"npcId": "n1"}, "memories", {"summary": "b"})
    npc = docs.find_one(store.NPCS, {"npcId": "n1"})
    assert [m["summary"] for m in npc["memories"]] == ["a", "b"]


def test_push_missing_doc(docs):
    assert docs.push(store.NPCS, {"npcId": "ghost"}, "memories", {"summary": "a"}) is False
    assert docs.find_many(store.NPCS) == []


def test_upsert_replaces_whole_document(docs):
    docs.upsert(store.INVENTORIES, {"playerId": "p1"}, {"items": [{"name": "key", "amount": 1}]})
    docs.upsert(store.INVENTORIES, {"playerId": "p1"}, {"items": [{"name": "map", "amount": 2}]})
    result = docs.find_many(store.INVENTORIES)
    assert result == [{"playerId": "p1", "items": [{"name": "map", "amount": 2}]}]


def test_delete_many(docs):
    docs.create(store.NPCS, {"npcId": "n1"})
    docs.create(store.NPCS, {"npcId": "n2"})
    assert docs.delete_many(store.NPCS, {"npcId": "n1"}) == 1
    assert [d["npcId"] for d in docs.find_many(store.NPCS)] == ["n2"]


# ── failures ────────────────────────────────────────────────


def test_corrupt_file_raises_store_error(docs, tmp_path):
    (tmp_path / "players.json").write_text("{not json")
    with pytest.raises(StoreError):
        docs.find_one(store.PLAYERS, {"playerId": "p1"})
