"""HTTP-level tests for the /api endpoints."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from backend.app import create_app

TEST_DATA_DIR = Path("data-tests")


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app(TEST_DATA_DIR))


def _seed(client: TestClient) -> None:
    client.post("/api/player", json={"playerId": "p1", "name": "Mara", "location": "Home"})
    client.post("/api/npc", json={
        "npcId": "npc1", "personality": ["proud"], "mood": "calm", "conflictLevel": 60,
    })


# ── Status ──────────────────────────────────────────────────


def test_root_status(client):
    body = client.get("/").json()
    assert body["status"] == "Server is running!"
    assert "time" in body and "gameTime" in body


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


# ── Players & inventory ─────────────────────────────────────


def test_player_crud(client):
    resp = client.post("/api/player", json={"playerId": "p1", "name": "Mara", "location": "Home"})
    assert resp.status_code == 200
    assert resp.json()["stats"] == {"money": 0}

    assert client.post("/api/player", json={"playerId": "p1"}).status_code == 409
    assert client.get("/api/player/p1").json()["name"] == "Mara"
    assert client.get("/api/player/nobody").status_code == 404

    patched = client.patch("/api/player/p1", json={"location": "Cafe"}).json()
    assert patched["location"] == "Cafe"
    assert client.patch("/api/player/nobody", json={"name": "x"}).status_code == 404


def test_create_player_requires_id(client):
    assert client.post("/api/player", json={"name": "Nobody"}).status_code == 422


def test_player_money_sync(client):
    _seed(client)
    client.post("/api/log-event", json={
        "playerId": "p1", "type": "work", "summary": "Got paid", "data": {"moneyChange": 120},
    })
    first = client.patch("/api/player/p1", json={"syncFromLogs": True}).json()
    assert first["stats"]["money"] == 120
    second = client.patch("/api/player/p1", json={"syncFromLogs": True}).json()
    assert second["stats"]["money"] == 120


def test_inventory_upsert(client):
    assert client.get("/api/inventory/p1").json() == {"playerId": "p1", "items": []}
    client.post("/api/inventory", json={"playerId": "p1", "items": [{"name": "key", "amount": 1}]})
    client.post("/api/inventory", json={"playerId": "p1", "items": [{"name": "map", "amount": 2}]})
    assert client.get("/api/inventory/p1").json()["items"] == [{"name": "map", "amount": 2}]


# ── NPCs ────────────────────────────────────────────────────


def test_npc_crud_and_mood_sync(client):
    _seed(client)
    assert client.get("/api/npc/npc1").json()["mood"] == "calm"
    assert client.get("/api/npc/ghost").status_code == 404
    assert [n["npcId"] for n in client.get("/api/npcs").json()] == ["npc1"]

    client.post("/api/log-npc-event", json={"npcId": "npc1", "summary": "was insulted", "feeling": "angry"})
    npc = client.patch("/api/npc/npc1", json={"mood": "happy", "syncFromLogs": True}).json()
    assert npc["mood"] == "angry"
    assert len(npc["memories"]) == 1


def test_npc_patch_null_clears_mood(client):
    _seed(client)
    resp = client.patch("/api/npc/npc1", json={"mood": None})
    assert resp.status_code == 200
    assert "mood" not in resp.json()
    assert "mood" not in client.get("/api/npc/npc1").json()


def test_sync_flag_must_be_boolean_true(client):
    _seed(client)
    client.post("/api/log-npc-event", json={"npcId": "npc1", "summary": "was insulted", "feeling": "angry"})
    client.post("/api/log-event", json={
        "playerId": "p1", "type": "work", "summary": "Got paid", "data": {"moneyChange": 120},
    })
    npc = client.patch("/api/npc/npc1", json={"syncFromLogs": "false"}).json()
    assert npc["mood"] == "calm"
    player = client.patch("/api/player/p1", json={"syncFromLogs": "false"}).json()
    assert player["stats"]["money"] == 0


def test_npc_patch_invalid_field(client):
    _seed(client)
    assert client.patch("/api/npc/npc1", json={"conflictLevel": "very"}).status_code == 400


# ── Event logs ──────────────────────────────────────────────


def test_log_event_requires_fields(client):
    resp = client.post("/api/log-event", json={"playerId": "p1", "summary": "x"})
    assert resp.status_code == 400
    assert client.post("/api/log-npc-event", json={"npcId": "n1"}).status_code == 400


def test_list_events_newest_first(client):
    for summary in ["one", "two", "three"]:
        client.post("/api/log-event", json={"playerId": "p1", "type": "event", "summary": summary})
    logs = client.get("/api/log-event/p1").json()["logs"]
    assert [e["summary"] for e in logs] == ["three", "two", "one"]


def test_list_events_respects_limit_setting(client):
    client.patch("/api/settings", json={"event_list_limit": 2})
    for summary in ["one", "two", "three"]:
        client.post("/api/log-event", json={"playerId": "p1", "type": "event", "summary": summary})
    assert len(client.get("/api/log-event/p1").json()["logs"]) == 2


def test_batch_events(client):
    _seed(client)
    resp = client.post("/api/log-batch-events", json={"events": [
        {"entityType": "ghost", "entityId": "g", "summary": "boo"},
        {"entityType": "player", "entityId": "p1", "summary": "Went out", "timeDelta": "PT1H"},
        {"entityType": "npc", "entityId": "npc1", "summary": "npc1 insulted player", "feeling": "angry"},
    ]})
    body = resp.json()
    assert body["success"] is True
    assert [log["summary"] for log in body["logs"]] == ["Went out", "npc1 insulted player"]
    assert body["logs"][0]["type"] == "event"
    memories = client.get("/api/npc/npc1").json()["memories"]
    assert [m["summary"] for m in memories] == ["npc1 insulted player"]


def test_batch_unknown_entry_needs_no_other_fields(client):
    resp = client.post("/api/log-batch-events", json={"events": [
        {"entityType": "ghost", "entityId": "g1"},
        {"entityType": "player", "entityId": "p1", "summary": "Woke up"},
    ]})
    assert resp.status_code == 200
    assert [log["summary"] for log in resp.json()["logs"]] == ["Woke up"]


def test_batch_incomplete_entry_is_bad_request(client):
    resp = client.post("/api/log-batch-events", json={"events": [
        {"entityType": "player", "entityId": "p1"},
    ]})
    assert resp.status_code == 400


def test_batch_requires_list(client):
    assert client.post("/api/log-batch-events", json={"events": "nope"}).status_code == 422


# ── Settings ────────────────────────────────────────────────


def test_settings_roundtrip(client):
    assert client.get("/api/settings").json()["npc_scan_limit"] == 500
    assert client.patch("/api/settings", json={"npc_scan_limit": 3}).json()["npc_scan_limit"] == 3
    assert client.patch("/api/settings", json={"npc_scan_limit": 0}).status_code == 400


# ── Precheck ────────────────────────────────────────────────


def test_precheck_pass(client):
    _seed(client)
    verdict = client.post("/api/precheck", json={
        "playerId": "p1", "context": "morning",
        "latestEntry": {"summary": "Mara opens the window", "data": {"characterIds": ["npc1"]}},
    }).json()
    assert verdict["logicConsistent"] is True
    assert verdict["errors"] == []
    assert verdict["dramaPresent"] is True
    assert verdict["newCharactersDetected"] is False


def test_precheck_missing_player(client):
    verdict = client.post("/api/precheck", json={
        "playerId": "p1", "context": "morning", "latestEntry": {"summary": "x"},
    }).json()
    assert verdict["logicConsistent"] is False
    assert "Player not found" in verdict["errors"]


def test_precheck_repeated_summary(client):
    _seed(client)
    client.post("/api/log-event", json={"playerId": "p1", "type": "event", "summary": "Mara slept in"})
    verdict = client.post("/api/precheck", json={
        "playerId": "p1", "context": "morning", "latestEntry": {"summary": "Mara slept in"},
    }).json()
    assert verdict["storyAdvancing"] is False
    assert "Story is not advancing: latest entry repeats a recent event" in verdict["errors"]
