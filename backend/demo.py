"""Create a small demo world for development/testing."""

from storyline import store
from storyline.ingestion import ingest_batch
from storyline.models import NPC, EventDescriptor, Inventory, InventoryItem, Player, Relationship, Stats
from storyline.storage import Storage

DEMO_PLAYER = Player(
    player_id="demo-player",
    name="Mara",
    location="Harbor Street apartment",
    stats=Stats(money=250),
)

DEMO_NPCS = [
    NPC(
        npc_id="jonas",
        name="Jonas",
        location="Corner café",
        personality=["talkative", "ambitious"],
        mood="cheerful",
        attitude_toward_player="friendly",
        description="Barista saving up to open his own roastery.",
    ),
    NPC(
        npc_id="ilse",
        name="Ilse",
        location="Harbor Street apartment",
        personality=["meticulous", "guarded"],
        mood="irritated",
        attitude_toward_player="suspicious",
        conflict_level=55,
        relationships=[
            Relationship(
                target_id="demo-player",
                target_type="player",
                public_attitude="polite",
                private_attitude="resentful",
            ),
        ],
        description="Landlady who suspects Mara of subletting.",
    ),
    NPC(
        npc_id="teo",
        name="Teo",
        location="Night market",
        personality=["secretive", "charming"],
        attitude_toward_player="neutral",
    ),
]

DEMO_EVENTS = [
    {"entityType": "player", "entityId": "demo-player",
     "summary": "Mara moved into the Harbor Street apartment", "feeling": "hopeful"},
    {"entityType": "player", "entityId": "demo-player", "timeDelta": "PT2H",
     "summary": "Ilse refused to fix the broken heater", "feeling": "angry",
     "data": {"moneyChange": -40}},
    {"entityType": "npc", "entityId": "ilse", "timeDelta": "PT2H",
     "summary": "Ilse refused to fix the broken heater", "feeling": "smug"},
]


def create_demo_data(storage: Storage) -> None:
    """Wipe existing records and create a fresh demo world."""
    for collection in store.COLLECTIONS:
        storage.docs.delete_many(collection)

    storage.create_player(DEMO_PLAYER)
    storage.save_inventory(Inventory(
        player_id=DEMO_PLAYER.player_id,
        items=[InventoryItem(name="Apartment key", amount=1), InventoryItem(name="Bus ticket", amount=3)],
    ))
    for npc in DEMO_NPCS:
        storage.create_npc(npc)
    ingest_batch(storage, [EventDescriptor.model_validate(e) for e in DEMO_EVENTS])
