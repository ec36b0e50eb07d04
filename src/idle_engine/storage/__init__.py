"""Storage module for idle engine persistence.

Provides SQLite-based storage for:
- Save slots (serialized game state and last-played time)
- The active slot selection
"""

from idle_engine.storage.save_slots import SaveSlotStore, SlotInfo

__all__ = [
    "SaveSlotStore",
    "SlotInfo",
]
