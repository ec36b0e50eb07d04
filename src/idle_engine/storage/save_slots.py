"""SQLite save-slot persistence.

A fixed number of slots each hold one serialized :class:`GameState` plus the
time it was last played. A metadata row tracks which slot is active.

Storage location: ``settings.storage.database_path`` (default
``data/idle_engine.db``).
"""

from __future__ import annotations

import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from idle_engine.core.config import get_settings
from idle_engine.core.exceptions import PersistenceError
from idle_engine.core.logging import get_logger
from idle_engine.models.state import GameState

logger = get_logger(__name__)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class SlotInfo:
    """Summary of one save slot.

    Attributes:
        slot: Slot index.
        is_empty: Whether nothing is saved in the slot.
        last_played: When the slot was last saved.
        elapsed_ticks: Ticks simulated in the saved game.
    """

    slot: int
    is_empty: bool
    last_played: datetime | None = None
    elapsed_ticks: int = 0

    @classmethod
    def empty(cls, slot: int) -> SlotInfo:
        """Create the summary of an unused slot."""
        return cls(slot=slot, is_empty=True)

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> SlotInfo:
        """Create from database row."""
        return cls(
            slot=row[0],
            is_empty=False,
            last_played=datetime.fromisoformat(row[1]),
            elapsed_ticks=row[2],
        )


# =============================================================================
# Save Slot Store
# =============================================================================


class SaveSlotStore:
    """SQLite store holding a fixed number of save slots.

    Slots are numbered from 0. Saving to a slot overwrites whatever it held.
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path | None = None, *, slot_count: int | None = None) -> None:
        """Initialize the store.

        Args:
            db_path: Path to database file. If None, uses the configured path.
            slot_count: Number of slots. If None, uses the configured count.
        """
        settings = get_settings().storage
        self.db_path = Path(db_path) if db_path is not None else settings.database_path
        self.slot_count = slot_count if slot_count is not None else settings.slot_count

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

        logger.info("Save slot store initialized", path=str(self.db_path), slots=self.slot_count)

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as exc:
            raise PersistenceError(
                f"Cannot open save database: {exc}",
                details={"path": str(self.db_path)},
            ) from exc
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            raise PersistenceError(f"Save database error: {exc}") from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS save_slots (
                    slot INTEGER PRIMARY KEY,
                    last_played TEXT NOT NULL,
                    elapsed_ticks INTEGER NOT NULL,
                    state_json TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)

            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    def _check_slot(self, slot: int) -> None:
        if not 0 <= slot < self.slot_count:
            raise PersistenceError(
                f"Save slot {slot} does not exist",
                slot=slot,
                details={"slot_count": self.slot_count},
            )

    # =========================================================================
    # Slot Operations
    # =========================================================================

    def list_slots(self) -> list[SlotInfo]:
        """Summarize every slot, empty ones included.

        Returns:
            One entry per slot, in slot order.
        """
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT slot, last_played, elapsed_ticks FROM save_slots")
            saved = {row[0]: SlotInfo.from_row(tuple(row)) for row in cursor.fetchall()}
        return [saved.get(slot, SlotInfo.empty(slot)) for slot in range(self.slot_count)]

    def save(self, slot: int, state: GameState) -> SlotInfo:
        """Write a game state into a slot.

        Args:
            slot: Slot index.
            state: State to save.

        Returns:
            The slot's new summary.

        Raises:
            PersistenceError: If the slot does not exist or the write fails.
        """
        self._check_slot(slot)
        now = datetime.now()
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO save_slots (slot, last_played, elapsed_ticks, state_json)
                VALUES (?, ?, ?, ?)
                """,
                (slot, now.isoformat(), state.elapsed_ticks, state.model_dump_json()),
            )

        logger.info("Game saved", slot=slot, elapsed_ticks=state.elapsed_ticks)
        return SlotInfo(
            slot=slot, is_empty=False, last_played=now, elapsed_ticks=state.elapsed_ticks
        )

    def load(self, slot: int) -> GameState | None:
        """Read the game state held in a slot.

        Args:
            slot: Slot index.

        Returns:
            The saved state, or None if the slot is empty.

        Raises:
            PersistenceError: If the slot does not exist or its data is corrupt.
        """
        self._check_slot(slot)
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT state_json FROM save_slots WHERE slot = ?",
                (slot,),
            ).fetchone()

        if row is None:
            return None
        try:
            state = GameState.model_validate_json(row[0])
        except PydanticValidationError as exc:
            raise PersistenceError(
                f"Save slot {slot} is corrupt",
                slot=slot,
                details={"errors": exc.error_count()},
            ) from exc

        logger.info("Game loaded", slot=slot, elapsed_ticks=state.elapsed_ticks)
        return state

    def clear(self, slot: int) -> bool:
        """Delete whatever a slot holds.

        Returns:
            True if the slot held a save, False if it was already empty.
        """
        self._check_slot(slot)
        with self._get_connection() as conn:
            deleted = conn.execute("DELETE FROM save_slots WHERE slot = ?", (slot,)).rowcount > 0

        if deleted:
            logger.info("Save slot cleared", slot=slot)
        return deleted

    # =========================================================================
    # Active Slot
    # =========================================================================

    @property
    def active_slot(self) -> int:
        """Slot the player last switched to; 0 until one is chosen."""
        with self._get_connection() as conn:
            row = conn.execute("SELECT value FROM meta WHERE key = 'active_slot'").fetchone()
        if row is None:
            return 0
        slot = int(row[0])
        return slot if 0 <= slot < self.slot_count else 0

    def set_active_slot(self, slot: int) -> None:
        """Remember which slot is being played.

        Raises:
            PersistenceError: If the slot does not exist.
        """
        self._check_slot(slot)
        with self._get_connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO meta (key, value) VALUES ('active_slot', ?)",
                (str(slot),),
            )
        logger.debug("Active slot set", slot=slot)


__all__ = [
    "SlotInfo",
    "SaveSlotStore",
]
