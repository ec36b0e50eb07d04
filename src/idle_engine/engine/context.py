"""Shared context threaded through engine operations.

Every operation that reads definitions, rolls randomness or reports what
happened receives an :class:`EngineContext`. Events are buffered on the
context and delivered to handlers by the engine once the operation commits.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from idle_engine.core.config import Settings
from idle_engine.models.registry import Registry


class EngineEventType(StrEnum):
    """Kinds of events the engine publishes."""

    ACTION_STARTED = "action_started"
    ACTION_STOPPED = "action_stopped"
    ACTION_COMPLETED = "action_completed"
    MONSTER_SPAWNED = "monster_spawned"
    MONSTER_KILLED = "monster_killed"
    PLAYER_DIED = "player_died"
    PLAYER_STUNNED = "player_stunned"
    SEQUENCE_COMPLETED = "sequence_completed"
    SLAYER_TASK_COMPLETED = "slayer_task_completed"
    LEVEL_UP = "level_up"
    MARK_DISCOVERED = "mark_discovered"
    CROP_HARVESTED = "crop_harvested"
    CROP_FAILED = "crop_failed"
    TOWNSHIP_UPDATED = "township_updated"
    SEASON_CHANGED = "season_changed"


class EngineEvent:
    """Something that happened during a command or tick.

    Attributes:
        event_type: Type of the event.
        data: Event data payload.
        tick: Elapsed engine ticks when the event was emitted.
    """

    def __init__(
        self,
        event_type: EngineEventType,
        data: dict[str, Any] | None = None,
        *,
        tick: int = 0,
    ) -> None:
        """Initialize an engine event.

        Args:
            event_type: Type identifier for the event.
            data: Optional event data payload.
            tick: Elapsed engine ticks when the event was emitted.
        """
        self.event_type = event_type
        self.data = data or {}
        self.tick = tick

    def __repr__(self) -> str:
        return f"EngineEvent({self.event_type.value!r}, {self.data!r}, tick={self.tick})"


@dataclass
class EngineContext:
    """Collaborators available to every engine operation.

    Attributes:
        registry: Static game data.
        rng: Random source; seed it for reproducible runs.
        settings: Engine configuration.
        events: Events emitted since the buffer was last drained.
    """

    registry: Registry
    rng: random.Random
    settings: Settings
    events: list[EngineEvent] = field(default_factory=list)
    tick: int = 0

    def emit(self, event_type: EngineEventType, **data: Any) -> None:
        """Buffer an event."""
        self.events.append(EngineEvent(event_type, data, tick=self.tick))

    def drain(self) -> list[EngineEvent]:
        """Return and clear buffered events."""
        events, self.events = self.events, []
        return events

    @property
    def strict(self) -> bool:
        """Whether unknown registry ids should raise."""
        return self.settings.engine.strict_lookups


__all__ = [
    "EngineEventType",
    "EngineEvent",
    "EngineContext",
]
