"""Pydantic V2 schemas for in-progress combat.

A :class:`CombatActionState` exists only while combat is the active action.
Its ``context`` says where the monster came from: a single chosen monster
(optionally inside a slayer area) or an ordered dungeon/stronghold run.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from idle_engine.models.enums import CombatPhase, SequenceType


class MonsterCombatContext(BaseModel):
    """Fighting one chosen monster repeatedly.

    Attributes:
        monster_id: Monster being fought.
        area_id: Slayer or combat area the monster was chosen from.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    kind: Literal["monster"] = "monster"
    monster_id: str = Field(min_length=1)
    area_id: str | None = None


class SequenceCombatContext(BaseModel):
    """Progress through an ordered dungeon or stronghold run.

    Attributes:
        sequence_type: Dungeon or stronghold.
        sequence_id: Identifier of the sequence definition.
        current_monster_index: Index of the monster being fought.
        monster_ids: Ordered monsters; copied from the definition at start.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    kind: Literal["sequence"] = "sequence"
    sequence_type: SequenceType
    sequence_id: str = Field(min_length=1)
    current_monster_index: Annotated[int, Field(ge=0)] = 0
    monster_ids: tuple[str, ...] = Field(min_length=1)

    @property
    def current_monster_id(self) -> str:
        """Monster currently being fought."""
        return self.monster_ids[self.current_monster_index]

    @property
    def is_last_monster(self) -> bool:
        """Whether the current monster is the final one in the run."""
        return self.current_monster_index >= len(self.monster_ids) - 1

    @property
    def progress(self) -> tuple[int, int]:
        """(index, length) pair for progress display."""
        return (self.current_monster_index, len(self.monster_ids))

    def advance(self) -> None:
        """Move to the next monster, wrapping to the start after the last."""
        self.current_monster_index = (self.current_monster_index + 1) % len(self.monster_ids)


CombatContext = Annotated[
    Union[MonsterCombatContext, SequenceCombatContext],
    Field(discriminator="kind"),
]


class CombatActionState(BaseModel):
    """Mutable per-encounter combat state.

    Attributes:
        monster_id: Monster currently spawned or spawning.
        monster_hp: Monster's remaining hitpoints.
        player_attack_ticks_remaining: Ticks until the player's next attack.
        monster_attack_ticks_remaining: Ticks until the monster's next attack.
        spawn_ticks_remaining: Ticks until the monster spawns; None once spawned.
        context: Where the monster came from.
        kills: Monsters killed since combat started.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    monster_id: str = Field(min_length=1)
    monster_hp: Annotated[int, Field(ge=0)] = 0
    player_attack_ticks_remaining: Annotated[int, Field(ge=0)] = 0
    monster_attack_ticks_remaining: Annotated[int, Field(ge=0)] = 0
    spawn_ticks_remaining: Annotated[int, Field(ge=0)] | None = None
    context: CombatContext
    kills: Annotated[int, Field(ge=0)] = 0

    @property
    def is_spawning(self) -> bool:
        """Whether the monster is still spawning."""
        return self.spawn_ticks_remaining is not None

    @property
    def phase(self) -> CombatPhase:
        """Spawning or active."""
        return CombatPhase.SPAWNING if self.is_spawning else CombatPhase.ACTIVE


__all__ = [
    "MonsterCombatContext",
    "SequenceCombatContext",
    "CombatContext",
    "CombatActionState",
]
