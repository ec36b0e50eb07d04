"""The single active-action slot.

Combat and skill actions share one slot; starting either one goes through
:func:`stop_active_action` first so two actions can never run together.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from idle_engine.core.exceptions import StunnedError
from idle_engine.core.logging import get_logger
from idle_engine.engine.context import EngineEventType
from idle_engine.models.definitions import CookingAction
from idle_engine.models.state import ActiveSkillAction


if TYPE_CHECKING:
    from idle_engine.engine.context import EngineContext
    from idle_engine.models.enums import StopReason
    from idle_engine.models.state import GameState

logger = get_logger(__name__)


def require_not_stunned(state: GameState) -> None:
    """Reject player-initiated actions while stunned.

    Raises:
        StunnedError: If a stun is active.
    """
    if state.stunned.is_stunned:
        raise StunnedError(ticks_remaining=state.stunned.ticks_remaining)


def _is_cooking(state: GameState, ctx: EngineContext) -> bool:
    active = state.active_action
    if not isinstance(active, ActiveSkillAction):
        return False
    return isinstance(ctx.registry.actions.get(active.action_id), CookingAction)


def _reset_passive_cooking(state: GameState) -> None:
    """Drop partial progress in every cooking area; it restarts from a full cook."""
    for area_state in state.cooking_areas.values():
        area_state.progress_ticks_remaining = 0


def stop_active_action(state: GameState, ctx: EngineContext, reason: StopReason) -> str | None:
    """Tear down whatever occupies the active slot.

    Args:
        state: Working state.
        ctx: Engine context for events.
        reason: Why the action is ending.

    Returns:
        Identifier of the stopped action, or None if the slot was empty.
    """
    action_id = state.active_action_id
    if action_id is None:
        return None
    kind = state.active_action.kind if state.active_action is not None else None
    if _is_cooking(state, ctx):
        _reset_passive_cooking(state)
    state.active_action = None
    state.last_stop_reason = reason
    logger.info("Action stopped", action_id=action_id, kind=kind, reason=reason.value)
    ctx.emit(EngineEventType.ACTION_STOPPED, action_id=action_id, kind=kind, reason=reason.value)
    return action_id


__all__ = [
    "require_not_stunned",
    "stop_active_action",
]
