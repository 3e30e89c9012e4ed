# triggerhsm/core/triggers.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple

from triggerhsm.core.actions import ActionBehavior, ActionKind
from triggerhsm.core.errors import ConfigurationError
from triggerhsm.core.guards import EMPTY_GUARD, TransitionGuard
from triggerhsm.core.invocation import InvocationInfo
from triggerhsm.interfaces.types import ActionFunc, DestinationSelector, StateID, TriggerID

if TYPE_CHECKING:
    from triggerhsm.core.states import StateNode


class TriggerKind(Enum):
    FIXED = auto()
    REENTRANT = auto()
    INTERNAL = auto()
    DYNAMIC = auto()


@dataclass(frozen=True)
class DynamicTransitionInfo:
    """
    Metadata for a dynamic transition: the selector's description and the
    destinations the caller declared as possible. The declared destinations
    are advisory only and never checked when firing.
    """

    selector: InvocationInfo
    possible_destinations: Tuple[Tuple[StateID, Optional[str]], ...] = ()


@dataclass(frozen=True)
class TriggerBehavior:
    """
    Decides, for a trigger and the fire-time arguments, whether a transition
    occurs and to which destination. Construct through the ``fixed``,
    ``reentrant``, ``internal`` and ``dynamic`` factories.
    """

    kind: TriggerKind
    trigger: TriggerID
    guard: TransitionGuard = field(default=EMPTY_GUARD)
    destination: Optional[StateID] = None
    selector: Optional[DestinationSelector] = None
    dynamic_info: Optional[DynamicTransitionInfo] = None
    internal_action: Optional[ActionBehavior] = None

    @classmethod
    def fixed(cls, trigger: TriggerID, destination: StateID, guard: Optional[TransitionGuard] = None) -> "TriggerBehavior":
        return cls(TriggerKind.FIXED, trigger, guard or EMPTY_GUARD, destination=destination)

    @classmethod
    def reentrant(
        cls, trigger: TriggerID, destination: StateID, guard: Optional[TransitionGuard] = None
    ) -> "TriggerBehavior":
        """``destination`` is the state the behavior is registered on."""
        return cls(TriggerKind.REENTRANT, trigger, guard or EMPTY_GUARD, destination=destination)

    @classmethod
    def internal(
        cls,
        trigger: TriggerID,
        action: ActionFunc,
        guard: Optional[TransitionGuard] = None,
        description: Optional[str] = None,
        is_async: Optional[bool] = None,
    ) -> "TriggerBehavior":
        behavior = ActionBehavior.create(ActionKind.INTERNAL, action, description, is_async=is_async)
        return cls(TriggerKind.INTERNAL, trigger, guard or EMPTY_GUARD, internal_action=behavior)

    @classmethod
    def dynamic(
        cls,
        trigger: TriggerID,
        selector: DestinationSelector,
        guard: Optional[TransitionGuard] = None,
        description: Optional[str] = None,
        possible_destinations: Sequence[Any] = (),
    ) -> "TriggerBehavior":
        """
        :param selector: Called with the fire-time arguments, returns the destination.
        :param description: Optional description of the selector.
        :param possible_destinations: States (or ``(state, description)``
            pairs) the selector may return, for introspection only.
        """
        if selector is None:
            raise ValueError("destination selector must not be None")
        if inspect.iscoroutinefunction(selector):
            raise ConfigurationError("Destination selectors must be synchronous callables")
        destinations = tuple(d if isinstance(d, tuple) else (d, None) for d in possible_destinations)
        info = DynamicTransitionInfo(InvocationInfo.create(selector, description), destinations)
        return cls(TriggerKind.DYNAMIC, trigger, guard or EMPTY_GUARD, selector=selector, dynamic_info=info)

    @property
    def guard_descriptions(self) -> List[str]:
        return self.guard.descriptions

    def guard_conditions_met(self, args: Sequence[Any] = ()) -> bool:
        return self.guard.guard_conditions_met(args)

    def unmet_guard_conditions(self, args: Sequence[Any] = ()) -> List[str]:
        return self.guard.unmet_guard_conditions(args)

    def results_in_transition_from(self, source: StateID, args: Sequence[Any] = ()) -> Tuple[bool, StateID]:
        """
        Return ``(transitions, destination)``. Internal behaviors never change
        state and report ``(False, source)``.
        """
        if self.kind is TriggerKind.FIXED or self.kind is TriggerKind.REENTRANT:
            return True, self.destination
        if self.kind is TriggerKind.INTERNAL:
            return False, source
        if self.kind is TriggerKind.DYNAMIC:
            return True, self.selector(*args)
        raise AssertionError(f"Unknown trigger kind {self.kind!r}")


@dataclass(frozen=True)
class TriggerBehaviorResult:
    """
    Outcome of evaluating one candidate behavior: the behavior, the
    descriptions of its unmet guard conditions, and the node it is
    registered on.
    """

    behavior: TriggerBehavior
    unmet_guard_conditions: Tuple[str, ...] = ()
    owner: Optional["StateNode"] = field(default=None, compare=False)

    @property
    def is_permitted(self) -> bool:
        return not self.unmet_guard_conditions
