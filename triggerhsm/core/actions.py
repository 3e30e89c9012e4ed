# triggerhsm/core/actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from triggerhsm.core.errors import InvalidModeError
from triggerhsm.core.invocation import DEFAULT_FUNCTION_DESCRIPTION, InvocationInfo
from triggerhsm.core.transitions import TransitionRecord
from triggerhsm.interfaces.types import ActionFunc, StateID, TriggerID


class ActionKind(Enum):
    """The slot an action occupies on a state."""

    ENTRY = "on_entry"
    EXIT = "on_exit"
    ACTIVATE = "on_activate"
    DEACTIVATE = "on_deactivate"
    INTERNAL = "internal transition"


def is_async_callable(func: Any, is_async: Optional[bool] = None) -> bool:
    """
    Decide the execution mode of a callable. An explicit ``is_async`` wins,
    otherwise coroutine functions (and objects whose ``__call__`` is one) are
    suspension-capable.
    """
    if is_async is not None:
        return is_async
    return inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(getattr(func, "__call__", None))


@dataclass(frozen=True)
class ActionBehavior:
    """
    Uniform wrapper around a user-supplied side effect.

    Every behavior can be run through ``execute`` (synchronous) and
    ``execute_async`` (suspension-capable). A synchronous behavior run through
    ``execute_async`` completes immediately; a suspension-capable behavior run
    through ``execute`` raises InvalidModeError.

    The callable is invoked according to its kind:

    - ENTRY, INTERNAL: ``func(transition, *args)``
    - EXIT: ``func(transition)``
    - ACTIVATE, DEACTIVATE: ``func()``
    """

    kind: ActionKind
    func: ActionFunc
    description: InvocationInfo
    state: Optional[StateID] = None
    from_trigger: Optional[TriggerID] = None

    @classmethod
    def create(
        cls,
        kind: ActionKind,
        func: ActionFunc,
        description: Optional[str] = None,
        state: Optional[StateID] = None,
        trigger: Optional[TriggerID] = None,
        is_async: Optional[bool] = None,
        default_function_description: str = DEFAULT_FUNCTION_DESCRIPTION,
    ) -> "ActionBehavior":
        """
        Build a behavior, detecting its execution mode from ``func``.

        :param kind: The slot the action is registered in.
        :param func: The user callable.
        :param description: Optional user text for diagnostics.
        :param state: The state owning the action.
        :param trigger: For ENTRY actions, restrict the action to transitions
            caused by this trigger.
        :param is_async: Force the execution mode instead of detecting it.
        """
        if func is None:
            raise ValueError("action must not be None")
        mode = is_async_callable(func, is_async)
        info = InvocationInfo.create(func, description, mode, default_function_description)
        return cls(kind=kind, func=func, description=info, state=state, from_trigger=trigger)

    @property
    def is_async(self) -> bool:
        return self.description.is_async

    def applies_to(self, transition: Optional[TransitionRecord]) -> bool:
        if self.from_trigger is None or transition is None:
            return True
        return transition.trigger == self.from_trigger

    def _arguments(self, transition: Optional[TransitionRecord], args: Tuple[Any, ...]) -> Tuple[Any, ...]:
        if self.kind in (ActionKind.ACTIVATE, ActionKind.DEACTIVATE):
            return ()
        if self.kind is ActionKind.EXIT:
            return (transition,)
        return (transition,) + tuple(args)

    def _context_state(self, transition: Optional[TransitionRecord]) -> Any:
        if transition is None:
            return self.state
        if self.kind is ActionKind.ENTRY:
            return transition.destination
        if self.kind in (ActionKind.EXIT, ActionKind.INTERNAL):
            return transition.source
        return self.state

    def mode_error(self, transition: Optional[TransitionRecord] = None) -> InvalidModeError:
        """The error raised when this behavior is run on the synchronous path."""
        return InvalidModeError(
            f"Cannot execute asynchronous action specified in {self.kind.value} for "
            f"'{self._context_state(transition)}' state. Use asynchronous version of fire (fire_async)."
        )

    def execute(self, transition: Optional[TransitionRecord] = None, args: Tuple[Any, ...] = ()) -> None:
        """
        Run the action synchronously.

        :raises InvalidModeError: If the action is suspension-capable.
        """
        if self.is_async:
            raise self.mode_error(transition)
        if not self.applies_to(transition):
            return
        self.func(*self._arguments(transition, args))

    async def execute_async(self, transition: Optional[TransitionRecord] = None, args: Tuple[Any, ...] = ()) -> None:
        """Run the action, awaiting it if it is suspension-capable."""
        if not self.applies_to(transition):
            return
        if self.is_async:
            await self.func(*self._arguments(transition, args))
        else:
            self.func(*self._arguments(transition, args))
