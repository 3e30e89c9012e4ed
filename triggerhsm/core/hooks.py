# triggerhsm/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from typing import Any, List, NamedTuple, Optional, Sequence

from triggerhsm.core.actions import is_async_callable
from triggerhsm.core.errors import InvalidModeError, UnhandledTriggerError
from triggerhsm.core.transitions import TransitionRecord
from triggerhsm.interfaces.types import StateID, TransitionListener, TriggerID, UnhandledTriggerFunc


class _Listener(NamedTuple):
    func: TransitionListener
    is_async: bool


class TransitionNotifier:
    """
    Multicast registry of callbacks run once a transition has committed.

    Synchronous dispatch refuses to run while any suspension-capable listener
    is registered. Suspension-capable dispatch runs the synchronous listeners
    first, then awaits each suspension-capable listener in turn.
    """

    def __init__(self) -> None:
        self._listeners: List[_Listener] = []

    def register(self, listener: TransitionListener, is_async: Optional[bool] = None) -> None:
        """
        Add a listener, called as ``listener(transition)``.

        :param is_async: Force the execution mode instead of detecting it.
        """
        if listener is None:
            raise ValueError("listener must not be None")
        self._listeners.append(_Listener(listener, is_async_callable(listener, is_async)))

    @property
    def has_async_listeners(self) -> bool:
        return any(entry.is_async for entry in self._listeners)

    def __len__(self) -> int:
        return len(self._listeners)

    def check_sync(self) -> None:
        """
        :raises InvalidModeError: If a suspension-capable listener is registered.
        """
        if self.has_async_listeners:
            raise InvalidModeError(
                "Cannot execute asynchronous action specified as on_transitioned callback. "
                "Use asynchronous version of fire (fire_async)."
            )

    def invoke(self, transition: TransitionRecord) -> None:
        self.check_sync()
        for entry in self._listeners:
            entry.func(transition)

    async def invoke_async(self, transition: TransitionRecord) -> None:
        for entry in self._listeners:
            if not entry.is_async:
                entry.func(transition)
        for entry in self._listeners:
            if entry.is_async:
                await entry.func(transition)


class UnhandledTriggerHandler:
    """
    Policy run when a fired trigger resolves to no behavior.

    Without a custom handler, raises UnhandledTriggerError. A custom handler
    is called as ``handler(state, trigger, unmet_guard_descriptions)``.
    """

    def __init__(self, handler: Optional[UnhandledTriggerFunc] = None, is_async: Optional[bool] = None) -> None:
        self._handler = handler
        self._is_async = handler is not None and is_async_callable(handler, is_async)

    @property
    def is_default(self) -> bool:
        return self._handler is None

    @property
    def is_async(self) -> bool:
        return self._is_async

    def check_sync(self) -> None:
        if self._is_async:
            raise InvalidModeError(
                "Cannot execute asynchronous action specified in on_unhandled_trigger. "
                "Use asynchronous version of fire (fire_async)."
            )

    def execute(self, state: StateID, trigger: TriggerID, unmet_guards: Sequence[str]) -> None:
        self.check_sync()
        if self._handler is None:
            raise UnhandledTriggerError(state, trigger, list(unmet_guards))
        self._handler(state, trigger, list(unmet_guards))

    async def execute_async(self, state: StateID, trigger: TriggerID, unmet_guards: Sequence[str]) -> Any:
        if self._handler is None:
            raise UnhandledTriggerError(state, trigger, list(unmet_guards))
        if self._is_async:
            await self._handler(state, trigger, list(unmet_guards))
        else:
            self._handler(state, trigger, list(unmet_guards))
