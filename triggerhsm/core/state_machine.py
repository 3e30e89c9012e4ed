# triggerhsm/core/state_machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Tuple

from triggerhsm.core.actions import ActionBehavior
from triggerhsm.core.errors import ConfigurationError
from triggerhsm.core.hooks import TransitionNotifier, UnhandledTriggerHandler
from triggerhsm.core.invocation import DEFAULT_FUNCTION_DESCRIPTION
from triggerhsm.core.states import ActionStep, StateNode, check_steps_sync, run_steps, run_steps_async
from triggerhsm.core.transitions import TransitionRecord
from triggerhsm.core.triggers import TriggerKind
from triggerhsm.interfaces.types import (
    StateAccessor,
    StateID,
    StateMutator,
    TransitionListener,
    TriggerID,
    UnhandledTriggerFunc,
)
from triggerhsm.runtime.trigger_queue import TriggerQueue

logger = logging.getLogger(__name__)


@dataclass
class _TransitionPlan:
    """
    Everything a committed transition will do, computed before any action
    runs: the exit steps, then one entry hop per state the machine moves into
    (the destination, followed by any initial-transition targets).
    """

    completed: TransitionRecord
    exit_steps: List[ActionStep] = field(default_factory=list)
    hops: List[Tuple[StateID, List[ActionStep]]] = field(default_factory=list)

    def all_steps(self) -> Iterator[ActionStep]:
        yield from self.exit_steps
        for _, steps in self.hops:
            yield from steps


@dataclass
class _Resolution:
    """How the current state reacts to one fired trigger."""

    source: StateID
    trigger: TriggerID
    unmet_guards: Tuple[str, ...] = ()
    internal_action: Optional[ActionBehavior] = None
    internal_record: Optional[TransitionRecord] = None
    plan: Optional[_TransitionPlan] = None

    @property
    def is_handled(self) -> bool:
        return self.internal_action is not None or self.plan is not None


class StateMachine:
    """
    Hierarchical state machine over caller-defined state and trigger
    identities.

    The machine owns an arena of StateNodes keyed by state identity. Firing a
    trigger resolves a behavior through the current state's hierarchy, exits
    and enters states in order, and then notifies transition listeners.

    Triggers fired while another trigger is being processed (for example from
    inside an action) are queued and processed in FIFO order once the current
    transition has completed, before the outermost ``fire`` returns.

    Not thread-safe: use one machine from one thread or one event loop.
    """

    def __init__(
        self,
        initial_state: Optional[StateID] = None,
        *,
        state_accessor: Optional[StateAccessor] = None,
        state_mutator: Optional[StateMutator] = None,
        default_function_description: str = DEFAULT_FUNCTION_DESCRIPTION,
    ) -> None:
        """
        :param initial_state: The state the machine starts in, stored by the machine.
        :param state_accessor: Returns the current state, for state stored by the caller.
        :param state_mutator: Stores a new current state, for state stored by the caller.
        :param default_function_description: Description given to anonymous
            callables that are registered without one.
        :raises ConfigurationError: If neither an initial state nor both the
            accessor and mutator are given.
        """
        if state_accessor is not None or state_mutator is not None:
            if state_accessor is None or state_mutator is None:
                raise ConfigurationError("state_accessor and state_mutator must be given together")
            if initial_state is not None:
                raise ConfigurationError("Pass either initial_state or state_accessor/state_mutator, not both")
            self._state_accessor = state_accessor
            self._state_mutator = state_mutator
        else:
            if initial_state is None:
                raise ConfigurationError("initial_state is required")
            self._current_state = initial_state
            self._state_accessor = lambda: self._current_state
            self._state_mutator = self._store_state

        self._default_function_description = default_function_description
        self._nodes: Dict[StateID, StateNode] = {}
        self._queue = TriggerQueue()
        self._firing = False
        self._on_transitioned = TransitionNotifier()
        self._unhandled = UnhandledTriggerHandler()

    def _store_state(self, state: StateID) -> None:
        self._current_state = state

    def __repr__(self) -> str:
        return (
            f"StateMachine(state={self.state!r}, permitted={self.permitted_triggers()!r}, "
            f"states={len(self._nodes)})"
        )

    @property
    def state(self) -> StateID:
        """The current state."""
        return self._state_accessor()

    def _set_state(self, state: StateID) -> None:
        self._state_mutator(state)

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def configure(self, state: StateID) -> StateNode:
        """
        Return the node for ``state``, creating it on first use.
        """
        node = self._nodes.get(state)
        if node is None:
            node = StateNode(state, self._default_function_description)
            self._nodes[state] = node
        return node

    def add_substate(self, superstate: StateID, substate: StateID) -> None:
        """
        Make ``substate`` a child of ``superstate``.

        :raises ConfigurationError: If ``substate`` already has a different
            superstate, or the link would create a cycle.
        """
        parent = self.configure(superstate)
        child = self.configure(substate)

        existing = child.superstate
        if existing is not None:
            if existing is parent:
                return
            raise ConfigurationError(
                f"Cannot re-parent state '{substate}' from '{existing.state}' to '{superstate}'. "
                "Re-parenting is disallowed."
            )
        if parent.is_included_in(substate):
            raise ConfigurationError(f"Adding state '{substate}' to superstate '{superstate}' would create a cycle")

        child.superstate = parent
        parent.add_substate(child)

    def on_transitioned(self, listener: TransitionListener, is_async: Optional[bool] = None) -> None:
        """
        Register a callback run with the completed TransitionRecord after each
        state-changing transition.
        """
        self._on_transitioned.register(listener, is_async)

    def on_unhandled_trigger(self, handler: UnhandledTriggerFunc, is_async: Optional[bool] = None) -> None:
        """
        Replace the default unhandled-trigger policy (raise
        UnhandledTriggerError) with ``handler(state, trigger, unmet_guards)``.
        """
        if handler is None:
            raise ValueError("handler must not be None")
        self._unhandled = UnhandledTriggerHandler(handler, is_async)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def states(self) -> List[StateNode]:
        """All configured nodes, in configuration order."""
        return list(self._nodes.values())

    def get_state_node(self, state: StateID) -> Optional[StateNode]:
        return self._nodes.get(state)

    def _current_node(self) -> StateNode:
        node = self._nodes.get(self.state)
        if node is None:
            # Unconfigured current state: a transient node, not added to the machine.
            node = StateNode(self.state, self._default_function_description)
        return node

    def is_in_state(self, state: StateID) -> bool:
        """True if the current state is ``state`` or one of its substates."""
        return self._current_node().is_included_in(state)

    def can_fire(self, trigger: TriggerID, *args: Any) -> bool:
        return self._current_node().can_handle(trigger, args)

    def permitted_triggers(self, *args: Any) -> List[TriggerID]:
        return self._current_node().permitted_triggers(args)

    # -------------------------------------------------------------------------
    # Activation
    # -------------------------------------------------------------------------

    def activate(self) -> None:
        self._current_node().activate()

    def deactivate(self) -> None:
        self._current_node().deactivate()

    async def activate_async(self) -> None:
        await self._current_node().activate_async()

    async def deactivate_async(self) -> None:
        await self._current_node().deactivate_async()

    # -------------------------------------------------------------------------
    # Firing
    # -------------------------------------------------------------------------

    def fire(self, trigger: TriggerID, *args: Any) -> None:
        """
        Fire ``trigger`` with ``args``, running every action synchronously.

        :raises InvalidModeError: If the transition would run a
            suspension-capable action or listener. Nothing has run and the
            state is unchanged when this is raised.
        :raises UnhandledTriggerError: If nothing handles the trigger and no
            custom handler is registered.
        :raises ConfigurationError: If the trigger resolves ambiguously.
        """
        if not self._accept(trigger, args):
            return

        with self._draining():
            item = self._queue.dequeue()
            while item is not None:
                self._fire_one(item.trigger, item.args)
                item = self._queue.dequeue()

    def _accept(self, trigger: TriggerID, args: Tuple[Any, ...]) -> bool:
        """
        Queue ``trigger``. Returns True if the caller must drain the queue,
        False if an outer fire is already draining it.
        """
        self._queue.enqueue(trigger, args)
        if self._firing:
            logger.debug("Queued trigger %r while another trigger is being processed", trigger)
            return False
        return True

    @contextmanager
    def _draining(self) -> Iterator[None]:
        """
        Mark the machine as firing for the duration of a drain. No trigger
        stays queued once the drain ends, even if it was interrupted.
        """
        self._firing = True
        try:
            yield
        finally:
            self._queue.clear()
            self._firing = False

    async def fire_async(self, trigger: TriggerID, *args: Any) -> None:
        """
        Fire ``trigger`` with ``args``, awaiting suspension-capable actions
        one at a time in the same order the synchronous path uses.
        """
        if not self._accept(trigger, args):
            return

        with self._draining():
            item = self._queue.dequeue()
            while item is not None:
                await self._fire_one_async(item.trigger, item.args)
                item = self._queue.dequeue()

    def _fire_one(self, trigger: TriggerID, args: Tuple[Any, ...]) -> None:
        resolution = self._resolve(trigger, args)

        if not resolution.is_handled:
            logger.debug("Trigger %r is not handled in state %r", trigger, resolution.source)
            self._unhandled.execute(resolution.source, trigger, resolution.unmet_guards)
            return

        if resolution.internal_action is not None:
            resolution.internal_action.execute(resolution.internal_record, args)
            return

        plan = resolution.plan
        check_steps_sync(list(plan.all_steps()))
        self._on_transitioned.check_sync()

        run_steps(plan.exit_steps)
        for state, steps in plan.hops:
            self._set_state(state)
            run_steps(steps)
        self._log_completed(plan.completed)
        self._on_transitioned.invoke(plan.completed)

    async def _fire_one_async(self, trigger: TriggerID, args: Tuple[Any, ...]) -> None:
        resolution = self._resolve(trigger, args)

        if not resolution.is_handled:
            logger.debug("Trigger %r is not handled in state %r", trigger, resolution.source)
            await self._unhandled.execute_async(resolution.source, trigger, resolution.unmet_guards)
            return

        if resolution.internal_action is not None:
            await resolution.internal_action.execute_async(resolution.internal_record, args)
            return

        plan = resolution.plan
        await run_steps_async(plan.exit_steps)
        for state, steps in plan.hops:
            self._set_state(state)
            await run_steps_async(steps)
        self._log_completed(plan.completed)
        await self._on_transitioned.invoke_async(plan.completed)

    @staticmethod
    def _log_completed(record: TransitionRecord) -> None:
        logger.debug(
            "Transitioned from %r to %r on trigger %r (reentry=%s)",
            record.source,
            record.destination,
            record.trigger,
            record.is_reentry,
        )

    def _resolve(self, trigger: TriggerID, args: Tuple[Any, ...]) -> _Resolution:
        source = self.state
        node = self.configure(source)
        logger.debug("Firing trigger %r in state %r", trigger, source)

        found, result = node.try_find_handler(trigger, args)
        if not found:
            unmet = result.unmet_guard_conditions if result is not None else ()
            return _Resolution(source, trigger, unmet_guards=tuple(unmet))

        behavior = result.behavior
        transitions, destination = behavior.results_in_transition_from(source, args)
        if not transitions:
            record = TransitionRecord(source, source, trigger, parameters=args)
            return _Resolution(source, trigger, internal_action=behavior.internal_action, internal_record=record)

        record = TransitionRecord(
            source,
            destination,
            trigger,
            is_reentry=behavior.kind is TriggerKind.REENTRANT,
            parameters=args,
        )
        return _Resolution(source, trigger, plan=self._plan_transition(node, record))

    def _plan_transition(self, node: StateNode, record: TransitionRecord) -> _TransitionPlan:
        if record.is_reentry and record.source != record.destination:
            # Reentrant behavior inherited from an ancestor: leave the
            # substates below it, then re-enter the ancestor itself.
            leaving, _ = node.exit_steps(replace(record, is_reentry=False))
            reentry = TransitionRecord(
                record.destination, record.destination, record.trigger, is_reentry=True, parameters=record.parameters
            )
            reexit, exited = self.configure(record.destination).exit_steps(reentry)
            exit_steps = leaving + reexit
        else:
            exit_steps, exited = node.exit_steps(record)

        current = self.configure(record.destination)
        hops = [(record.destination, current.enter_steps(exited))]

        while current.has_initial_transition:
            target = current.initial_transition_target
            if not any(s.state == target for s in current.substates):
                raise ConfigurationError(
                    f"The target ({target}) for the initial transition of '{current.state}' is not a substate."
                )
            initial = TransitionRecord(
                current.state, target, record.trigger, is_initial=True, parameters=record.parameters
            )
            current = self.configure(target)
            hops.append((target, current.enter_steps(initial)))

        completed = replace(record, destination=current.state)
        return _TransitionPlan(completed=completed, exit_steps=exit_steps, hops=hops)
