# triggerhsm/core/states.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import weakref
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from triggerhsm.core.actions import ActionBehavior, ActionKind
from triggerhsm.core.errors import ConfigurationError
from triggerhsm.core.invocation import DEFAULT_FUNCTION_DESCRIPTION
from triggerhsm.core.transitions import TransitionRecord
from triggerhsm.core.triggers import TriggerBehavior, TriggerBehaviorResult
from triggerhsm.interfaces.types import ActionFunc, StateID, TriggerID


class ActionStep(NamedTuple):
    """One slot of actions to run on one node, with the record they receive."""

    node: "StateNode"
    kind: ActionKind
    transition: TransitionRecord

    @property
    def actions(self) -> List[ActionBehavior]:
        return self.node.actions_for(self.kind)


class StateNode:
    """
    Runtime representation of one configured state: its actions, its trigger
    behaviors and its place in the superstate/substate tree.

    Nodes are owned by the machine's arena. The superstate link is held as a
    weak reference so parent and child never own each other.

    Entry and exit traversals are computed as ordered lists of ActionSteps
    (``enter_steps``/``exit_steps``) so the synchronous and the
    suspension-capable paths walk exactly the same sequence.
    """

    def __init__(self, state: StateID, default_function_description: str = DEFAULT_FUNCTION_DESCRIPTION) -> None:
        """
        :param state: The caller's identity for this state.
        :param default_function_description: Description used for anonymous
            callables registered on this node.
        """
        self._state = state
        self._default_function_description = default_function_description
        self._superstate: Optional[weakref.ReferenceType[StateNode]] = None
        self._substates: List[StateNode] = []
        self._active = False
        self._initial_transition_target: Optional[StateID] = None
        self._has_initial_transition = False
        self.trigger_behaviors: Dict[TriggerID, List[TriggerBehavior]] = {}
        self.entry_actions: List[ActionBehavior] = []
        self.exit_actions: List[ActionBehavior] = []
        self.activate_actions: List[ActionBehavior] = []
        self.deactivate_actions: List[ActionBehavior] = []

    def __repr__(self) -> str:
        return f"StateNode({self._state!r})"

    @property
    def state(self) -> StateID:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def superstate(self) -> Optional["StateNode"]:
        if self._superstate is None:
            return None
        return self._superstate()

    @superstate.setter
    def superstate(self, node: Optional["StateNode"]) -> None:
        self._superstate = weakref.ref(node) if node is not None else None

    @property
    def substates(self) -> List["StateNode"]:
        return list(self._substates)

    @property
    def has_initial_transition(self) -> bool:
        return self._has_initial_transition

    @property
    def initial_transition_target(self) -> Optional[StateID]:
        return self._initial_transition_target

    def ancestors(self) -> Iterator["StateNode"]:
        """Yield the superstate chain, nearest first."""
        node = self.superstate
        while node is not None:
            yield node
            node = node.superstate

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def add_trigger_behavior(self, behavior: TriggerBehavior) -> None:
        self.trigger_behaviors.setdefault(behavior.trigger, []).append(behavior)

    def add_entry_action(
        self,
        action: ActionFunc,
        description: Optional[str] = None,
        trigger: Optional[TriggerID] = None,
        is_async: Optional[bool] = None,
    ) -> ActionBehavior:
        """
        Register an entry action, called as ``action(transition, *args)``.

        :param trigger: Only run the action for transitions caused by this trigger.
        """
        behavior = self._create_action(ActionKind.ENTRY, action, description, is_async, trigger)
        self.entry_actions.append(behavior)
        return behavior

    def add_exit_action(
        self, action: ActionFunc, description: Optional[str] = None, is_async: Optional[bool] = None
    ) -> ActionBehavior:
        """Register an exit action, called as ``action(transition)``."""
        behavior = self._create_action(ActionKind.EXIT, action, description, is_async)
        self.exit_actions.append(behavior)
        return behavior

    def add_activate_action(
        self, action: ActionFunc, description: Optional[str] = None, is_async: Optional[bool] = None
    ) -> ActionBehavior:
        behavior = self._create_action(ActionKind.ACTIVATE, action, description, is_async)
        self.activate_actions.append(behavior)
        return behavior

    def add_deactivate_action(
        self, action: ActionFunc, description: Optional[str] = None, is_async: Optional[bool] = None
    ) -> ActionBehavior:
        behavior = self._create_action(ActionKind.DEACTIVATE, action, description, is_async)
        self.deactivate_actions.append(behavior)
        return behavior

    def _create_action(
        self,
        kind: ActionKind,
        action: ActionFunc,
        description: Optional[str],
        is_async: Optional[bool],
        trigger: Optional[TriggerID] = None,
    ) -> ActionBehavior:
        return ActionBehavior.create(
            kind,
            action,
            description,
            state=self._state,
            trigger=trigger,
            is_async=is_async,
            default_function_description=self._default_function_description,
        )

    def add_substate(self, substate: "StateNode") -> None:
        self._substates.append(substate)

    def set_initial_transition(self, target: StateID) -> None:
        if self._has_initial_transition:
            raise ConfigurationError(f"State '{self._state}' already has an initial transition")
        self._initial_transition_target = target
        self._has_initial_transition = True

    def actions_for(self, kind: ActionKind) -> List[ActionBehavior]:
        if kind is ActionKind.ENTRY:
            return self.entry_actions
        if kind is ActionKind.EXIT:
            return self.exit_actions
        if kind is ActionKind.ACTIVATE:
            return self.activate_actions
        if kind is ActionKind.DEACTIVATE:
            return self.deactivate_actions
        raise ValueError(f"States hold no {kind.value} action list")

    # -------------------------------------------------------------------------
    # Hierarchy queries
    # -------------------------------------------------------------------------

    def includes(self, state: StateID) -> bool:
        """True if this node is ``state`` or has it somewhere in its subtree."""
        return self._state == state or any(s.includes(state) for s in self._substates)

    def is_included_in(self, state: StateID) -> bool:
        """True if this node is ``state`` or ``state`` is one of its ancestors."""
        if self._state == state:
            return True
        superstate = self.superstate
        return superstate is not None and superstate.is_included_in(state)

    # -------------------------------------------------------------------------
    # Trigger resolution
    # -------------------------------------------------------------------------

    def try_find_handler(self, trigger: TriggerID, args: Sequence[Any] = ()) -> Tuple[bool, Optional[TriggerBehaviorResult]]:
        """
        Resolve the behavior handling ``trigger``, searching this node first
        and then its ancestors.

        Returns ``(True, result)`` for a permitted behavior. Otherwise returns
        ``(False, result)`` where ``result`` is, when one exists, a candidate
        whose guards were not met (nearest node first), kept for diagnostics.

        :raises ConfigurationError: If more than one candidate on a node has
            all guards met.
        """
        found, local = self._try_find_local_handler(trigger, args)
        if found:
            return True, local

        superstate = self.superstate
        if superstate is None:
            return False, local

        found, inherited = superstate.try_find_handler(trigger, args)
        if found:
            return True, inherited
        return False, local if local is not None else inherited

    def _try_find_local_handler(
        self, trigger: TriggerID, args: Sequence[Any]
    ) -> Tuple[bool, Optional[TriggerBehaviorResult]]:
        candidates = self.trigger_behaviors.get(trigger)
        if not candidates:
            return False, None

        # Each guard is evaluated exactly once here.
        results = [
            TriggerBehaviorResult(behavior, tuple(behavior.unmet_guard_conditions(args)), self)
            for behavior in candidates
        ]
        permitted = [r for r in results if r.is_permitted]
        if len(permitted) > 1:
            raise ConfigurationError(
                f"Multiple permitted exit transitions are configured from state '{self._state}' "
                f"for trigger '{trigger}'. Guard clauses must be mutually exclusive."
            )
        if permitted:
            return True, permitted[0]

        unmet = [r for r in results if not r.is_permitted]
        return False, unmet[0] if unmet else None

    def can_handle(self, trigger: TriggerID, args: Sequence[Any] = ()) -> bool:
        found, _ = self.try_find_handler(trigger, args)
        return found

    def permitted_triggers(self, args: Sequence[Any] = ()) -> List[TriggerID]:
        """
        Triggers with at least one candidate whose guards are met, on this node
        and every ancestor, nearest first and without duplicates.
        """
        result = [
            trigger
            for trigger, behaviors in self.trigger_behaviors.items()
            if any(b.guard_conditions_met(args) for b in behaviors)
        ]
        superstate = self.superstate
        if superstate is not None:
            result.extend(t for t in superstate.permitted_triggers(args) if t not in result)
        return result

    # -------------------------------------------------------------------------
    # Activation
    # -------------------------------------------------------------------------

    def activate(self) -> None:
        """Activate the ancestors, then this node if it is not active yet."""
        superstate = self.superstate
        if superstate is not None:
            superstate.activate()

        if self._active:
            return

        for action in self.activate_actions:
            action.execute()
        self._active = True

    def deactivate(self) -> None:
        """Deactivate this node if active, then its ancestors."""
        if not self._active:
            return

        for action in self.deactivate_actions:
            action.execute()
        self._active = False

        superstate = self.superstate
        if superstate is not None:
            superstate.deactivate()

    async def activate_async(self) -> None:
        superstate = self.superstate
        if superstate is not None:
            await superstate.activate_async()

        if self._active:
            return

        for action in self.activate_actions:
            await action.execute_async()
        self._active = True

    async def deactivate_async(self) -> None:
        if not self._active:
            return

        for action in self.deactivate_actions:
            await action.execute_async()
        self._active = False

        superstate = self.superstate
        if superstate is not None:
            await superstate.deactivate_async()

    # -------------------------------------------------------------------------
    # Entry / exit traversal
    # -------------------------------------------------------------------------

    def enter_steps(self, transition: TransitionRecord) -> List[ActionStep]:
        """
        The ordered entry steps for ``transition`` arriving at this node.
        Ancestors that do not already contain the source are entered first.
        """
        if transition.is_reentry:
            return self._local_entry_steps(transition)

        if transition.is_initial:
            return self._local_entry_steps(transition)

        if self.includes(transition.source):
            return []

        steps: List[ActionStep] = []
        superstate = self.superstate
        if superstate is not None:
            steps.extend(superstate.enter_steps(transition))
        steps.extend(self._local_entry_steps(transition))
        return steps

    def exit_steps(self, transition: TransitionRecord) -> Tuple[List[ActionStep], TransitionRecord]:
        """
        The ordered exit steps for ``transition`` leaving this node, and the
        record traversal ended with. When exiting propagates to the superstate
        the record's source is rewritten to the superstate.
        """
        if transition.is_reentry:
            return self._local_exit_steps(transition), transition

        if self.includes(transition.destination):
            return [], transition

        steps = self._local_exit_steps(transition)

        superstate = self.superstate
        if superstate is not None:
            if self.is_included_in(transition.destination):
                # Destination is an ancestor: stop below it.
                if superstate.state != transition.destination:
                    return self._exit_superstate(steps, superstate, transition)
            else:
                return self._exit_superstate(steps, superstate, transition)

        return steps, transition

    @staticmethod
    def _exit_superstate(
        steps: List[ActionStep], superstate: "StateNode", transition: TransitionRecord
    ) -> Tuple[List[ActionStep], TransitionRecord]:
        inherited, result = superstate.exit_steps(transition.with_source(superstate.state))
        return steps + inherited, result

    def _local_entry_steps(self, transition: TransitionRecord) -> List[ActionStep]:
        return [ActionStep(self, ActionKind.ENTRY, transition), ActionStep(self, ActionKind.ACTIVATE, transition)]

    def _local_exit_steps(self, transition: TransitionRecord) -> List[ActionStep]:
        return [ActionStep(self, ActionKind.DEACTIVATE, transition), ActionStep(self, ActionKind.EXIT, transition)]

    def enter(self, transition: TransitionRecord) -> None:
        run_steps(self.enter_steps(transition))

    def exit(self, transition: TransitionRecord) -> TransitionRecord:
        steps, result = self.exit_steps(transition)
        run_steps(steps)
        return result

    async def enter_async(self, transition: TransitionRecord) -> None:
        await run_steps_async(self.enter_steps(transition))

    async def exit_async(self, transition: TransitionRecord) -> TransitionRecord:
        steps, result = self.exit_steps(transition)
        await run_steps_async(steps)
        return result


def check_steps_sync(steps: Sequence[ActionStep]) -> None:
    """
    Raise InvalidModeError for the first suspension-capable action in
    ``steps`` before any of them runs.
    """
    for step in steps:
        for action in step.actions:
            if action.is_async:
                raise action.mode_error(step.transition)


def run_steps(steps: Sequence[ActionStep]) -> None:
    for step in steps:
        for action in step.actions:
            action.execute(step.transition, step.transition.parameters)


async def run_steps_async(steps: Sequence[ActionStep]) -> None:
    for step in steps:
        for action in step.actions:
            await action.execute_async(step.transition, step.transition.parameters)
