# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import List

import pytest

from triggerhsm.core.state_machine import StateMachine
from triggerhsm.core.triggers import TriggerBehavior


class Trace:
    """Collects labelled calls in the order they happen."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    def record(self, label: str):
        """Return a callable accepting any arguments that appends ``label``."""

        def _action(*args, **kwargs) -> None:
            self.calls.append(label)

        return _action

    def record_async(self, label: str):
        async def _action(*args, **kwargs) -> None:
            self.calls.append(label)

        return _action


@pytest.fixture
def trace() -> Trace:
    return Trace()


@pytest.fixture
def turnstile(trace: Trace) -> StateMachine:
    """Locked/Unlocked machine with traced entry and exit actions."""
    machine = StateMachine("Locked")
    locked = machine.configure("Locked")
    unlocked = machine.configure("Unlocked")

    locked.add_trigger_behavior(TriggerBehavior.fixed("Coin", "Unlocked"))
    locked.add_exit_action(trace.record("exit:Locked"))
    locked.add_entry_action(trace.record("enter:Locked"))
    unlocked.add_trigger_behavior(TriggerBehavior.fixed("Push", "Locked"))
    unlocked.add_entry_action(trace.record("enter:Unlocked"))
    unlocked.add_exit_action(trace.record("exit:Unlocked"))
    return machine


@pytest.fixture
def hierarchy(trace: Trace) -> StateMachine:
    """
    Root
    |-- Super
    |   |-- Sub
    |   `-- Sibling
    `-- Other
    """
    machine = StateMachine("Sub")
    for name in ("Root", "Super", "Sub", "Sibling", "Other"):
        node = machine.configure(name)
        node.add_entry_action(trace.record(f"enter:{name}"))
        node.add_exit_action(trace.record(f"exit:{name}"))
    machine.add_substate("Root", "Super")
    machine.add_substate("Root", "Other")
    machine.add_substate("Super", "Sub")
    machine.add_substate("Super", "Sibling")
    return machine
