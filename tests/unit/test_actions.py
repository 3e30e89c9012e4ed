# tests/unit/test_actions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from unittest.mock import MagicMock

import pytest

from triggerhsm.core.actions import ActionBehavior, ActionKind, is_async_callable
from triggerhsm.core.errors import InvalidModeError
from triggerhsm.core.transitions import TransitionRecord


@pytest.fixture
def transition() -> TransitionRecord:
    return TransitionRecord("A", "B", "go", parameters=(1, 2))


async def async_action(*args) -> None:
    pass


def test_detects_coroutine_functions() -> None:
    assert is_async_callable(async_action)
    assert not is_async_callable(lambda: None)
    assert not is_async_callable(MagicMock())


def test_explicit_mode_overrides_detection() -> None:
    assert is_async_callable(lambda: None, is_async=True)
    assert not is_async_callable(async_action, is_async=False)


def test_callable_object_with_async_call() -> None:
    class Handler:
        async def __call__(self, transition) -> None:
            pass

    assert is_async_callable(Handler())


def test_entry_action_receives_transition_and_args(transition: TransitionRecord) -> None:
    func = MagicMock()
    behavior = ActionBehavior.create(ActionKind.ENTRY, func, state="B")
    behavior.execute(transition, transition.parameters)
    func.assert_called_once_with(transition, 1, 2)


def test_exit_action_receives_transition_only(transition: TransitionRecord) -> None:
    func = MagicMock()
    ActionBehavior.create(ActionKind.EXIT, func, state="A").execute(transition, (1, 2))
    func.assert_called_once_with(transition)


def test_activate_action_takes_no_arguments() -> None:
    func = MagicMock()
    ActionBehavior.create(ActionKind.ACTIVATE, func, state="A").execute()
    func.assert_called_once_with()


def test_from_trigger_entry_action_filters(transition: TransitionRecord) -> None:
    func = MagicMock()
    behavior = ActionBehavior.create(ActionKind.ENTRY, func, state="B", trigger="other")
    behavior.execute(transition, ())
    func.assert_not_called()

    behavior = ActionBehavior.create(ActionKind.ENTRY, func, state="B", trigger="go")
    behavior.execute(transition, ())
    func.assert_called_once_with(transition)


def test_async_entry_action_refuses_sync_execution(transition: TransitionRecord) -> None:
    behavior = ActionBehavior.create(ActionKind.ENTRY, async_action, state="B")
    with pytest.raises(InvalidModeError, match="on_entry for 'B' state.*fire_async"):
        behavior.execute(transition, ())


def test_async_exit_action_names_source_state(transition: TransitionRecord) -> None:
    behavior = ActionBehavior.create(ActionKind.EXIT, async_action, state="A")
    with pytest.raises(InvalidModeError, match="on_exit for 'A' state"):
        behavior.execute(transition)


def test_async_activate_action_names_owner() -> None:
    behavior = ActionBehavior.create(ActionKind.ACTIVATE, async_action, state="Running")
    with pytest.raises(InvalidModeError, match="on_activate for 'Running' state"):
        behavior.execute()


def test_description_is_captured() -> None:
    behavior = ActionBehavior.create(ActionKind.ENTRY, async_action, "Load settings")
    assert behavior.description.description == "Load settings"
    assert behavior.description.method_name == "async_action"
    assert behavior.is_async


def test_none_action_rejected() -> None:
    with pytest.raises(ValueError):
        ActionBehavior.create(ActionKind.ENTRY, None)


@pytest.mark.asyncio
async def test_sync_action_completes_on_async_path(transition: TransitionRecord) -> None:
    func = MagicMock()
    await ActionBehavior.create(ActionKind.ENTRY, func).execute_async(transition, (1,))
    func.assert_called_once_with(transition, 1)


@pytest.mark.asyncio
async def test_async_action_is_awaited(transition: TransitionRecord) -> None:
    seen = []

    async def action(t, *args) -> None:
        seen.append((t, args))

    await ActionBehavior.create(ActionKind.INTERNAL, action).execute_async(transition, (5,))
    assert seen == [(transition, (5,))]
