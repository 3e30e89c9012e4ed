# tests/unit/test_triggers.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from unittest.mock import MagicMock

import pytest

from triggerhsm.core.actions import ActionKind
from triggerhsm.core.errors import ConfigurationError
from triggerhsm.core.guards import TransitionGuard
from triggerhsm.core.triggers import TriggerBehavior, TriggerKind


def test_fixed_transition_reports_static_destination() -> None:
    behavior = TriggerBehavior.fixed("go", "B")
    assert behavior.kind is TriggerKind.FIXED
    assert behavior.results_in_transition_from("A", ()) == (True, "B")


def test_reentrant_transition_targets_owner() -> None:
    behavior = TriggerBehavior.reentrant("again", "A")
    assert behavior.kind is TriggerKind.REENTRANT
    assert behavior.results_in_transition_from("A", ()) == (True, "A")


def test_internal_transition_never_changes_state() -> None:
    action = MagicMock()
    behavior = TriggerBehavior.internal("tick", action, description="count ticks")
    assert behavior.results_in_transition_from("A", ()) == (False, "A")
    assert behavior.internal_action.kind is ActionKind.INTERNAL
    assert behavior.internal_action.description.description == "count ticks"
    action.assert_not_called()


def test_dynamic_transition_evaluates_selector_with_args() -> None:
    selector = MagicMock(side_effect=lambda n: "Big" if n > 5 else "Small")
    behavior = TriggerBehavior.dynamic("size", selector)
    assert behavior.results_in_transition_from("A", (10,)) == (True, "Big")
    assert behavior.results_in_transition_from("A", (1,)) == (True, "Small")
    assert selector.call_count == 2


def test_dynamic_info_records_possible_destinations() -> None:
    def pick(n):
        return "B"

    behavior = TriggerBehavior.dynamic("go", pick, possible_destinations=["B", ("C", "when negative")])
    info = behavior.dynamic_info
    assert info.selector.description == "pick"
    assert info.possible_destinations == (("B", None), ("C", "when negative"))


def test_dynamic_destination_is_not_validated() -> None:
    behavior = TriggerBehavior.dynamic("go", lambda: "Elsewhere", possible_destinations=["B"])
    assert behavior.results_in_transition_from("A", ()) == (True, "Elsewhere")


def test_async_selector_is_rejected() -> None:
    async def pick():
        return "B"

    with pytest.raises(ConfigurationError):
        TriggerBehavior.dynamic("go", pick)


def test_guard_helpers_delegate_to_guard() -> None:
    guard = TransitionGuard([(lambda n: n > 0, "positive")])
    behavior = TriggerBehavior.fixed("go", "B", guard)
    assert behavior.guard_descriptions == ["positive"]
    assert behavior.guard_conditions_met((1,))
    assert behavior.unmet_guard_conditions((-1,)) == ["positive"]


def test_unguarded_behavior_uses_empty_guard() -> None:
    behavior = TriggerBehavior.fixed("go", "B")
    assert behavior.guard.is_empty()
    assert behavior.unmet_guard_conditions(()) == []
