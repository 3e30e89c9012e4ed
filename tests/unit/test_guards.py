# tests/unit/test_guards.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from unittest.mock import MagicMock

import pytest

from triggerhsm.core.errors import ConfigurationError
from triggerhsm.core.guards import EMPTY_GUARD, GuardCondition, TransitionGuard


def test_empty_guard_is_always_met() -> None:
    assert EMPTY_GUARD.is_empty()
    assert EMPTY_GUARD.guard_conditions_met(())
    assert EMPTY_GUARD.unmet_guard_conditions(()) == []


def test_predicates_receive_fire_arguments() -> None:
    predicate = MagicMock(return_value=True)
    guard = TransitionGuard([predicate])
    assert guard.guard_conditions_met((3, "x"))
    predicate.assert_called_once_with(3, "x")


def test_unmet_conditions_in_registration_order() -> None:
    guard = TransitionGuard(
        [
            (lambda n: n > 10, "greater than ten"),
            (lambda n: n > 0, "positive"),
            (lambda n: n % 2 == 0, "even"),
        ]
    )
    assert guard.unmet_guard_conditions((3,)) == ["greater than ten", "even"]
    assert guard.unmet_guard_conditions((12,)) == []


def test_each_predicate_evaluated_once_per_check() -> None:
    first = MagicMock(return_value=False)
    second = MagicMock(return_value=False)
    TransitionGuard([first, second]).unmet_guard_conditions(())
    assert first.call_count == 1
    assert second.call_count == 1


def test_predicate_errors_propagate() -> None:
    def broken(*args) -> bool:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        TransitionGuard([broken]).unmet_guard_conditions(())


def test_from_predicate_and_descriptions() -> None:
    def has_credit(amount) -> bool:
        return amount > 0

    guard = TransitionGuard.from_predicate(has_credit)
    assert guard.descriptions == ["has_credit"]
    assert len(guard) == 1


def test_async_predicate_is_rejected() -> None:
    async def check() -> bool:
        return True

    with pytest.raises(ConfigurationError):
        GuardCondition.create(check)


def test_none_predicate_is_rejected() -> None:
    with pytest.raises(ValueError):
        GuardCondition.create(None)
