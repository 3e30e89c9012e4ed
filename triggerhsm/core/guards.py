# triggerhsm/core/guards.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from triggerhsm.core.errors import ConfigurationError
from triggerhsm.core.invocation import DEFAULT_FUNCTION_DESCRIPTION, InvocationInfo
from triggerhsm.interfaces.types import GuardPredicate


@dataclass(frozen=True)
class GuardCondition:
    """A single guard predicate with its diagnostic description."""

    predicate: GuardPredicate
    description: InvocationInfo

    @classmethod
    def create(
        cls,
        predicate: GuardPredicate,
        description: Optional[str] = None,
        default_function_description: str = DEFAULT_FUNCTION_DESCRIPTION,
    ) -> "GuardCondition":
        if predicate is None:
            raise ValueError("guard predicate must not be None")
        if inspect.iscoroutinefunction(predicate):
            raise ConfigurationError("Guard predicates must be synchronous callables")
        return cls(predicate, InvocationInfo.create(predicate, description, False, default_function_description))

    def is_met(self, args: Sequence[Any]) -> bool:
        return bool(self.predicate(*args))


GuardLike = Union[GuardCondition, GuardPredicate, Tuple[GuardPredicate, Optional[str]]]


class TransitionGuard:
    """
    An ordered collection of guard conditions attached to a trigger behavior.
    The empty guard is always satisfied.

    Exceptions raised by a predicate are not caught: they abort the fire call.
    """

    def __init__(self, conditions: Iterable[GuardLike] = ()) -> None:
        """
        :param conditions: GuardCondition objects, bare predicates, or
            ``(predicate, description)`` pairs.
        """
        self._conditions: List[GuardCondition] = [_to_condition(c) for c in conditions]

    @classmethod
    def from_predicate(cls, predicate: GuardPredicate, description: Optional[str] = None) -> "TransitionGuard":
        return cls([GuardCondition.create(predicate, description)])

    @property
    def conditions(self) -> List[GuardCondition]:
        return list(self._conditions)

    @property
    def descriptions(self) -> List[str]:
        return [c.description.description for c in self._conditions]

    def is_empty(self) -> bool:
        return not self._conditions

    def guard_conditions_met(self, args: Sequence[Any] = ()) -> bool:
        return all(c.is_met(args) for c in self._conditions)

    def unmet_guard_conditions(self, args: Sequence[Any] = ()) -> List[str]:
        """
        Evaluate every condition once and return the descriptions of those
        that are not met, in registration order.
        """
        return [c.description.description for c in self._conditions if not c.is_met(args)]

    def __len__(self) -> int:
        return len(self._conditions)

    def __repr__(self) -> str:
        return f"TransitionGuard({self.descriptions!r})"


EMPTY_GUARD = TransitionGuard()


def _to_condition(item: GuardLike) -> GuardCondition:
    if isinstance(item, GuardCondition):
        return item
    if isinstance(item, tuple):
        predicate, description = item
        return GuardCondition.create(predicate, description)
    return GuardCondition.create(item)
