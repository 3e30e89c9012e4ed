# triggerhsm/core/transitions.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Tuple

from triggerhsm.interfaces.types import StateID, TriggerID


@dataclass(frozen=True)
class TransitionRecord:
    """
    Immutable description of one concrete transition: where the machine came
    from, where it is going, the trigger that caused it and the fire-time
    arguments.

    ``is_reentry`` is only set for transitions produced by a reentrant trigger
    behavior; a fixed transition whose destination happens to equal its source
    is not a reentry. ``is_initial`` marks the hop into a state's initial
    substate.
    """

    source: StateID
    destination: StateID
    trigger: TriggerID
    is_reentry: bool = False
    is_initial: bool = False
    parameters: Tuple[Any, ...] = ()

    def with_source(self, source: StateID) -> "TransitionRecord":
        """Return a copy of this record starting from ``source``."""
        return replace(self, source=source)
