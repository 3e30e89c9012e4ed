# triggerhsm/core/__init__.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

# Import order matters to avoid circular dependencies
from .errors import ConfigurationError, HSMError, InvalidModeError, UnhandledTriggerError
from .invocation import InvocationInfo
from .transitions import TransitionRecord
from .actions import ActionBehavior, ActionKind
from .guards import GuardCondition, TransitionGuard
from .triggers import DynamicTransitionInfo, TriggerBehavior, TriggerBehaviorResult, TriggerKind
from .states import StateNode
from .hooks import TransitionNotifier, UnhandledTriggerHandler
from .state_machine import StateMachine

__all__ = [
    # Errors
    "HSMError",
    "ConfigurationError",
    "InvalidModeError",
    "UnhandledTriggerError",
    # Behaviors
    "ActionBehavior",
    "ActionKind",
    "GuardCondition",
    "TransitionGuard",
    "TriggerBehavior",
    "TriggerBehaviorResult",
    "TriggerKind",
    "DynamicTransitionInfo",
    "InvocationInfo",
    # Runtime structure
    "StateNode",
    "TransitionRecord",
    "TransitionNotifier",
    "UnhandledTriggerHandler",
    "StateMachine",
]
