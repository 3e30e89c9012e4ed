"""triggerhsm: embeddable hierarchical state machine engine

Tracks a current state over caller-supplied state and trigger identities,
resolves which transition a fired trigger causes, and runs entry, exit,
activation and internal actions in UML-statechart order through a
superstate/substate tree.

Responsibilities:
    - Trigger resolution (guards, ambiguity detection)
    - Fixed, reentrant, internal and dynamic transitions
    - Hierarchical entry/exit/activation
    - Synchronous and suspension-capable (asyncio) firing
    - Transition notification and unhandled-trigger policy

Cross-cutting Concerns:
    Thread Safety:
        - None. One machine belongs to one thread or one event loop.
        - Triggers fired from inside actions are queued, never re-entered.

    Error Handling:
        - Structured error hierarchy rooted at HSMError
        - No retries; errors propagate to the caller of fire/fire_async

    Logging:
        - Standard library logging, DEBUG level only, no handlers installed
"""

from triggerhsm.core import (
    ActionBehavior,
    ActionKind,
    ConfigurationError,
    DynamicTransitionInfo,
    GuardCondition,
    HSMError,
    InvalidModeError,
    InvocationInfo,
    StateMachine,
    StateNode,
    TransitionGuard,
    TransitionNotifier,
    TransitionRecord,
    TriggerBehavior,
    TriggerBehaviorResult,
    TriggerKind,
    UnhandledTriggerError,
    UnhandledTriggerHandler,
)

__version__ = "0.1.0"

__all__ = [
    "ActionBehavior",
    "ActionKind",
    "ConfigurationError",
    "DynamicTransitionInfo",
    "GuardCondition",
    "HSMError",
    "InvalidModeError",
    "InvocationInfo",
    "StateMachine",
    "StateNode",
    "TransitionGuard",
    "TransitionNotifier",
    "TransitionRecord",
    "TriggerBehavior",
    "TriggerBehaviorResult",
    "TriggerKind",
    "UnhandledTriggerError",
    "UnhandledTriggerHandler",
]
