# triggerhsm/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, List, Optional


class HSMError(Exception):
    """
    Base exception class for errors within the hierarchical state machine library.
    """


class ConfigurationError(HSMError):
    """
    Raised when the configured state graph cannot be used as built: ambiguous
    transitions, invalid hierarchy links, bad initial transitions, or missing
    constructor arguments.
    """


class InvalidModeError(HSMError):
    """
    Raised when a suspension-capable action, handler or listener is invoked
    through the synchronous fire path.
    """


class UnhandledTriggerError(HSMError):
    """
    Raised by the default unhandled-trigger policy when no trigger behavior
    resolves for a fired trigger.
    """

    def __init__(self, state: Any, trigger: Any, unmet_guards: Optional[List[str]] = None) -> None:
        self.state = state
        self.trigger = trigger
        self.unmet_guards = list(unmet_guards or [])
        if self.unmet_guards:
            message = (
                f"Trigger '{trigger}' is valid for transition from state '{state}' but guard conditions "
                f"are not met. Guard descriptions: '{', '.join(self.unmet_guards)}'."
            )
        else:
            message = f"No valid leaving transitions are permitted from state '{state}' for trigger '{trigger}'."
        super().__init__(message)
