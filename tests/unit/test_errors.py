# tests/unit/test_errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import pytest

from triggerhsm.core.errors import ConfigurationError, HSMError, InvalidModeError, UnhandledTriggerError


def test_error_hierarchy() -> None:
    """All library errors derive from HSMError."""
    for cls in (ConfigurationError, InvalidModeError, UnhandledTriggerError):
        assert issubclass(cls, HSMError)
    assert issubclass(HSMError, Exception)


def test_unhandled_error_without_guards() -> None:
    err = UnhandledTriggerError("Idle", "Go")
    assert err.state == "Idle"
    assert err.trigger == "Go"
    assert err.unmet_guards == []
    assert "No valid leaving transitions are permitted from state 'Idle' for trigger 'Go'" in str(err)


def test_unhandled_error_lists_unmet_guards() -> None:
    err = UnhandledTriggerError("Idle", "Go", ["has fuel", "engine ok"])
    assert err.unmet_guards == ["has fuel", "engine ok"]
    assert "guard conditions are not met" in str(err)
    assert "has fuel, engine ok" in str(err)


def test_unhandled_error_can_be_caught_as_base() -> None:
    with pytest.raises(HSMError):
        raise UnhandledTriggerError(1, 2)
