# tests/unit/test_invocation.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from triggerhsm.core.invocation import InvocationInfo


def named_action() -> None:
    pass


def test_description_uses_method_name() -> None:
    info = InvocationInfo.create(named_action)
    assert info.method_name == "named_action"
    assert info.description == "named_action"
    assert not info.is_async


def test_user_description_wins() -> None:
    info = InvocationInfo.create(named_action, "Start the engine")
    assert info.description == "Start the engine"
    assert str(info) == "Start the engine"


def test_lambda_uses_default_description() -> None:
    info = InvocationInfo.create(lambda: None)
    assert info.method_name == "<lambda>"
    assert info.description == "Function"


def test_default_description_is_per_instance() -> None:
    custom = InvocationInfo.create(lambda: None, default_function_description="Anonymous")
    standard = InvocationInfo.create(lambda: None)
    assert custom.description == "Anonymous"
    assert standard.description == "Function"


def test_missing_callable_describes_as_null() -> None:
    assert InvocationInfo.create(None).description == "<null>"


def test_async_flag_is_recorded() -> None:
    assert InvocationInfo.create(named_action, is_async=True).is_async
