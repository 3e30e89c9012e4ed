# triggerhsm/core/invocation.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

DEFAULT_FUNCTION_DESCRIPTION = "Function"


@dataclass(frozen=True)
class InvocationInfo:
    """
    Describes a user-supplied callable (an action, guard, selector or handler)
    for diagnostics and introspection.

    :param method_name: The callable's ``__name__``, or None if it has none.
    :param user_description: Text supplied by the caller, if any.
    :param is_async: True if the callable is suspension-capable.
    :param default_function_description: Text returned for anonymous callables
        (lambdas, nested functions) that have no user description.
    """

    method_name: Optional[str]
    user_description: Optional[str] = None
    is_async: bool = False
    default_function_description: str = DEFAULT_FUNCTION_DESCRIPTION

    @classmethod
    def create(
        cls,
        func: Optional[Callable],
        description: Optional[str] = None,
        is_async: bool = False,
        default_function_description: str = DEFAULT_FUNCTION_DESCRIPTION,
    ) -> "InvocationInfo":
        method_name = getattr(func, "__name__", None) if func is not None else None
        return cls(
            method_name=method_name,
            user_description=description,
            is_async=is_async,
            default_function_description=default_function_description,
        )

    @property
    def description(self) -> str:
        """
        The user description if given, else the default description for
        anonymous callables, else the method name.
        """
        if self.user_description is not None:
            return self.user_description
        if self.method_name is None:
            return "<null>"
        if any(c in self.method_name for c in "<>"):
            return self.default_function_description
        return self.method_name

    def __str__(self) -> str:
        return self.description
