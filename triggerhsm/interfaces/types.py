# triggerhsm/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Awaitable, Callable, Hashable, List, Union

StateID = Hashable
TriggerID = Hashable

# Callback Types
GuardPredicate = Callable[..., bool]
DestinationSelector = Callable[..., StateID]
ActionFunc = Callable[..., Union[None, Awaitable[None]]]
TransitionListener = Callable[[Any], Union[None, Awaitable[None]]]
UnhandledTriggerFunc = Callable[[StateID, TriggerID, List[str]], Union[None, Awaitable[None]]]
StateAccessor = Callable[[], StateID]
StateMutator = Callable[[StateID], None]
