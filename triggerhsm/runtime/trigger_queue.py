# triggerhsm/runtime/trigger_queue.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from collections import deque
from typing import Any, Deque, NamedTuple, Optional, Tuple

from triggerhsm.interfaces.types import TriggerID


class QueuedTrigger(NamedTuple):
    """A trigger waiting to be processed, with its fire-time arguments."""

    trigger: TriggerID
    args: Tuple[Any, ...]


class TriggerQueue:
    """
    FIFO of triggers fired while another trigger is being processed.

    Not thread-safe: a machine and its queue belong to one thread (or one
    event loop).
    """

    def __init__(self) -> None:
        self._queue: Deque[QueuedTrigger] = deque()

    def enqueue(self, trigger: TriggerID, args: Tuple[Any, ...] = ()) -> None:
        """
        Add a trigger to the back of the queue.

        :param trigger: The trigger to enqueue.
        :param args: Fire-time arguments for the trigger.
        """
        self._queue.append(QueuedTrigger(trigger, tuple(args)))

    def dequeue(self) -> Optional[QueuedTrigger]:
        """
        Remove and return the oldest trigger, or None if the queue is empty.
        """
        if self._queue:
            return self._queue.popleft()
        return None

    def clear(self) -> None:
        self._queue.clear()

    def is_empty(self) -> bool:
        return not self._queue

    def __len__(self) -> int:
        return len(self._queue)
