from __future__ import annotations

from collections import deque
from functools import cmp_to_key
from typing import Deque, Iterator

from .errors import EmptyQueueError
from .models import ProcessRecord
from .ordering import OrderingRule


class OrderedQueue:
    """
    FIFO of process records that can be reordered in place by a rule.
    """

    def __init__(self) -> None:
        self._items: Deque[ProcessRecord] = deque()

    def enqueue(self, record: ProcessRecord) -> None:
        self._items.append(record)

    def dequeue(self) -> ProcessRecord:
        if not self._items:
            raise EmptyQueueError("dequeue from an empty queue")
        return self._items.popleft()

    def peek(self) -> ProcessRecord:
        if not self._items:
            raise EmptyQueueError("peek at an empty queue")
        return self._items[0]

    def is_empty(self) -> bool:
        return not self._items

    def sort_by(self, rule: OrderingRule) -> None:
        # sorted() is stable, so records the rule considers equal keep their order.
        ordered = sorted(self._items, key=cmp_to_key(rule))
        self._items.clear()
        self._items.extend(ordered)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ProcessRecord]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"OrderedQueue({[r.pid for r in self._items]!r})"
