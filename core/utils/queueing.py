# core/utils/queueing.py
from __future__ import annotations
from collections import deque
from queue import Queue, Full, Empty
from typing import Deque, Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")

def safe_put(q: Queue, item) -> None:
    """
    Put without blocking; if the queue is full, drop the oldest item and retry.
    Keeps a slow consumer from stalling the keystroke path.
    """
    try:
        q.put_nowait(item)
    except Full:
        try:
            q.get_nowait()  # drop oldest
        except Empty:
            pass
        q.put_nowait(item)

class FifoQueue(Generic[T]):
    """First-in first-out sequence. Bounding is left to the owner."""
    def __init__(self, items: Optional[Iterable[T]] = None):
        self._items: Deque[T] = deque(items or ())

    def enqueue(self, item: T) -> None:
        self._items.append(item)

    def dequeue(self) -> Optional[T]:
        if not self._items:
            return None
        return self._items.popleft()

    def peek(self) -> Optional[T]:
        return self._items[0] if self._items else None

    def peek_last(self) -> Optional[T]:
        return self._items[-1] if self._items else None

    def is_empty(self) -> bool:
        return not self._items

    def size(self) -> int:
        return len(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)
