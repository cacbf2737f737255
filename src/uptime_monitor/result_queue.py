from __future__ import annotations

import threading
from typing import Any, Generic, Optional, TypeVar

from .exceptions import QueueEmpty

T = TypeVar("T")


class _Node:
    __slots__ = ("data", "next")

    def __init__(self, data: Any):
        self.data = data
        self.next: Optional[_Node] = None


class ResultQueue(Generic[T]):
    """Unbounded FIFO shared by the pollers (producers) and the controller.

    Every mutation happens under one lock; consumers waiting in
    ``dequeue`` park on a condition that is signalled after each enqueue.
    ``length == 0`` exactly when ``head`` and ``tail`` are both None.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._head: Optional[_Node] = None
        self._tail: Optional[_Node] = None
        self._length = 0

    @property
    def length(self) -> int:
        with self._lock:
            return self._length

    def __len__(self) -> int:
        return self.length

    def is_empty(self) -> bool:
        return self.length == 0

    def enqueue(self, item: T) -> None:
        node = _Node(item)
        with self._not_empty:
            if self._tail is None:
                self._head = self._tail = node
            else:
                self._tail.next = node
                self._tail = node
            self._length += 1
            self._not_empty.notify()

    def dequeue(self, block: bool = True, timeout: Optional[float] = None) -> T:
        """Remove and return the oldest item.

        Blocks until an item arrives unless ``block`` is False. Raises
        QueueEmpty when the queue is empty and not blocking, or when
        ``timeout`` seconds pass without an item.
        """
        with self._not_empty:
            if not block:
                if self._head is None:
                    raise QueueEmpty("dequeued an empty queue")
            elif not self._not_empty.wait_for(
                lambda: self._head is not None, timeout=timeout
            ):
                raise QueueEmpty(f"no item within {timeout}s")
            return self._pop_head()

    def peek(self) -> Optional[T]:
        """Return the oldest item without removing it, or None when empty."""
        with self._lock:
            if self._head is None:
                return None
            return self._head.data

    def _pop_head(self) -> T:
        node = self._head
        assert node is not None
        self._head = node.next
        if self._head is None:
            self._tail = None
        self._length -= 1
        return node.data
