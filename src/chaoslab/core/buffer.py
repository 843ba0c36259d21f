from __future__ import annotations

from collections import deque
from typing import Deque, Generic, Iterator, Tuple, TypeVar

from chaoslab.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class TrajectoryBuffer(Generic[T]):
    """
    Fixed-capacity history of recent states.

    Appends go to the tail; once full, every append evicts the oldest entry.
    Readers get tuple snapshots, never the backing deque.
    """

    def __init__(self, capacity: int):
        self._items: Deque[T] = deque(maxlen=self._check_capacity(capacity))

    @staticmethod
    def _check_capacity(capacity: int) -> int:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"capacity must be a positive integer, got {capacity!r}")
        return capacity

    @property
    def capacity(self) -> int:
        return self._items.maxlen

    def append(self, item: T) -> None:
        self._items.append(item)

    def reset(self) -> None:
        self._items.clear()

    def resize(self, capacity: int) -> None:
        """Switch to a new capacity. Existing history is dropped."""
        self._items = deque(maxlen=self._check_capacity(capacity))
        logger.debug("Trajectory buffer resized capacity=%d", capacity)

    def snapshot(self) -> Tuple[T, ...]:
        return tuple(self._items)

    def latest(self) -> T | None:
        return self._items[-1] if self._items else None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.snapshot())
