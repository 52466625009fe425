"""
Striped locks used to serialize mutations per book and per member.

Each id hashes onto one of a fixed number of stripes, so the number of locks
never grows with the ids callers send. Two ids may share a stripe; that only
costs some parallelism.

Lock order across the package is always: book stripes (by index), then
member stripes (by index). Holding them in that order keeps concurrent
operations from deadlocking each other.
"""

from __future__ import annotations
from contextlib import ExitStack, contextmanager
import threading
from typing import Iterator, List, Optional

DEFAULT_STRIPES = 64


class KeyedLocks:
    def __init__(self, stripes: int = DEFAULT_STRIPES) -> None:
        if stripes < 1:
            raise ValueError("stripes must be at least 1")
        self._stripes: List[threading.Lock] = [threading.Lock() for _ in range(stripes)]

    def __len__(self) -> int:
        return len(self._stripes)

    def stripe_of(self, key: str) -> int:
        return hash(key) % len(self._stripes)

    @contextmanager
    def hold(self, *keys: Optional[str]) -> Iterator[None]:
        """Acquire the stripes for every given key in index order. None keys are skipped."""
        wanted = sorted({self.stripe_of(k) for k in keys if k is not None})
        with ExitStack() as stack:
            for index in wanted:
                stack.enter_context(self._stripes[index])
            yield


class LockRegistry:
    """Shared by every service of one LibrarySystem so they agree on who holds what."""

    def __init__(self, stripes: int = DEFAULT_STRIPES) -> None:
        self.books = KeyedLocks(stripes)
        self.members = KeyedLocks(stripes)
