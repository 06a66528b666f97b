"""
Nimber Cache - Memoizes nimbers per rule set.

The cache:
- Is partitioned by RuleSet value, then keyed by (height, pool_size)
- Creates partitions lazily on first use of a rule set
- Never evicts; it grows until clear() is called
- Is safe to share between threads

Locking: one reader/writer lock guards the partition map and each
partition has its own. Every get/put takes and releases its lock on its
own; no lock is held while a nimber is being computed, since evaluation
re-enters the cache.

Callers own the memory trade-off: a long-lived cache holds every height
ever evaluated for every rule set. Clear it (or drop the instance) when
that matters, and always clear it before reusing a rule set value whose
meaning has changed.
"""

from __future__ import annotations
import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from ..spec_schema.rules import RuleSet
from .state import Nimber

logger = logging.getLogger("nimlib.cache")


class ReadWriteLock:
    """A lock allowing many concurrent readers or a single writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class NimberTable:
    """Nimbers for a single rule set, keyed by (height, pool_size)."""

    def __init__(self):
        self._entries: dict[tuple[int, int], Nimber] = {}
        self._lock = ReadWriteLock()

    def get(self, height: int, pool_size: int) -> Nimber | None:
        with self._lock.read():
            return self._entries.get((height, pool_size))

    def put(self, height: int, pool_size: int, nimber: Nimber):
        # Racing evaluators compute identical values, so overwriting is harmless
        with self._lock.write():
            self._entries[(height, pool_size)] = nimber

    def clear(self):
        with self._lock.write():
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)


class NimberCache:
    """
    Memoized nimbers, partitioned by rule set.

    Usage:
        cache = NimberCache()
        evaluator = NimberEvaluator(cache)
        evaluator.nimber_for_height(10, rules)

        # Later, drop everything
        cache.clear()
    """

    def __init__(self):
        self._partitions: dict[RuleSet, NimberTable] = {}
        self._lock = ReadWriteLock()

    def partition(self, rules: RuleSet) -> NimberTable:
        """Get or create the table for a rule set."""
        with self._lock.read():
            table = self._partitions.get(rules)
        if table is not None:
            return table

        with self._lock.write():
            table = self._partitions.get(rules)
            if table is None:
                table = NimberTable()
                self._partitions[rules] = table
                logger.debug("Created nimber cache partition for %d rule(s)", len(rules))
            return table

    def get(self, rules: RuleSet, height: int, pool_size: int = 0) -> Nimber | None:
        return self.partition(rules).get(height, pool_size)

    def put(self, rules: RuleSet, height: int, pool_size: int, nimber: Nimber):
        self.partition(rules).put(height, pool_size, nimber)

    def clear(self, rules: RuleSet | None = None):
        """
        Clear the cache.

        With `rules`, only that rule set's partition is dropped.
        """
        with self._lock.write():
            if rules is None:
                self._partitions.clear()
                logger.debug("Cleared nimber cache")
            else:
                self._partitions.pop(rules, None)

    def size(self, rules: RuleSet | None = None) -> int:
        """Number of cached nimbers, overall or for one rule set."""
        with self._lock.read():
            if rules is not None:
                table = self._partitions.get(rules)
                tables = [table] if table is not None else []
            else:
                tables = list(self._partitions.values())
        return sum(len(t) for t in tables)

    def __contains__(self, rules: RuleSet) -> bool:
        with self._lock.read():
            return rules in self._partitions


# Process-wide cache used when no cache is passed explicitly
default_cache = NimberCache()


def clear_cache():
    """
    Clear the process-wide nimber cache.

    Must be called before reusing a rule set value whose intended
    meaning changed.
    """
    default_cache.clear()
