# src/zipfwalk/core/aggregator.py
import threading
from typing import Dict

from zipfwalk.errors import EmptyTermError


class FrequencyTable:
    """
    Term -> count mapping shared by the tokenization workers.

    The whole check-then-increment sequence runs under one exclusive lock,
    so concurrent add() calls for the same term never lose an update.
    """

    def __init__(self):
        self._counts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def add(self, term: str) -> None:
        """Counts one occurrence of term. Raises EmptyTermError for ''."""
        if term == "":
            raise EmptyTermError()
        with self._lock:
            self._counts[term] = self._counts.get(term, 0) + 1

    def snapshot(self) -> Dict[str, int]:
        """Returns a copy of the current mapping."""
        with self._lock:
            return dict(self._counts)

    def get(self, term: str) -> int:
        with self._lock:
            return self._counts.get(term, 0)

    def total(self) -> int:
        """Sum of all counts, i.e. the number of successful add() calls."""
        with self._lock:
            return sum(self._counts.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)

    def __contains__(self, term: object) -> bool:
        with self._lock:
            return term in self._counts
