# src/zipfwalk/core/reporter.py
import heapq
from typing import Iterable, List, Mapping, TextIO

from zipfwalk.config import SELECTION_MODES
from zipfwalk.errors import ConfigError
from zipfwalk.models import Term


def select(table: Mapping[str, int], limit: int, selection: str = "sample") -> List[Term]:
    """
    Picks at most `limit` entries and orders them ascending by count.

    "sample" takes the first `limit` entries in the table's own iteration
    order, so which terms survive the cutoff is not meaningful once the
    table is larger than the limit. "top" keeps the most frequent terms and
    breaks ties by term text.
    """
    if selection not in SELECTION_MODES:
        raise ConfigError(f"Unknown selection mode '{selection}'")
    if limit <= 0:
        return []

    if selection == "top":
        best = heapq.nsmallest(limit, table.items(), key=lambda kv: (-kv[1], kv[0]))
        best.sort(key=lambda kv: (kv[1], kv[0]))
        return [Term(word=w, count=c) for w, c in best]

    collection: List[Term] = []
    for word, count in table.items():
        if len(collection) >= limit:
            break
        collection.append(Term(word=word, count=count))

    collection.sort(key=lambda t: t.count)
    return collection


def write_report(entries: Iterable[Term], sink: TextIO) -> int:
    """Writes one '<word> <count>' line per entry. Returns the line count."""
    written = 0
    for entry in entries:
        sink.write(f"{entry.word} {entry.count}\n")
        written += 1
    return written


def report(table: Mapping[str, int], limit: int, sink: TextIO, selection: str = "sample") -> int:
    return write_report(select(table, limit, selection), sink)
