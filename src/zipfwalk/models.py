# src/zipfwalk/models.py
from dataclasses import dataclass, field
from typing import List, Set

from zipfwalk.config import DEFAULT_LIMIT, DEFAULT_WORKERS


@dataclass(frozen=True)
class Term:
    """A (word, count) pair produced by the reporter."""
    word: str
    count: int


@dataclass(frozen=True)
class ZipfConfig:
    """Immutable settings for one run."""
    root_path: str
    limit: int = DEFAULT_LIMIT
    include_symbols: bool = False
    selection: str = "sample"
    strict: bool = True
    workers: int = DEFAULT_WORKERS
    bpe: bool = False
    extensions: Set[str] = field(default_factory=lambda: {"*"})
    ignore_patterns: List[str] = field(default_factory=list)
    skip_binary: bool = False
