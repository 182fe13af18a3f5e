# src/zipfwalk/core/engine.py
import logging
import sys
import threading
from contextlib import closing
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Callable, List, Optional, Set, TextIO, Tuple

from zipfwalk.config import DEFAULT_WORKERS, SELECTION_MODES
from zipfwalk.core.aggregator import FrequencyTable
from zipfwalk.core.ignore import load_ignore_spec
from zipfwalk.core.reporter import report
from zipfwalk.core.traverser import FileWalker, read_lines
from zipfwalk.errors import ConfigError, EmptyTermError, TokenizationError
from zipfwalk.models import ZipfConfig
from zipfwalk.utils.tokenizer import split_bpe, split_symbols, split_words

logger = logging.getLogger(__name__)

Splitter = Callable[[str], List[str]]


class Zipf:
    """
    Counts terms in every file under a directory and reports them.

    One instance owns one FrequencyTable; run() walks the tree, then writes
    at most `limit` '<word> <count>' lines to the output, ascending by count.
    """

    def __init__(self, root_path: str, limit: int, include_symbols: bool = False,
                 output: Optional[TextIO] = None, selection: str = "sample",
                 strict: bool = True, workers: int = DEFAULT_WORKERS, bpe: bool = False,
                 extensions: Optional[Set[str]] = None, ignore_patterns: Optional[List[str]] = None,
                 skip_binary: bool = False):
        if not root_path:
            raise ConfigError("empty root path")
        if limit < 0:
            raise ConfigError(f"limit must be >= 0, got {limit}")
        if workers < 1:
            raise ConfigError(f"workers must be >= 1, got {workers}")
        if selection not in SELECTION_MODES:
            raise ConfigError(f"Unknown selection mode '{selection}'")

        self.root_path = root_path
        self.limit = limit
        self.include_symbols = include_symbols
        self.out = output if output is not None else sys.stdout
        self.selection = selection
        self.strict = strict
        self.workers = workers

        ignore_spec = load_ignore_spec(list(ignore_patterns)) if ignore_patterns else None
        self.walker = FileWalker(Path(root_path), ignore_spec, set(extensions or {"*"}), skip_binary)

        self.splitters: List[Tuple[str, Splitter]] = [("bpe", split_bpe) if bpe else ("words", split_words)]
        if include_symbols:
            self.splitters.append(("symbols", split_symbols))

        self._table = FrequencyTable()
        self._anomalies = 0
        self._anomaly_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: ZipfConfig, output: Optional[TextIO] = None) -> "Zipf":
        return cls(
            config.root_path,
            config.limit,
            config.include_symbols,
            output,
            selection=config.selection,
            strict=config.strict,
            workers=config.workers,
            bpe=config.bpe,
            extensions=config.extensions,
            ignore_patterns=config.ignore_patterns,
            skip_binary=config.skip_binary,
        )

    @property
    def table(self) -> FrequencyTable:
        return self._table

    @property
    def anomalies(self) -> int:
        """Empty terms skipped in lenient mode."""
        return self._anomalies

    def run(self) -> int:
        """Walks the tree and writes the report. Returns the number of lines written."""
        self.walk()
        return self.report()

    def add(self, term: str) -> None:
        try:
            self._table.add(term)
        except EmptyTermError:
            if self.strict:
                raise
            with self._anomaly_lock:
                self._anomalies += 1
                seen = self._anomalies
            logger.warning("Skipped empty term (%d so far)", seen)

    def process_line(self, name: str, line: str) -> None:
        for kind, split in self.splitters:
            try:
                terms = split(line)
            except TokenizationError as e:
                logger.debug("%s: skipping line for %s (%s)", name, kind, e)
                continue
            for term in terms:
                self.add(term)

    def process_file(self, path: Path) -> None:
        name = path.relative_to(self.walker.root_dir).as_posix()
        with closing(read_lines(path)) as lines:
            for line in lines:
                self.process_line(name, line)

    def walk(self) -> None:
        """Populates the table. Returns only after every worker has finished."""
        if self.workers == 1:
            with closing(self.walker.walk()) as pairs:
                for name, line in pairs:
                    self.process_line(name, line)
            return

        logger.debug("Walking %s with %d workers", self.root_path, self.workers)
        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = []
            try:
                for path in self.walker.iter_files():
                    futures.append(executor.submit(self.process_file, path))
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()
            # the executor's exit joins any worker still running
            for future in futures:
                if future in done and future.exception() is not None:
                    raise future.exception()

    def report(self) -> int:
        return report(self._table.snapshot(), self.limit, self.out, self.selection)
