# src/zipfwalk/core/traverser.py
import logging
import os
from contextlib import closing
from pathlib import Path
from typing import Iterator, Optional, Set, Tuple

import pathspec

from zipfwalk.config import BINARY_SNIFF_BYTES
from zipfwalk.core.ignore import is_path_ignored

logger = logging.getLogger(__name__)


def _raise(error: OSError) -> None:
    raise error


def is_binary_file(path: Path) -> bool:
    """Reads the first bytes of the file and looks for a NUL byte."""
    with path.open("rb") as f:
        return b"\0" in f.read(BINARY_SNIFF_BYTES)


def read_lines(path: Path) -> Iterator[str]:
    """
    Yields the non-empty lines of a file in order, line endings removed.

    The handle is closed when the generator finishes, raises, or is closed
    early by the caller. Undecodable bytes become U+FFFD.
    """
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as f:
        for raw in f:
            line = raw.rstrip("\r\n")
            if not line.strip():
                continue
            yield line


class FileWalker:
    """
    Enumerates the regular files under a root directory.

    Directories and files are visited in sorted order. Any OSError raised
    while listing a directory or opening a file aborts the walk.
    """

    def __init__(self, root_dir: Path, ignore_spec: Optional[pathspec.PathSpec] = None,
                 extensions: Optional[Set[str]] = None, skip_binary: bool = False):
        self.root_dir = Path(root_dir)
        self.ignore_spec = ignore_spec
        self.extensions = extensions or {"*"}
        self.match_all = "*" in self.extensions
        self.skip_binary = skip_binary

    def _wanted(self, path: Path, rel_path: Path) -> bool:
        if self.ignore_spec is not None and is_path_ignored(self.ignore_spec, rel_path):
            return False
        if not self.match_all:
            if not (path.suffix in self.extensions or path.name in self.extensions):
                return False
        if self.skip_binary and is_binary_file(path):
            logger.debug("Skipping binary file %s", rel_path.as_posix())
            return False
        return True

    def iter_files(self) -> Iterator[Path]:
        # os.walk swallows errors unless onerror is given
        for root, dirs, files in os.walk(self.root_dir, onerror=_raise):
            root_path = Path(root)

            dirs.sort()
            if self.ignore_spec is not None:
                for d in list(dirs):
                    rel_dir = (root_path / d).relative_to(self.root_dir)
                    if is_path_ignored(self.ignore_spec, rel_dir, is_directory=True):
                        dirs.remove(d)

            for name in sorted(files):
                path = root_path / name
                if not path.is_file():
                    # broken symlinks, sockets, fifos
                    continue
                if self._wanted(path, path.relative_to(self.root_dir)):
                    yield path

    def walk(self) -> Iterator[Tuple[str, str]]:
        """Yields (relative filename, line) for every non-empty line of every file."""
        for path in self.iter_files():
            rel_name = path.relative_to(self.root_dir).as_posix()
            logger.debug("Reading %s", rel_name)
            with closing(read_lines(path)) as lines:
                for line in lines:
                    yield rel_name, line


def walk(root_path, **options) -> Iterator[Tuple[str, str]]:
    return FileWalker(Path(root_path), **options).walk()
