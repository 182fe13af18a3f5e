# src/zipfwalk/core/ignore.py
from pathlib import Path
from typing import List

import pathspec

from zipfwalk.errors import ConfigError


def read_ignore_file(ignore_file: Path) -> List[str]:
    """Reads gitwildmatch patterns, one per line."""
    try:
        with open(ignore_file, "r", encoding="utf-8") as f:
            return f.read().splitlines()
    except OSError as e:
        raise ConfigError(f"Cannot read ignore file '{ignore_file}': {e}") from e


def load_ignore_spec(patterns: List[str]) -> pathspec.PathSpec:
    """Builds a gitwildmatch PathSpec; invalid patterns are a ConfigError."""
    try:
        return pathspec.PathSpec.from_lines("gitwildmatch", patterns)
    except Exception as e:
        raise ConfigError(f"Error parsing ignore rules: {e}") from e


def is_path_ignored(spec: pathspec.PathSpec, rel_path: Path, is_directory: bool = False) -> bool:
    """Matches a root-relative path; directories get a trailing slash so 'venv/' rules apply."""
    path_str = rel_path.as_posix()
    if is_directory:
        path_str += "/"
    return spec.match_file(path_str)
