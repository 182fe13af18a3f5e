# tests/test_zipf.py

import logging
import pytest
from io import StringIO

import zipfwalk.core.engine as engine
import zipfwalk.core.traverser as traverser
from zipfwalk.core.engine import Zipf
from zipfwalk.errors import ConfigError, EmptyTermError, TokenizationError
from zipfwalk.models import ZipfConfig

# --- Fixtures ---

@pytest.fixture
def cat_corpus(tmp_path):
    """One file, the classic example."""
    (tmp_path / "cat.txt").write_text("the cat sat on the mat\nthe cat ran\n", encoding="utf-8")
    return tmp_path


@pytest.fixture
def many_files(tmp_path):
    """Forty files across four directories, each with known counts."""
    for d in range(4):
        folder = tmp_path / f"dir{d}"
        folder.mkdir()
        for n in range(10):
            (folder / f"f{n}.txt").write_text(
                "common word\n" * (n + 1) + f"only{d}_{n}\n" + "x = y + z;\n",
                encoding="utf-8",
            )
    return tmp_path


def parse(report_text):
    return [(w, int(c)) for w, c in (line.split(" ") for line in report_text.splitlines())]

# --- Test 1: Construction ---

def test_empty_root_is_config_error():
    with pytest.raises(ConfigError):
        Zipf("", 10, False, StringIO())


@pytest.mark.parametrize("kwargs", [
    {"limit": -1},
    {"limit": 10, "workers": 0},
    {"limit": 10, "selection": "random"},
])
def test_invalid_options_are_config_errors(tmp_path, kwargs):
    with pytest.raises(ConfigError):
        Zipf(str(tmp_path), output=StringIO(), **kwargs)


def test_from_config(cat_corpus):
    sink = StringIO()
    zipf = Zipf.from_config(ZipfConfig(root_path=str(cat_corpus), limit=2, selection="top"), sink)
    zipf.run()
    assert sink.getvalue() == "cat 2\nthe 3\n"

# --- Test 2: End-to-end runs ---

def test_cat_example(cat_corpus):
    sink = StringIO()
    zipf = Zipf(str(cat_corpus), 10, False, sink)

    written = zipf.run()

    assert zipf.table.snapshot() == {"the": 3, "cat": 2, "sat": 1, "on": 1, "mat": 1, "ran": 1}
    entries = parse(sink.getvalue())
    assert written == 6
    assert sorted(w for w, _ in entries[:4]) == ["mat", "on", "ran", "sat"]
    assert all(c == 1 for _, c in entries[:4])
    assert entries[4:] == [("cat", 2), ("the", 3)]


def test_empty_directory_reports_nothing(tmp_path):
    sink = StringIO()
    assert Zipf(str(tmp_path), 10, False, sink).run() == 0
    assert sink.getvalue() == ""


def test_limit_smaller_than_table(tmp_path):
    (tmp_path / "f.txt").write_text("a b b c c c d d d d e e e e e\n", encoding="utf-8")
    sink = StringIO()

    Zipf(str(tmp_path), 3, False, sink).run()

    entries = parse(sink.getvalue())
    assert len(entries) == 3
    expected = {"a": 1, "b": 2, "c": 3, "d": 4, "e": 5}
    assert all(expected[w] == c for w, c in entries)
    counts = [c for _, c in entries]
    assert counts == sorted(counts)


def test_limit_zero(cat_corpus):
    sink = StringIO()
    zipf = Zipf(str(cat_corpus), 0, False, sink)
    assert zipf.run() == 0
    assert sink.getvalue() == ""
    assert len(zipf.table) == 6


def test_symbols_counted_alongside_words(tmp_path):
    (tmp_path / "code.c").write_text("x = y + z;\nx++;\n", encoding="utf-8")

    words_only = Zipf(str(tmp_path), 100, False, StringIO())
    words_only.walk()
    assert words_only.table.snapshot() == {"x": 2, "y": 1, "z": 1}

    with_symbols = Zipf(str(tmp_path), 100, True, StringIO())
    with_symbols.walk()
    assert with_symbols.table.snapshot() == {"x": 2, "y": 1, "z": 1, "=": 1, "+": 3, ";": 2}


def test_malformed_line_skipped_only_for_that_line(tmp_path):
    (tmp_path / "mixed.txt").write_bytes(b"good line\n\xff bad line\nlast good\n")
    zipf = Zipf(str(tmp_path), 100, True, StringIO())
    zipf.walk()
    assert zipf.table.snapshot() == {"good": 2, "line": 1, "last": 1}


@pytest.mark.parametrize("workers", [1, 2])
def test_failing_splitter_skips_only_its_own_kind(cat_corpus, workers):
    def broken_on_ran(line):
        if "ran" in line:
            raise TokenizationError("cannot split")
        return line.split()

    zipf = Zipf(str(cat_corpus), 10, False, StringIO(), workers=workers)
    zipf.splitters = [("words", broken_on_ran), ("symbols", lambda line: ["#"])]
    zipf.walk()

    snapshot = zipf.table.snapshot()
    # the second line lost its words but still contributed a symbol
    assert snapshot["#"] == 2
    assert snapshot["the"] == 2
    assert "ran" not in snapshot

# --- Test 3: Empty term policy ---

def test_empty_term_aborts_in_strict_mode(cat_corpus):
    zipf = Zipf(str(cat_corpus), 10, False, StringIO())
    zipf.splitters = [("words", lambda line: ["ok", ""])]

    with pytest.raises(EmptyTermError):
        zipf.run()
    # the first line's "ok" landed before the abort
    assert zipf.table.snapshot() == {"ok": 1}


def test_empty_term_skipped_in_lenient_mode(cat_corpus, caplog):
    sink = StringIO()
    zipf = Zipf(str(cat_corpus), 10, False, sink, strict=False)
    zipf.splitters = [("words", lambda line: ["ok", ""])]

    with caplog.at_level(logging.WARNING, logger="zipfwalk.core.engine"):
        zipf.run()

    assert zipf.table.snapshot() == {"ok": 2}
    assert zipf.anomalies == 2
    assert "Skipped empty term" in caplog.text
    assert sink.getvalue() == "ok 2\n"

# --- Test 4: I/O errors ---

def test_missing_root_aborts(tmp_path):
    zipf = Zipf(str(tmp_path / "gone"), 10, False, StringIO())
    with pytest.raises(FileNotFoundError):
        zipf.run()


def test_unreadable_file_aborts(cat_corpus, monkeypatch):
    (cat_corpus / "locked.txt").write_text("secret\n", encoding="utf-8")
    real_read_lines = traverser.read_lines

    def guarded(path):
        if path.name == "locked.txt":
            raise PermissionError(f"Permission denied: '{path}'")
        return real_read_lines(path)

    monkeypatch.setattr(traverser, "read_lines", guarded)
    sink = StringIO()

    with pytest.raises(PermissionError):
        Zipf(str(cat_corpus), 10, False, sink).run()
    assert sink.getvalue() == ""

# --- Test 5: Parallel walk ---

def test_parallel_walk_matches_serial(many_files):
    serial = Zipf(str(many_files), 1000, True, StringIO())
    serial.walk()
    parallel = Zipf(str(many_files), 1000, True, StringIO(), workers=8)
    parallel.walk()

    assert parallel.table.snapshot() == serial.table.snapshot()
    # 4 dirs * (1 + 2 + ... + 10)
    assert parallel.table.get("common") == 4 * 55
    assert parallel.table.get("x") == 40


def test_parallel_walk_propagates_worker_error(many_files, monkeypatch):
    real_read_lines = engine.read_lines

    def flaky(path):
        if path.name == "f3.txt" and path.parent.name == "dir2":
            raise PermissionError("denied")
        return real_read_lines(path)

    monkeypatch.setattr(engine, "read_lines", flaky)
    with pytest.raises(PermissionError):
        Zipf(str(many_files), 10, False, StringIO(), workers=4).run()


def test_top_selection_end_to_end(many_files):
    sink = StringIO()
    Zipf(str(many_files), 2, False, sink, selection="top").run()
    assert parse(sink.getvalue()) == [("common", 220), ("word", 220)]
