# src/zipfwalk/cli.py
import sys
import argparse
import logging
import os
from io import StringIO
from pathlib import Path

# Module imports
from zipfwalk.config import DEFAULT_IGNORE_PATTERNS, DEFAULT_LIMIT, DEFAULT_WORKERS
from zipfwalk.core.engine import Zipf
from zipfwalk.core.ignore import read_ignore_file
from zipfwalk.errors import ZipfError
from zipfwalk.models import ZipfConfig

def create_arg_parser():
    parser = argparse.ArgumentParser(
        description="Count word (and optionally symbol) frequencies across every file under a directory."
    )
    parser.add_argument("root_dir", type=str, nargs="?", default=os.getcwd(), help="Directory to scan")
    parser.add_argument("-n", "--limit", type=int, default=DEFAULT_LIMIT, help=f"Maximum number of terms to report (default: {DEFAULT_LIMIT})")
    parser.add_argument("-s", "--symbols", action="store_true", help="Also count symbol characters")
    parser.add_argument("--top", action="store_true", help="Report the most frequent terms instead of the first ones found")
    parser.add_argument("--lenient", action="store_true", help="Skip empty terms instead of aborting")
    parser.add_argument("-j", "--workers", type=int, default=DEFAULT_WORKERS, help="Number of threads reading files")
    parser.add_argument("--bpe", action="store_true", help="Count tiktoken BPE pieces instead of words")
    parser.add_argument("-e", "--extensions", type=str, default="*", help="Comma-separated file extensions or '*' for all")
    parser.add_argument("-i", "--ignore", action="append", default=[], metavar="PATTERN", help="gitwildmatch pattern to exclude (repeatable)")
    parser.add_argument("--ignore-file", type=str, default=None, help="File with gitwildmatch patterns to exclude")
    parser.add_argument("--default-ignores", action="store_true", help="Exclude VCS, virtualenv and editor directories")
    parser.add_argument("--skip-binary", action="store_true", help="Skip files that look binary")
    parser.add_argument("-o", "--output", type=str, default=None, help="Write the report to a file (default: stdout)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser

def parse_extensions(raw: str) -> set:
    raw_exts = raw.strip()
    return {"*"} if raw_exts == "*" else {e.strip() for e in raw_exts.split(",") if e.strip()}

def collect_ignore_patterns(args, root_dir: Path) -> list:
    patterns = []
    if args.default_ignores:
        patterns.extend(DEFAULT_IGNORE_PATTERNS)
    if args.ignore_file:
        patterns.extend(read_ignore_file(Path(args.ignore_file)))
    patterns.extend(args.ignore)

    # Keep the report file out of its own counts
    if args.output:
        try:
            rel_output = Path(args.output).resolve().relative_to(root_dir.resolve())
            patterns.append("/" + rel_output.as_posix())
        except ValueError:
            pass
    return patterns

def main(argv=None):
    try:
        # 1. Setup
        parser = create_arg_parser()
        args = parser.parse_args(argv)

        logging.basicConfig(
            level=logging.DEBUG if args.verbose else logging.WARNING,
            format="[%(levelname)s] %(message)s",
            stream=sys.stderr,
        )

        if args.root_dir and not Path(args.root_dir).is_dir():
            print(f"Error: Invalid directory '{args.root_dir}'", file=sys.stderr)
            sys.exit(1)

        config = ZipfConfig(
            root_path=args.root_dir,
            limit=args.limit,
            include_symbols=args.symbols,
            selection="top" if args.top else "sample",
            strict=not args.lenient,
            workers=args.workers,
            bpe=args.bpe,
            extensions=parse_extensions(args.extensions),
            ignore_patterns=collect_ignore_patterns(args, Path(args.root_dir)),
            skip_binary=args.skip_binary,
        )

        print(f"--- zipfwalk ---", file=sys.stderr)
        print(f"Scanning: {config.root_path}", file=sys.stderr)
        print(f"Terms:    {'BPE pieces' if config.bpe else 'words'}{' + symbols' if config.include_symbols else ''}", file=sys.stderr)
        print(f"Limit:    {config.limit} ({config.selection})", file=sys.stderr)

        # 2. Count & Report
        if args.output:
            # Buffered so a failed walk leaves an existing report untouched
            buffer = StringIO()
            zipf = Zipf.from_config(config, buffer)
            written = zipf.run()
            with open(args.output, "w", encoding="utf-8") as out:
                out.write(buffer.getvalue())
        else:
            zipf = Zipf.from_config(config, sys.stdout)
            written = zipf.run()

        print(f"Distinct terms: {len(zipf.table)} | Reported: {written}", file=sys.stderr)
        if zipf.anomalies:
            print(f"Skipped empty terms: {zipf.anomalies}", file=sys.stderr)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)

    except (ZipfError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

if __name__ == "__main__":
    main()
