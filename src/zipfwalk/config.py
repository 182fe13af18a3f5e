# src/zipfwalk/config.py

DEFAULT_LIMIT = 100
DEFAULT_WORKERS = 1

SELECTION_MODES = ("sample", "top")

# tiktoken encoding used by --bpe
BPE_ENCODING = "cl100k_base"

# Bytes read when sniffing for binary content
BINARY_SNIFF_BYTES = 1024

# Applied only with --default-ignores; a plain run visits every file.
DEFAULT_IGNORE_PATTERNS = [
    ".git/",
    "node_modules/",
    "venv/",
    ".venv/",
    "__pycache__/",
    ".idea/",
    ".vscode/",
    ".DS_Store",
]
