# src/zipfwalk/utils/tokenizer.py
import re
from typing import List

import tiktoken

from zipfwalk.config import BPE_ENCODING
from zipfwalk.errors import TokenizationError

WORD_RE = re.compile(r"\w+")
SYMBOL_RE = re.compile(r"[^\w\s]")

# NUL and U+FFFD (left behind by errors="replace") mark undecodable input
_MALFORMED = ("\x00", "\ufffd")


def _check(line: str) -> None:
    for ch in _MALFORMED:
        if ch in line:
            raise TokenizationError(f"malformed line: contains {ch!r}")


def split_words(line: str) -> List[str]:
    """Runs of word characters, e.g. 'the cat-flap' -> ['the', 'cat', 'flap']."""
    _check(line)
    return WORD_RE.findall(line)


def split_symbols(line: str) -> List[str]:
    """Every character that is neither a word character nor whitespace."""
    _check(line)
    return SYMBOL_RE.findall(line)


class Tokenizer:
    _encoding = None

    @classmethod
    def get_encoding(cls):
        if cls._encoding is None:
            cls._encoding = tiktoken.get_encoding(BPE_ENCODING)
        return cls._encoding

    @staticmethod
    def split(line: str) -> List[str]:
        """
        BPE pieces of a line, whitespace stripped and blank pieces dropped.

        A character split across several tokens (emoji, rare CJK) is emitted
        once, from the bytes of all the tokens that carry it.
        """
        _check(line)
        encoding = Tokenizer.get_encoding()
        pieces = []
        pending = b""
        for token in encoding.encode(line, disallowed_special=()):
            pending += encoding.decode_single_token_bytes(token)
            try:
                text = pending.decode("utf-8")
            except UnicodeDecodeError:
                continue
            pending = b""
            piece = text.strip()
            if piece:
                pieces.append(piece)
        if pending:
            raise TokenizationError(f"incomplete UTF-8 sequence at end of line: {pending!r}")
        return pieces


def split_bpe(line: str) -> List[str]:
    return Tokenizer.split(line)
