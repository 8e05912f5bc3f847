"""
qtext Tokenizer - one-token-at-a-time scanner for engine text formats.

Tokens are separated by whitespace (space, tab, CR, LF, NUL). A token
starting with a double quote runs to the closing quote, whitespace and
newlines included; the quotes are not part of the token.

Two results must never be confused:
  - ``""``   an empty quoted token, present in the input
  - ``None`` no token: end of input, or a newline in STOP_ON_NEWLINE mode

Callers check ``is None`` before checking length.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from qtext.spec import NEWLINE, QUOTE, WHITESPACE
from qtext.text import span_to_float, span_to_int


class StopMode(Enum):
    STOP_ON_NEWLINE = "stop"
    DONT_STOP_ON_NEWLINE = "dont_stop"


STOP_ON_NEWLINE = StopMode.STOP_ON_NEWLINE
DONT_STOP_ON_NEWLINE = StopMode.DONT_STOP_ON_NEWLINE


@dataclass(frozen=True)
class Span:
    """Offsets of a token inside the scanned text. Truthy even when empty."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def text(self, source: str) -> str:
        return source[self.start:self.end]


class TokenCursor:
    """
    Read position inside ``text[start:end]``.

    The scanner never looks at ``text[end:]``. Use ``from_cstring`` for
    NUL-terminated input: the span then stops at the first ``\\0``.
    """

    __slots__ = ("text", "pos", "end")

    def __init__(self, text: str, start: int = 0, end: int | None = None) -> None:
        size = len(text)
        if end is None:
            end = size
        if not 0 <= start <= end <= size:
            raise ValueError(f"Invalid cursor range [{start}:{end}) for length {size}")
        self.text = text
        self.pos = start
        self.end = end

    @classmethod
    def from_cstring(cls, text: str) -> TokenCursor:
        nul = text.find("\0")
        return cls(text, 0, len(text) if nul == -1 else nul)

    @property
    def at_end(self) -> bool:
        return self.pos >= self.end

    @property
    def remaining(self) -> str:
        return self.text[self.pos:self.end]

    def peek(self) -> str | None:
        return None if self.at_end else self.text[self.pos]

    def __repr__(self) -> str:
        return f"TokenCursor(pos={self.pos}, end={self.end}, remaining={self.remaining[:32]!r})"


def scan_span(cursor: TokenCursor, stop: StopMode = DONT_STOP_ON_NEWLINE) -> Span | None:
    """Advance past the next token and return its offsets, or None if absent."""
    text = cursor.text
    pos = cursor.pos
    end = cursor.end

    # skip leading whitespace
    while pos >= end or text[pos] in WHITESPACE:
        if pos >= end:
            cursor.pos = end
            return None
        if text[pos] == NEWLINE and stop is STOP_ON_NEWLINE:
            cursor.pos = pos
            return None
        pos += 1

    if text[pos] == QUOTE:
        pos += 1
        start = pos
        while pos < end and text[pos] != QUOTE:
            pos += 1
        span = Span(start, pos)
        if pos < end:  # closing quote
            pos += 1
    else:
        start = pos
        while pos < end and text[pos] not in WHITESPACE:
            pos += 1
        span = Span(start, pos)

    cursor.pos = pos
    return span


def next_token(cursor: TokenCursor, stop: StopMode = DONT_STOP_ON_NEWLINE) -> str | None:
    """Advance past the next token and return it, or None if there is none."""
    span = scan_span(cursor, stop)
    return None if span is None else span.text(cursor.text)


def iter_tokens(text: str | TokenCursor, stop: StopMode = DONT_STOP_ON_NEWLINE) -> Iterator[str]:
    """Yield tokens until the scanner returns None."""
    cursor = text if isinstance(text, TokenCursor) else TokenCursor(text)
    while True:
        token = next_token(cursor, stop)
        if token is None:
            return
        yield token


def parse_line(cursor: TokenCursor) -> list[str] | None:
    """Return the tokens of the current line and step past its newline.

    Returns None at end of input. Blank lines give an empty list.
    """
    if cursor.at_end:
        return None
    tokens = list(iter_tokens(cursor, STOP_ON_NEWLINE))
    if cursor.peek() == NEWLINE:
        cursor.pos += 1
    return tokens


def parse_int(cursor: TokenCursor, default: int, stop: StopMode = DONT_STOP_ON_NEWLINE) -> int:
    return span_to_int(next_token(cursor, stop), default)


def parse_float(cursor: TokenCursor, default: float, stop: StopMode = DONT_STOP_ON_NEWLINE) -> float:
    return span_to_float(next_token(cursor, stop), default)
