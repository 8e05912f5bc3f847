"""
qtext Text - token conversion and comparison helpers.

Conversions are strict: the whole token must be consumed. Anything else
(trailing garbage, out-of-range values, empty tokens) is a failure, which the
``try_*`` functions report as None and the defaulting variants replace with
the caller's default.
"""

from __future__ import annotations

import math
import re
import struct

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
U64_MAX = 2**64 - 1

# strtonum-style: optional leading whitespace and sign, decimal digits only
_INT_RE = re.compile(r"[ \t\r\n\f\v]*[+-]?[0-9]+\Z")

# strtof-style decimal floats plus inf/nan
_FLOAT_RE = re.compile(
    r"[ \t\r\n\f\v]*[+-]?"
    r"(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf(?:inity)?|nan)\Z",
    re.IGNORECASE,
)

# strtof also takes C99 hex floats: 0x1.8p3
_HEX_FLOAT_RE = re.compile(
    r"[ \t\r\n\f\v]*[+-]?0[xX]"
    r"(?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?\Z",
)

_U64_DIGITS = frozenset("0123456789")

# Number tokens are copied into a 128-byte scratch buffer by peers
MAX_NUMBER_TOKEN = 128


def try_span_to_int(token: str | None) -> int | None:
    """Parse a signed 32-bit integer, or return None."""
    if token is None or len(token) >= MAX_NUMBER_TOKEN or not _INT_RE.match(token):
        return None
    value = int(token)
    if value < INT32_MIN or value > INT32_MAX:
        return None
    return value


def try_span_to_float(token: str | None) -> float | None:
    """Parse a single-precision float, or return None.

    Decimal and hex (``0x1p-3``) forms are accepted. The result is rounded
    to float32, matching what peers store.
    """
    if not token or len(token) >= MAX_NUMBER_TOKEN:
        return None
    if _FLOAT_RE.match(token):
        value = float(token)
    elif _HEX_FLOAT_RE.match(token):
        try:
            value = float.fromhex(token)
        except OverflowError:
            value = -math.inf if token.lstrip().startswith("-") else math.inf
    else:
        return None
    if math.isnan(value) or math.isinf(value):
        return value
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def try_string_to_u64(text: str | None) -> int | None:
    """Parse an unsigned 64-bit integer made of ASCII digits only."""
    if not text or any(c not in _U64_DIGITS for c in text):
        return None
    value = int(text)
    return value if value <= U64_MAX else None


def span_to_int(token: str | None, default: int) -> int:
    value = try_span_to_int(token)
    return default if value is None else value


def span_to_float(token: str | None, default: float) -> float:
    value = try_span_to_float(token)
    return default if value is None else value


def string_to_u64(text: str | None, default: int) -> int:
    value = try_string_to_u64(text)
    return default if value is None else value


# =============================================================================
# Comparison
# =============================================================================

def _ascii_lower(text: str) -> str:
    return "".join(chr(ord(c) + 32) if "A" <= c <= "Z" else c for c in text)


def str_equal(lhs: str | None, rhs: str | None) -> bool:
    """Exact comparison. An absent token equals the empty string."""
    return (lhs or "") == (rhs or "")


def str_case_equal(lhs: str | None, rhs: str | None) -> bool:
    """ASCII case-insensitive comparison. An absent token equals the empty string."""
    lhs = lhs or ""
    rhs = rhs or ""
    return len(lhs) == len(rhs) and _ascii_lower(lhs) == _ascii_lower(rhs)


def starts_with(text: str, prefix: str) -> bool:
    return text.startswith(prefix)
