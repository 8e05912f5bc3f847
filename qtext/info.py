"""
qtext Info - validation, lookup and in-place editing of info strings.

Read operations accept ``str``, ``bytes``, ``bytearray`` or a
``BoundedBuffer``. Write operations take a ``BoundedBuffer`` and edit it in
place through ``BoundedBuffer.splice()``.

Security features:
  - Forbidden bytes (\\ ; ") rejected in every key and value
  - Quote and semicolon rejected anywhere in the buffer, even inside a
    malformed pair the pair walker would misread
  - Length bounds checked, never truncated
  - Rejected edits leave the buffer byte-for-byte unchanged

Lookup and removal trust that the info string and key were validated at the
protocol edge. Calling them with invalid input is a programming error and
raises InfoStringError instead of returning "not found".
"""

from __future__ import annotations

import logging
from typing import Iterator, Union

from qtext.buffer import BoundedBuffer
from qtext.config import DEFAULT_LIMITS, InfoLimits
from qtext.errors import InfoError, InfoStringError
from qtext.spec import (
    FORBIDDEN_INFO_BYTES,
    FORBIDDEN_INFO_STRING_BYTES,
    INFO_DELIMITER_BYTE,
    QUOTE,
    from_wire,
    to_wire,
)

logger = logging.getLogger(__name__)

InfoLike = Union[str, bytes, bytearray, BoundedBuffer]
TextLike = Union[str, bytes, bytearray]

_DELIM = bytes([INFO_DELIMITER_BYTE])


def _encode(text: TextLike) -> bytes | None:
    """Wire bytes of ``text``, or None for a str that has no UTF-8 form."""
    try:
        return to_wire(text)
    except UnicodeEncodeError:
        return None


def _raw(info: InfoLike) -> bytes | None:
    if isinstance(info, BoundedBuffer):
        return bytes(info)
    return _encode(info)


def _has_forbidden(data: bytes) -> bool:
    return any(b in data for b in FORBIDDEN_INFO_BYTES)


# =============================================================================
# Validation
# =============================================================================

def validate_key(key: TextLike | None, limits: InfoLimits = DEFAULT_LIMITS) -> bool:
    """A key is non-empty, shorter than max_info_key and free of \\ ; "."""
    if key is None:
        return False
    raw = _encode(key)
    if not raw:
        return False
    if len(raw) >= limits.max_info_key:
        return False
    return not _has_forbidden(raw)


def validate_value(value: TextLike | None, limits: InfoLimits = DEFAULT_LIMITS) -> bool:
    """A value is shorter than max_info_value and free of \\ ; ". Empty is fine."""
    if value is None:
        return False
    raw = _encode(value)
    if raw is None or len(raw) >= limits.max_info_value:
        return False
    return not _has_forbidden(raw)


def validate_info(info: InfoLike | None, limits: InfoLimits = DEFAULT_LIMITS) -> bool:
    """Check that ``info`` is a well-formed info string.

    Walks the buffer segment by segment: every key must be opened by a
    backslash and closed by the backslash that opens its value. A key with
    no value (``\\a\\1\\b``) or content before the first backslash is
    invalid. The empty string is valid. A ``str`` that cannot be encoded
    (a lone surrogate) is invalid.
    """
    if info is None:
        return False
    raw = _raw(info)
    if raw is None:
        return False

    if len(raw) >= limits.max_info_string:
        return False

    for forbidden in FORBIDDEN_INFO_STRING_BYTES:
        if forbidden in raw:
            return False

    pos = 0
    size = len(raw)
    while pos < size:
        if raw[pos] != INFO_DELIMITER_BYTE:
            return False
        pos += 1

        end = raw.find(_DELIM, pos)
        if end == -1:  # key without value
            return False
        if end - pos >= limits.max_info_key:
            return False
        pos = end + 1

        end = raw.find(_DELIM, pos)
        if end == -1:
            end = size
        if end - pos >= limits.max_info_value:
            return False
        pos = end

    return True


def validate_configstring(string: str | bytes | None) -> bool:
    """Configstrings only need balanced double quotes."""
    if string is None:
        return False
    text = from_wire(string) if isinstance(string, (bytes, bytearray)) else string

    opened = False
    parity = 0
    for ch in text:
        if ch == QUOTE:
            if opened:
                parity -= 1
                opened = False
            else:
                parity += 1
                opened = True

    return parity == 0


# =============================================================================
# Pair walking
# =============================================================================

def _require_valid(raw: bytes | None, key: TextLike | None, limits: InfoLimits) -> bytes:
    """Enforce the lookup preconditions. Returns the encoded key."""
    if not validate_info(raw, limits):
        raise InfoStringError(InfoError.MALFORMED_INFO_STRING, "info string failed validation")
    if not validate_key(key, limits):
        raise InfoStringError(InfoError.INVALID_KEY, f"invalid info key: {key!r:.80}")
    return to_wire(key)


def _walk(raw: bytes) -> Iterator[tuple[int, int, int]]:
    """Yield (pair_start, key_end, value_end) for a valid buffer.

    pair_start is the offset of the backslash opening the key; the key runs
    from pair_start + 1 to key_end, the value from key_end + 1 to value_end.
    The next pair, if any, starts at value_end.
    """
    pos = 0
    size = len(raw)
    while pos < size:
        key_end = raw.find(_DELIM, pos + 1)
        value_end = raw.find(_DELIM, key_end + 1)
        if value_end == -1:
            value_end = size
        yield pos, key_end, value_end
        pos = value_end


def _find(raw: bytes, key: bytes) -> tuple[int, int, int] | None:
    for start, key_end, value_end in _walk(raw):
        if raw[start + 1:key_end] == key:
            return start, key_end, value_end
    return None


def iter_pairs(info: InfoLike, limits: InfoLimits = DEFAULT_LIMITS) -> Iterator[tuple[str, str]]:
    """Yield (key, value) pairs in buffer order."""
    raw = _raw(info)
    if not validate_info(raw, limits):
        raise InfoStringError(InfoError.MALFORMED_INFO_STRING, "info string failed validation")
    for start, key_end, value_end in _walk(raw):
        yield from_wire(raw[start + 1:key_end]), from_wire(raw[key_end + 1:value_end])


def find_key(info: InfoLike, key: TextLike, limits: InfoLimits = DEFAULT_LIMITS) -> int | None:
    """Return the offset of the backslash that opens ``key``'s pair, or None.

    Raises InfoStringError if ``info`` or ``key`` is invalid.
    """
    raw = _raw(info)
    found = _find(raw, _require_valid(raw, key, limits))
    return found[0] if found else None


def value_for_key(info: InfoLike, key: TextLike, limits: InfoLimits = DEFAULT_LIMITS) -> str | None:
    """Return the value stored under ``key``, or None if the key is absent.

    The result is an independent ``str``; any number of results may be held
    at once. See qtext.scratch.ValueRing for the fixed-slot variant.

    Raises InfoStringError if ``info`` or ``key`` is invalid.
    """
    raw = _raw(info)
    found = _find(raw, _require_valid(raw, key, limits))
    if found is None:
        return None
    _, key_end, value_end = found
    return from_wire(raw[key_end + 1:value_end])


# =============================================================================
# Editing
# =============================================================================

def _check_buffer(buffer: BoundedBuffer) -> None:
    if not isinstance(buffer, BoundedBuffer):
        raise TypeError(f"Expected BoundedBuffer, got {type(buffer).__name__}")


def _without_key(raw: bytes, key: bytes) -> bytes:
    kept = [raw[start:end] for start, key_end, end in _walk(raw) if raw[start + 1:key_end] != key]
    return b"".join(kept)


def remove_key(buffer: BoundedBuffer, key: TextLike, limits: InfoLimits = DEFAULT_LIMITS) -> None:
    """Remove every pair stored under ``key``. No-op if the key is absent.

    Raises InfoStringError if the buffer or key is invalid; the buffer is not
    touched in that case.
    """
    _check_buffer(buffer)
    raw = bytes(buffer)
    wire_key = _require_valid(raw, key, limits)

    while True:
        found = _find(raw, wire_key)
        if found is None:
            return
        start, _, value_end = found
        buffer.splice(start, value_end)
        raw = bytes(buffer)


def try_set_value_for_key(
    buffer: BoundedBuffer,
    key: TextLike,
    value: TextLike,
    limits: InfoLimits = DEFAULT_LIMITS,
) -> InfoError | None:
    """Store ``key=value``, returning None on success or the rejection reason.

    Any existing pair for ``key`` is removed and the new pair is appended at
    the end. On rejection the buffer is unchanged.
    """
    _check_buffer(buffer)
    raw = bytes(buffer)

    if not validate_info(raw, limits):
        logger.debug("Rejected set: malformed info string")
        return InfoError.MALFORMED_INFO_STRING
    if not validate_key(key, limits):
        logger.debug("Rejected set: invalid key %.80r", key)
        return InfoError.INVALID_KEY
    if not validate_value(value, limits):
        logger.debug("Rejected set of %r: invalid value %.80r", key, value)
        return InfoError.INVALID_VALUE

    wire_key = to_wire(key)
    pair = _DELIM + wire_key + _DELIM + to_wire(value)
    max_length = min(limits.max_info_string, buffer.capacity) - 1
    new_length = len(_without_key(raw, wire_key)) + len(pair)
    if new_length > max_length:
        logger.debug("Rejected set of %r: %d bytes exceeds %d", key, new_length, max_length)
        return InfoError.CAPACITY_EXCEEDED

    remove_key(buffer, wire_key, limits)
    buffer.append(pair)
    return None


def set_value_for_key(
    buffer: BoundedBuffer,
    key: TextLike,
    value: TextLike,
    limits: InfoLimits = DEFAULT_LIMITS,
) -> bool:
    """Store ``key=value``. Returns False, with the buffer unchanged, on rejection."""
    return try_set_value_for_key(buffer, key, value, limits) is None
