"""
qtext InfoString - object wrapper around one info-string buffer.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from qtext.buffer import BoundedBuffer
from qtext.config import DEFAULT_LIMITS, InfoLimits
from qtext.errors import InfoError, InfoStringError
from qtext.info import (
    TextLike,
    iter_pairs,
    remove_key,
    try_set_value_for_key,
    validate_info,
    validate_key,
    value_for_key,
)


class InfoString:
    """
    A validated info string owning its fixed-capacity buffer.

    Usage:
        info = InfoString("\\\\name\\\\player\\\\rate\\\\25000")
        info.set("name", "newname")       # moves "name" to the end
        info.get("rate")                  # "25000"
        info.remove("rate")
        bytes(info)                       # b"\\\\name\\\\newname"

    Unlike the function API, ``set`` raises InfoStringError with a code
    instead of returning False. The buffer is unchanged on any error.
    """

    def __init__(self, initial: TextLike = "", limits: InfoLimits = DEFAULT_LIMITS) -> None:
        if not validate_info(initial, limits):
            raise InfoStringError(InfoError.MALFORMED_INFO_STRING, f"Invalid info string: {initial!r:.80}")
        self.limits = limits
        self.buffer = BoundedBuffer(limits.max_info_string, initial)

    @classmethod
    def from_pairs(
        cls,
        pairs: dict[str, str] | Iterable[tuple[str, str]],
        limits: InfoLimits = DEFAULT_LIMITS,
    ) -> InfoString:
        """Build an info string by setting each pair in order."""
        info = cls(limits=limits)
        items = pairs.items() if isinstance(pairs, dict) else pairs
        for key, value in items:
            info.set(key, value)
        return info

    def get(self, key: TextLike, default: str | None = None) -> str | None:
        value = value_for_key(self.buffer, key, self.limits)
        return default if value is None else value

    def require(self, key: TextLike) -> str:
        """Like get(), but a missing key raises InfoStringError(NOT_FOUND)."""
        value = value_for_key(self.buffer, key, self.limits)
        if value is None:
            raise InfoStringError(InfoError.NOT_FOUND, f"Key not found: {key!r:.80}")
        return value

    def set(self, key: TextLike, value: TextLike) -> None:
        code = try_set_value_for_key(self.buffer, key, value, self.limits)
        if code is not None:
            raise InfoStringError(code, f"Cannot set {key!r:.80}: {code.value}")

    def remove(self, key: TextLike) -> None:
        remove_key(self.buffer, key, self.limits)

    def keys(self) -> list[str]:
        return [k for k, _ in iter_pairs(self.buffer, self.limits)]

    def items(self) -> list[tuple[str, str]]:
        return list(iter_pairs(self.buffer, self.limits))

    def to_dict(self) -> dict[str, str]:
        """Pairs as a dict. With duplicate keys the first pair wins, as in lookups."""
        out: dict[str, str] = {}
        for key, value in iter_pairs(self.buffer, self.limits):
            out.setdefault(key, value)
        return out

    def to_bytes(self) -> bytes:
        return bytes(self.buffer)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, bytes, bytearray)) or not validate_key(key, self.limits):
            return False
        return value_for_key(self.buffer, key, self.limits) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return sum(1 for _ in iter_pairs(self.buffer, self.limits))

    def __bytes__(self) -> bytes:
        return bytes(self.buffer)

    def __str__(self) -> str:
        return str(self.buffer)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, InfoString):
            return self.buffer == other.buffer
        if isinstance(other, (str, bytes, bytearray)):
            return self.buffer == other
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        return f"InfoString({str(self.buffer)!r}, keys={self.keys()})"
