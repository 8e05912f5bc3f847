"""
qtext BoundedBuffer - fixed-capacity byte buffer for in-place editing.

The buffer reserves one byte of its capacity for the terminator the wire
format historically carried, so the content length is at most
``capacity - 1``. Every edit goes through ``splice()``, which checks the
range and the resulting length before touching any byte. A rejected edit
leaves the buffer unchanged.
"""

from __future__ import annotations

from qtext.errors import InfoError, InfoStringError
from qtext.spec import from_wire, to_wire


class BoundedBuffer:
    """
    Mutable bytes with a fixed capacity.

    Usage:
        buf = BoundedBuffer(512, "\\\\name\\\\player")
        buf.append(b"\\\\rate\\\\25000")
        buf.splice(0, 13)          # drop the first pair
    """

    __slots__ = ("_capacity", "_data")

    def __init__(self, capacity: int, initial: str | bytes | bytearray = b"") -> None:
        if capacity < 1:
            raise ValueError(f"Capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._data = bytearray()
        data = to_wire(initial)
        if data:
            self.splice(0, 0, data)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def max_length(self) -> int:
        """Largest content length the buffer accepts."""
        return self._capacity - 1

    @property
    def remaining(self) -> int:
        return self.max_length - len(self._data)

    def fits(self, extra: int) -> bool:
        return extra <= self.remaining

    def splice(self, start: int, end: int, data: bytes = b"") -> None:
        """Replace ``[start:end)`` with ``data``.

        This is the only method that mutates the buffer. Raises ValueError
        for an out-of-range slice and InfoStringError(CAPACITY_EXCEEDED)
        when the result would not fit.
        """
        size = len(self._data)
        if not 0 <= start <= end <= size:
            raise ValueError(f"Invalid splice range [{start}:{end}) for length {size}")
        new_length = size - (end - start) + len(data)
        if new_length > self.max_length:
            raise InfoStringError(
                InfoError.CAPACITY_EXCEEDED,
                f"Buffer would hold {new_length} bytes (max {self.max_length})",
            )
        self._data[start:end] = data

    def append(self, data: bytes) -> None:
        self.splice(len(self._data), len(self._data), data)

    def truncate(self, pos: int) -> None:
        self.splice(pos, len(self._data))

    def clear(self) -> None:
        self.splice(0, len(self._data))

    def find(self, sub: bytes, start: int = 0) -> int:
        return self._data.find(sub, start)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __str__(self) -> str:
        return from_wire(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BoundedBuffer):
            return self._data == other._data
        if isinstance(other, (bytes, bytearray)):
            return self._data == other
        if isinstance(other, str):
            return self._data == to_wire(other)
        return NotImplemented

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"BoundedBuffer(capacity={self._capacity}, data={bytes(self._data)!r})"
