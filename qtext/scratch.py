"""
qtext Scratch - lookups into a fixed set of reusable value slots.

A ValueRing owns ``size`` BoundedBuffers of max_info_value capacity. Each
lookup copies its value into the next slot, wrapping around, so at most
``size`` results are live at once (two by default: enough to compare an old
value against a new one). A handle whose slot has since been reused raises
StaleValueError instead of returning another lookup's bytes.

A ring is plain per-owner state. It is not thread-safe; give each thread
its own ring.
"""

from __future__ import annotations

from qtext.buffer import BoundedBuffer
from qtext.config import DEFAULT_LIMITS, InfoLimits
from qtext.errors import StaleValueError
from qtext.info import InfoLike, TextLike, value_for_key
from qtext.spec import from_wire, to_wire

DEFAULT_RING_SIZE = 2


class ScratchValue:
    """Handle to one ring slot, valid until the ring wraps around to it."""

    __slots__ = ("_ring", "_slot", "_generation")

    def __init__(self, ring: ValueRing, slot: int, generation: int) -> None:
        self._ring = ring
        self._slot = slot
        self._generation = generation

    @property
    def is_live(self) -> bool:
        return self._ring._generations[self._slot] == self._generation

    @property
    def value(self) -> str:
        if not self.is_live:
            raise StaleValueError()
        return str(self._ring._slots[self._slot])

    def __str__(self) -> str:
        return self.value

    def __len__(self) -> int:
        return len(self.value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ScratchValue):
            return self.value == other.value
        if isinstance(other, str):
            return self.value == other
        return NotImplemented

    __hash__ = None

    def __repr__(self) -> str:
        state = repr(self.value) if self.is_live else "stale"
        return f"ScratchValue(slot={self._slot}, {state})"


class ValueRing:
    """
    Fixed-size ring of lookup buffers.

    Usage:
        ring = ValueRing()
        old = ring.value_for_key(old_info, "name")
        new = ring.value_for_key(new_info, "name")
        if old != new: ...        # both still live
        ring.value_for_key(info, "rate")
        old.value                 # raises StaleValueError
    """

    def __init__(self, size: int = DEFAULT_RING_SIZE, limits: InfoLimits = DEFAULT_LIMITS) -> None:
        if size < 1:
            raise ValueError(f"Ring size must be at least 1, got {size}")
        self.limits = limits
        self._slots = [BoundedBuffer(limits.max_info_value) for _ in range(size)]
        self._generations = [0] * size
        self._index = size - 1

    @property
    def size(self) -> int:
        return len(self._slots)

    def value_for_key(self, info: InfoLike, key: TextLike) -> ScratchValue | None:
        """Look up ``key`` and copy its value into the next slot.

        The slot advances on every completed call, found or not, so the "at
        most ``size`` live results" rule counts calls. Raises InfoStringError
        on invalid input, like qtext.info.value_for_key; the ring is not
        advanced in that case.
        """
        value = value_for_key(info, key, self.limits)

        self._index = (self._index + 1) % len(self._slots)
        slot = self._slots[self._index]
        self._generations[self._index] += 1

        if value is None:
            slot.clear()
            return None

        slot.clear()
        slot.append(to_wire(value))
        return ScratchValue(self, self._index, self._generations[self._index])

    def __repr__(self) -> str:
        contents = [from_wire(bytes(s)) for s in self._slots]
        return f"ValueRing(size={self.size}, slots={contents})"
