"""qtext error codes and exception classes.

Two kinds of failure exist in this layer:

  - Runtime rejections (bad peer input, a pair that does not fit). The
    function API reports these as False/None; the InfoString object API
    raises InfoStringError with one of the codes below.
  - Contract violations (lookup or removal on a buffer or key that was never
    validated). These always raise; validation is expected once, at the
    protocol edge.
"""

from __future__ import annotations

from enum import Enum


class InfoError(str, Enum):
    """Reason an info-string operation was rejected."""

    NOT_FOUND = "NOT_FOUND"
    INVALID_KEY = "INVALID_KEY"
    INVALID_VALUE = "INVALID_VALUE"
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    MALFORMED_INFO_STRING = "MALFORMED_INFO_STRING"
    STALE_VALUE = "STALE_VALUE"


class InfoStringError(ValueError):
    """Raised for rejected info-string operations.

    The `.code` attribute is an InfoError member.
    """

    def __init__(self, code: InfoError, msg: str = "") -> None:
        super().__init__(msg or code.value)
        self.code = code


class StaleValueError(InfoStringError):
    """A ValueRing slot was recycled while its handle was still in use."""

    def __init__(self, msg: str = "") -> None:
        super().__init__(InfoError.STALE_VALUE, msg or "lookup result was overwritten by a later lookup")


class EntityParseError(ValueError):
    """Entity text is malformed. Raised by the default fatal reporter."""
