"""
qtext - structured text protocol layer.
Bounded info-string codec and token scanner for engine text formats.

Validate at the edge > never truncate > never leave a half-applied edit
"""

__version__ = "0.1.0"

from qtext.spec import MAX_INFO_STRING, MAX_INFO_KEY, MAX_INFO_VALUE
from qtext.errors import InfoError, InfoStringError, StaleValueError, EntityParseError
from qtext.config import InfoLimits, DEFAULT_LIMITS, load_config
from qtext.buffer import BoundedBuffer
from qtext.info import (
    validate_info,
    validate_key,
    validate_value,
    validate_configstring,
    find_key,
    value_for_key,
    remove_key,
    set_value_for_key,
    try_set_value_for_key,
    iter_pairs,
)
from qtext.scratch import ValueRing, ScratchValue
from qtext.document import InfoString
from qtext.tokenizer import (
    StopMode,
    STOP_ON_NEWLINE,
    DONT_STOP_ON_NEWLINE,
    Span,
    TokenCursor,
    next_token,
    scan_span,
    iter_tokens,
    parse_line,
    parse_int,
    parse_float,
)
from qtext.entities import parse_worldspawn_key, parse_entities
