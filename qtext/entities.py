"""
qtext Entities - reading key/value blocks from a map's entity text.

Entity text comes from local map files, not from the network. Malformed text
points at a broken content pipeline, so it is reported through a fatal
callback (by default: raise EntityParseError) rather than tolerated.
"""

from __future__ import annotations

import logging
from typing import Callable, NoReturn

from qtext.errors import EntityParseError
from qtext.text import str_case_equal
from qtext.tokenizer import DONT_STOP_ON_NEWLINE, TokenCursor, next_token

logger = logging.getLogger(__name__)

FatalHandler = Callable[[str], NoReturn]

OPEN_BRACE = "{"
CLOSE_BRACE = "}"


def _raise_fatal(message: str) -> NoReturn:
    raise EntityParseError(message)


def parse_worldspawn_key(entities: str, key_name: str, fatal: FatalHandler | None = None) -> str:
    """Return the value of ``key_name`` in the first (worldspawn) entity.

    Keys match ASCII case-insensitively; the first match wins. Returns ""
    when the key is missing. Reading stops at the closing brace or at the
    first empty or absent token.
    """
    cursor = TokenCursor(entities)

    if next_token(cursor, DONT_STOP_ON_NEWLINE) != OPEN_BRACE:
        (fatal or _raise_fatal)("Entity string doesn't start with {")
        # a fatal handler that returns still stops parsing
        raise EntityParseError("Entity string doesn't start with {")

    while True:
        key = next_token(cursor, DONT_STOP_ON_NEWLINE)
        value = next_token(cursor, DONT_STOP_ON_NEWLINE)

        if not key or not value or key == CLOSE_BRACE:
            break

        if str_case_equal(key, key_name):
            return value

    logger.debug("Worldspawn key %r not found", key_name)
    return ""


def parse_entities(entities: str) -> list[dict[str, str]]:
    """Parse every ``{ "key" "value" ... }`` block of an entity lump.

    Within one entity the first occurrence of a key wins. Raises
    EntityParseError on a missing brace, a key without a value, or an
    unterminated block.
    """
    cursor = TokenCursor(entities)
    result: list[dict[str, str]] = []

    while True:
        token = next_token(cursor)
        if token is None:
            return result
        if token != OPEN_BRACE:
            raise EntityParseError(f"Expected {{ at offset {cursor.pos}, found {token!r:.40}")

        entity: dict[str, str] = {}
        while True:
            key = next_token(cursor)
            if key is None:
                raise EntityParseError(f"Unterminated entity {len(result)}")
            if key == CLOSE_BRACE:
                break
            value = next_token(cursor)
            if value is None:
                raise EntityParseError(f"Key {key!r:.40} without value in entity {len(result)}")
            entity.setdefault(key, value)

        logger.debug("Parsed entity %d with %d keys", len(result), len(entity))
        result.append(entity)
