"""
qtext Wire Format Specification
===============================

Info strings:
    \\key1\\value1\\key2\\value2          <- One buffer, no separators between pairs
    ^    ^      ^    ^                   <- Every key and value is opened by a backslash

    - Leading backslash required before the first key
    - No trailing delimiter (the last value runs to the end of the buffer)
    - Empty buffer is a valid (empty) info string
    - Keys are compared byte-for-byte (case-sensitive)

Limits:
    - Total length  < MAX_INFO_STRING   (one byte reserved for the terminator)
    - Key length    < MAX_INFO_KEY
    - Value length  < MAX_INFO_VALUE
    - All lengths are byte lengths of the UTF-8 encoding

Forbidden bytes inside keys and values:
    \\   delimiter, would split one field into two
    ;    command separator in console syntax
    "    quote, would unbalance console/configstring quoting

Configstrings:
    - Any text whose double quotes are balanced (even count)
    - Not required to be a well-formed info string

Entity text (map entity lump):
    {
    "classname" "worldspawn"
    "message" "Some map"
    }
    { ... }

    - Brace-delimited blocks of whitespace/quote separated key/value tokens
    - Keys match case-insensitively (ASCII)

Update semantics:
    - Setting a key removes any existing pair, then appends the new pair
    - An updated key therefore moves to the end of the buffer
"""

from __future__ import annotations

# Engine-wide limits (protocol constants, must match every peer)
MAX_INFO_STRING = 512
MAX_INFO_KEY = 64
MAX_INFO_VALUE = 64

# Generic console string bound, used by the url escaping helpers
MAX_STRING_CHARS = 1024

# Delimiters
INFO_DELIMITER = "\\"
INFO_DELIMITER_BYTE = ord(INFO_DELIMITER)
QUOTE = '"'

# Bytes that may never appear inside a key or a value
FORBIDDEN_INFO_CHARS = frozenset('\\;"')
FORBIDDEN_INFO_BYTES = frozenset(c.encode("ascii") for c in FORBIDDEN_INFO_CHARS)

# Bytes rejected anywhere in an info string, even between delimiters
FORBIDDEN_INFO_STRING_BYTES = (b'"', b";")

# Token scanner whitespace. NUL counts as whitespace (end of C string).
WHITESPACE = frozenset("\0 \t\r\n")
NEWLINE = "\n"

# Characters percent-encoded by urlencode_unsafe_chars
URL_UNSAFE_CHARS = frozenset(" #%<>{}|\\^~[]")

# Text encoding used for str <-> wire conversion
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"


def to_wire(text: str | bytes | bytearray) -> bytes:
    """Encode text for the wire. Bytes-like input is passed through."""
    if isinstance(text, str):
        return text.encode(ENCODING, ENCODING_ERRORS)
    return bytes(text)


def from_wire(data: bytes | bytearray) -> str:
    """Decode wire bytes. Lossless: invalid UTF-8 survives as surrogates."""
    return bytes(data).decode(ENCODING, ENCODING_ERRORS)
