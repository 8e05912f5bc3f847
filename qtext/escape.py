"""
qtext Escape - percent-encoding for text that ends up in URLs.

Only the characters in URL_UNSAFE_CHARS are encoded; everything else,
non-ASCII included, passes through. Like the engine's fixed buffers, a
``size`` reserves one slot: output is at most ``size - 1`` UTF-8 bytes long
and neither an escape sequence nor a multi-byte character is ever split.
"""

from __future__ import annotations

from qtext.spec import ENCODING, URL_UNSAFE_CHARS

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def urlencode_unsafe_chars(src: str, size: int | None = None) -> str:
    """Percent-encode unsafe characters as lowercase ``%xx``."""
    limit = None if size is None else size - 1
    if limit is not None and limit <= 0:
        return ""

    out: list[str] = []
    n = 0
    for c in src:
        piece = f"%{ord(c):02x}" if c in URL_UNSAFE_CHARS else c
        width = len(piece.encode(ENCODING, "surrogatepass"))
        if limit is not None and n + width > limit:
            break
        out.append(piece)
        n += width
    return "".join(out)


def urldecode(src: str, size: int | None = None) -> str:
    """Decode ``%XX`` escapes. Malformed escapes are copied verbatim.

    Here ``size`` bounds the decoded bytes. They are read as UTF-8;
    undecodable sequences become U+FFFD.
    """
    limit = None if size is None else size - 1
    if limit is not None and limit <= 0:
        return ""

    out = bytearray()
    i = 0
    length = len(src)
    while i < length:
        if limit is not None and len(out) >= limit:
            break
        c = src[i]
        if c == "%" and i + 2 < length and src[i + 1] in _HEX_DIGITS and src[i + 2] in _HEX_DIGITS:
            out.append(int(src[i + 1:i + 3], 16))
            i += 3
        else:
            out.extend(c.encode(ENCODING, "surrogatepass"))
            i += 1
    return out.decode(ENCODING, "replace")
