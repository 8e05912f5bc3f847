"""
Security Tests - Injection through keys and values, bounds, untrusted input.
"""

import pytest

from qtext.buffer import BoundedBuffer
from qtext.document import InfoString
from qtext.errors import InfoError, InfoStringError
from qtext.info import (
    validate_info,
    validate_key,
    validate_value,
    value_for_key,
    set_value_for_key,
    try_set_value_for_key,
)
from qtext.spec import MAX_INFO_STRING, MAX_INFO_VALUE


class TestDelimiterInjection:

    def test_value_cannot_add_a_key(self):
        info = InfoString(r"\name\player")
        with pytest.raises(InfoStringError):
            info.set("name", "x\\admin\\1")
        assert "admin" not in info

    def test_key_cannot_add_a_key(self):
        buf = BoundedBuffer(MAX_INFO_STRING, r"\name\player")
        assert try_set_value_for_key(buf, "a\\admin", "1") is InfoError.INVALID_KEY
        assert bytes(buf) == b"\\name\\player"

    def test_smuggled_pair_in_raw_text_is_just_a_pair(self):
        # a raw string that already contains the pair is simply another pair
        assert value_for_key(r"\name\x\admin\1", "admin") == "1"


class TestCommandInjection:

    @pytest.mark.parametrize("value", [
        "player;quit",
        "player; rcon_password x",
        ";",
    ])
    def test_semicolon_rejected(self, value):
        buf = BoundedBuffer(MAX_INFO_STRING)
        assert try_set_value_for_key(buf, "name", value) is InfoError.INVALID_VALUE
        assert len(buf) == 0

    @pytest.mark.parametrize("value", ['"', 'a" "b', '""'])
    def test_quote_rejected(self, value):
        buf = BoundedBuffer(MAX_INFO_STRING)
        assert not set_value_for_key(buf, "name", value)

    def test_semicolon_anywhere_invalidates_info(self):
        assert not validate_info("\\name\\player;quit")

    def test_quote_in_raw_buffer_blocks_edits(self):
        buf = BoundedBuffer(MAX_INFO_STRING, '\\name\\"x"')
        assert try_set_value_for_key(buf, "rate", "1") is InfoError.MALFORMED_INFO_STRING
        assert bytes(buf) == b'\\name\\"x"'


class TestBounds:

    def test_oversized_value_never_truncated(self):
        buf = BoundedBuffer(MAX_INFO_STRING, r"\a\1")
        assert not set_value_for_key(buf, "b", "x" * (MAX_INFO_VALUE * 4))
        assert bytes(buf) == b"\\a\\1"

    def test_oversized_info_rejected(self):
        assert not validate_info("\\k\\" + "v" * 20 + ("\\k\\v" * 200))

    def test_buffer_never_exceeds_capacity(self):
        buf = BoundedBuffer(MAX_INFO_STRING)
        for i in range(200):
            set_value_for_key(buf, f"key{i}", "value" * 10)
            assert len(buf) < MAX_INFO_STRING
        assert validate_info(buf)

    def test_multibyte_counted_in_bytes(self):
        buf = BoundedBuffer(MAX_INFO_STRING)
        # 32 characters, 64 bytes: over the value limit
        assert try_set_value_for_key(buf, "name", "é" * 32) is InfoError.INVALID_VALUE


class TestUntrustedBytes:

    def test_invalid_utf8_preserved(self):
        raw = b"\\name\\\xff\xfe"
        assert validate_info(raw)
        value = value_for_key(raw, "name")
        buf = BoundedBuffer(MAX_INFO_STRING)
        assert set_value_for_key(buf, "name", value)
        assert bytes(buf) == raw

    def test_nul_in_value_is_plain_byte(self):
        buf = BoundedBuffer(MAX_INFO_STRING)
        assert set_value_for_key(buf, "a", "x\0y")
        assert value_for_key(buf, "a") == "x\0y"


class TestUnencodableText:
    """A lone surrogate has no UTF-8 form; it must be rejected, not raise."""

    def test_validators_return_false(self):
        assert validate_key("a\ud800") is False
        assert validate_value("x\ud800") is False
        assert validate_info("\\a\\1\ud800") is False

    def test_set_rejected_and_buffer_unchanged(self):
        buf = BoundedBuffer(MAX_INFO_STRING, r"\a\1")
        assert set_value_for_key(buf, "b", "x\ud800") is False
        assert try_set_value_for_key(buf, "b\udfff", "1") is InfoError.INVALID_KEY
        assert bytes(buf) == b"\\a\\1"

    def test_lookup_in_unencodable_info_is_contract_violation(self):
        with pytest.raises(InfoStringError) as ctx:
            value_for_key("\\a\\1\ud800", "a")
        assert ctx.value.code is InfoError.MALFORMED_INFO_STRING

    def test_document_rejects_unencodable(self):
        info = InfoString(r"\a\1")
        assert "a\ud800" not in info
        with pytest.raises(InfoStringError) as ctx:
            info.set("a", "\ud800")
        assert ctx.value.code is InfoError.INVALID_VALUE
        assert info == r"\a\1"
        with pytest.raises(InfoStringError):
            InfoString("\\a\\\ud800")
