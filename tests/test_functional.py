"""
Functional Tests - InfoString documents and the lookup value ring.
"""

import pytest

from qtext.config import InfoLimits
from qtext.document import InfoString
from qtext.errors import InfoError, InfoStringError, StaleValueError
from qtext.scratch import ValueRing, ScratchValue


# =============================================================================
# InfoString
# =============================================================================

class TestInfoString:

    def test_create_empty(self):
        info = InfoString()
        assert len(info) == 0
        assert bytes(info) == b""
        assert info.keys() == []

    def test_create_from_text(self):
        info = InfoString(r"\name\player\rate\25000")
        assert info.get("name") == "player"
        assert info.get("rate") == "25000"
        assert len(info) == 2

    def test_malformed_initial_rejected(self):
        with pytest.raises(InfoStringError) as ctx:
            InfoString(r"\name")
        assert ctx.value.code is InfoError.MALFORMED_INFO_STRING

    def test_get_default(self):
        info = InfoString(r"\a\1")
        assert info.get("b") is None
        assert info.get("b", "fallback") == "fallback"

    def test_require(self):
        info = InfoString(r"\a\1")
        assert info.require("a") == "1"
        with pytest.raises(InfoStringError) as ctx:
            info.require("b")
        assert ctx.value.code is InfoError.NOT_FOUND

    def test_set_moves_to_end(self):
        info = InfoString(r"\a\1\b\2")
        info.set("a", "9")
        assert info.keys() == ["b", "a"]
        assert str(info) == r"\b\2\a\9"

    def test_set_rejection_raises_with_code(self):
        info = InfoString(r"\a\1")
        with pytest.raises(InfoStringError) as ctx:
            info.set("a", "x;y")
        assert ctx.value.code is InfoError.INVALID_VALUE
        assert info == r"\a\1"

    def test_set_overflow(self):
        limits = InfoLimits(max_info_string=16, max_info_key=8, max_info_value=8)
        info = InfoString(r"\a\1\b\2", limits)
        with pytest.raises(InfoStringError) as ctx:
            info.set("cc", "3333")
        assert ctx.value.code is InfoError.CAPACITY_EXCEEDED
        assert info == r"\a\1\b\2"

    def test_remove(self):
        info = InfoString(r"\a\1\b\2")
        info.remove("a")
        info.remove("a")
        assert info == r"\b\2"

    def test_contains(self):
        info = InfoString(r"\a\1")
        assert "a" in info
        assert "b" not in info
        assert "" not in info
        assert "a;b" not in info
        assert 5 not in info

    def test_iteration_order(self):
        info = InfoString.from_pairs([("z", "1"), ("y", "2"), ("x", "3")])
        assert list(info) == ["z", "y", "x"]
        assert info.items() == [("z", "1"), ("y", "2"), ("x", "3")]

    def test_from_dict(self):
        info = InfoString.from_pairs({"name": "player", "rate": "25000"})
        assert info.to_dict() == {"name": "player", "rate": "25000"}
        assert info.to_bytes() == b"\\name\\player\\rate\\25000"

    def test_from_pairs_rejects_bad_pair(self):
        with pytest.raises(InfoStringError):
            InfoString.from_pairs({"ok": "1", "bad\\key": "2"})

    def test_to_dict_first_duplicate_wins(self):
        info = InfoString(r"\a\1\a\2")
        assert info.to_dict() == {"a": "1"}
        assert len(info) == 2

    def test_equality(self):
        assert InfoString(r"\a\1") == InfoString(r"\a\1")
        assert InfoString(r"\a\1") != InfoString(r"\a\2")
        assert InfoString(r"\a\1") == b"\\a\\1"

    def test_unhashable(self):
        with pytest.raises(TypeError):
            hash(InfoString())

    def test_repr(self):
        assert repr(InfoString(r"\a\1")) == "InfoString('\\\\a\\\\1', keys=['a'])"

    def test_custom_limits_apply_to_buffer(self):
        limits = InfoLimits(max_info_string=32, max_info_key=8, max_info_value=8)
        info = InfoString(limits=limits)
        assert info.buffer.capacity == 32
        with pytest.raises(InfoStringError):
            info.set("longerkey", "v")


# =============================================================================
# ValueRing
# =============================================================================

class TestValueRing:

    def test_lookup(self):
        ring = ValueRing()
        value = ring.value_for_key(r"\name\player", "name")
        assert isinstance(value, ScratchValue)
        assert value == "player"
        assert str(value) == "player"
        assert len(value) == 6

    def test_missing_key(self):
        ring = ValueRing()
        assert ring.value_for_key(r"\a\1", "b") is None

    def test_two_results_live(self):
        ring = ValueRing()
        old = ring.value_for_key(r"\name\alice", "name")
        new = ring.value_for_key(r"\name\bob", "name")
        assert old.is_live and new.is_live
        assert old != new
        assert old == "alice"
        assert new == "bob"

    def test_third_lookup_invalidates_first(self):
        ring = ValueRing()
        first = ring.value_for_key(r"\a\1", "a")
        second = ring.value_for_key(r"\a\2", "a")
        ring.value_for_key(r"\a\3", "a")
        assert not first.is_live
        with pytest.raises(StaleValueError):
            first.value
        assert second == "2"

    def test_missed_lookup_still_advances(self):
        ring = ValueRing()
        first = ring.value_for_key(r"\a\1", "a")
        ring.value_for_key(r"\a\1", "b")
        ring.value_for_key(r"\a\1", "b")
        assert not first.is_live

    def test_stale_handle_never_shows_other_value(self):
        ring = ValueRing(size=1)
        first = ring.value_for_key(r"\a\old", "a")
        ring.value_for_key(r"\a\new", "a")
        with pytest.raises(StaleValueError):
            str(first)
        assert "stale" in repr(first)

    def test_larger_ring(self):
        ring = ValueRing(size=3)
        handles = [ring.value_for_key(f"\\k\\{i}", "k") for i in range(3)]
        assert [h.value for h in handles] == ["0", "1", "2"]
        ring.value_for_key(r"\k\3", "k")
        assert not handles[0].is_live
        assert handles[1].is_live

    def test_invalid_input_raises(self):
        ring = ValueRing()
        with pytest.raises(InfoStringError):
            ring.value_for_key(r"\a", "a")

    def test_rejected_call_keeps_handles_live(self):
        ring = ValueRing(size=1)
        value = ring.value_for_key(r"\a\1", "a")
        with pytest.raises(InfoStringError):
            ring.value_for_key(r"\a\1\b", "a")
        with pytest.raises(InfoStringError):
            ring.value_for_key(r"\a\1", "bad;key")
        assert value.is_live
        assert value == "1"

    def test_stale_error_code(self):
        ring = ValueRing(size=1)
        first = ring.value_for_key(r"\a\1", "a")
        ring.value_for_key(r"\a\2", "a")
        with pytest.raises(StaleValueError) as ctx:
            first.value
        assert ctx.value.code is InfoError.STALE_VALUE

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            ValueRing(size=0)

    def test_repr(self):
        ring = ValueRing()
        ring.value_for_key(r"\a\x", "a")
        assert "size=2" in repr(ring)
