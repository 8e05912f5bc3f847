"""
Entity Tests - worldspawn key lookup and full entity lump parsing.
"""

import pytest

from qtext.entities import parse_worldspawn_key, parse_entities
from qtext.errors import EntityParseError


WORLDSPAWN = '{\n"classname" "info_player_start"\n"origin" "0 0 0"\n}'

LUMP = """{
"classname" "worldspawn"
"message" "The Longest Yard"
"music" "music/fla22k_02.wav"
}
{
"classname" "info_player_deathmatch"
"origin" "-64 128 24"
"angle" "90"
}
"""


class TestWorldspawnKey:

    def test_finds_key(self):
        assert parse_worldspawn_key(WORLDSPAWN, "classname") == "info_player_start"
        assert parse_worldspawn_key(WORLDSPAWN, "origin") == "0 0 0"

    def test_missing_key_is_empty(self):
        assert parse_worldspawn_key(WORLDSPAWN, "missing") == ""

    def test_case_insensitive(self):
        assert parse_worldspawn_key(LUMP, "MESSAGE") == "The Longest Yard"

    def test_only_first_entity(self):
        assert parse_worldspawn_key(LUMP, "angle") == ""

    def test_first_match_wins(self):
        text = '{ "a" "1" "A" "2" }'
        assert parse_worldspawn_key(text, "a") == "1"

    def test_empty_value_stops_scan(self):
        text = '{ "a" "" "b" "2" }'
        assert parse_worldspawn_key(text, "b") == ""

    def test_missing_brace_raises(self):
        with pytest.raises(EntityParseError, match="doesn't start with"):
            parse_worldspawn_key('"classname" "worldspawn"', "classname")

    def test_empty_text_raises(self):
        with pytest.raises(EntityParseError):
            parse_worldspawn_key("", "classname")

    def test_custom_fatal_handler(self):
        messages = []

        class Abort(Exception):
            pass

        def fatal(message):
            messages.append(message)
            raise Abort(message)

        with pytest.raises(Abort):
            parse_worldspawn_key("no brace", "x", fatal=fatal)
        assert messages == ["Entity string doesn't start with {"]

    def test_returning_fatal_handler_still_stops(self):
        messages = []
        with pytest.raises(EntityParseError):
            parse_worldspawn_key("no brace", "x", fatal=messages.append)
        assert len(messages) == 1

    def test_unterminated_entity(self):
        assert parse_worldspawn_key('{ "a" "1"', "b") == ""
        assert parse_worldspawn_key('{ "a" "1"', "a") == "1"


class TestParseEntities:

    def test_full_lump(self):
        entities = parse_entities(LUMP)
        assert len(entities) == 2
        assert entities[0]["classname"] == "worldspawn"
        assert entities[1] == {
            "classname": "info_player_deathmatch",
            "origin": "-64 128 24",
            "angle": "90",
        }

    def test_empty_lump(self):
        assert parse_entities("") == []
        assert parse_entities("  \n ") == []

    def test_empty_entity(self):
        assert parse_entities("{ }") == [{}]

    def test_first_duplicate_wins(self):
        assert parse_entities('{ "a" "1" "a" "2" }') == [{"a": "1"}]

    def test_empty_value_kept(self):
        assert parse_entities('{ "a" "" }') == [{"a": ""}]

    def test_missing_open_brace(self):
        with pytest.raises(EntityParseError, match="Expected"):
            parse_entities('"a" "1"')

    def test_unterminated(self):
        with pytest.raises(EntityParseError, match="Unterminated"):
            parse_entities('{ "a" "1"')

    def test_key_without_value(self):
        with pytest.raises(EntityParseError, match="without value"):
            parse_entities('{ "a"')
