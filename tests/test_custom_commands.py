"""Tests for the user-defined knowledge base file."""

import json

import pytest

from ez.custom_commands import add_custom_command, load_custom_commands, parse_flags
from ez.output import InvalidArgs


class TestLoad:
    """Test reading the custom knowledge base."""

    def test_missing_file(self, tmp_path):
        assert load_custom_commands(str(tmp_path / "none.json")) == {}

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "kb.json"
        path.write_text("{not json")
        assert load_custom_commands(str(path)) == {}

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "kb.json"
        path.write_bytes(b'{"x": "\xff"}')
        assert load_custom_commands(str(path)) == {}

    def test_non_object_file(self, tmp_path):
        path = tmp_path / "kb.json"
        path.write_text("[1, 2]")
        assert load_custom_commands(str(path)) == {}


class TestParseFlags:
    """Test the compact flag syntax."""

    def test_pairs(self):
        assert parse_flags("-v:verbose, --dry:'no changes'") == {"-v": "verbose", "--dry": "no changes"}

    @pytest.mark.parametrize("text", ["none", "NULL", "-", ""])
    def test_no_flags(self, text):
        assert parse_flags(text) == {}

    def test_parts_without_colon_skipped(self):
        assert parse_flags("-v, -q:quiet") == {"-q": "quiet"}


class TestAdd:
    """Test saving custom commands."""

    def test_add_and_reload(self, tmp_path):
        """Test that saved entries can be read back."""
        path = str(tmp_path / "kb.json")
        add_custom_command("mycmd", "My tool", {"-v": "verbose"}, path)
        add_custom_command("other", "Other tool", {}, path)

        assert load_custom_commands(path) == {
            "mycmd": {"description": "My tool", "flags": {"-v": "verbose"}},
            "other": {"description": "Other tool", "flags": {}},
        }
        assert json.loads((tmp_path / "kb.json").read_text())["mycmd"]["description"] == "My tool"

    @pytest.mark.parametrize("name,description", [("", "desc"), ("cmd", "  ")])
    def test_rejects_blank_fields(self, tmp_path, name, description):
        path = tmp_path / "kb.json"
        with pytest.raises(InvalidArgs):
            add_custom_command(name, description, {}, str(path))
        assert not path.exists()
