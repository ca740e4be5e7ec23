"""Tests for the output envelope and error reporting."""

import json

import pytest

from ez.output import (
    Cancelled,
    CommandContext,
    CommandOutput,
    EzError,
    GeneralError,
    InvalidArgs,
    NotFound,
    PermissionDenied,
    output_result,
)


class TestCommandOutput:
    """Test the JSON envelope."""

    def test_envelope_without_metadata(self):
        """Test that metadata is omitted when unset."""
        output = CommandOutput("chain", {"pipeline": "ls"})
        assert output.to_dict() == {
            "command": "chain",
            "version": 1,
            "success": True,
            "data": {"pipeline": "ls"},
        }

    def test_envelope_with_metadata(self):
        """Test that metadata is included once set."""
        output = CommandOutput("explain").with_metadata({"stage_count": 2})
        assert json.loads(output.to_json())["metadata"] == {"stage_count": 2}
        assert output.data == {}


class TestErrors:
    """Test the error hierarchy."""

    @pytest.mark.parametrize("error_class,code,kind", [
        (GeneralError, 1, "general"),
        (InvalidArgs, 2, "invalid_args"),
        (NotFound, 3, "not_found"),
        (PermissionDenied, 4, "permission_denied"),
        (Cancelled, 5, "cancelled"),
    ])
    def test_codes_and_kinds(self, error_class, code, kind):
        error = error_class("boom")
        assert isinstance(error, EzError)
        assert error.to_json() == {"error": True, "code": code, "kind": kind, "message": "boom"}


class TestCommandContext:
    """Test confirmation policy."""

    @pytest.mark.parametrize("yes,stdin_tty,expected", [
        (False, True, True),
        (True, True, False),
        (False, False, False),
    ])
    def test_should_confirm(self, yes, stdin_tty, expected):
        ctx = CommandContext(yes=yes, is_tty=False, is_stdin_tty=stdin_tty)
        assert ctx.should_confirm() is expected


class TestOutputResult:
    """Test result reporting."""

    def test_json_success_printed(self, capsys):
        """Test that JSON mode prints exactly one envelope."""
        ctx = CommandContext(json_output=True, is_tty=False, is_stdin_tty=False)
        output_result(ctx, lambda: CommandOutput("chain", {"pipeline": "ls"}))

        out = capsys.readouterr().out
        assert json.loads(out)["data"] == {"pipeline": "ls"}

    def test_human_success_prints_nothing_extra(self, capsys):
        """Test that human mode leaves printing to the command."""
        ctx = CommandContext(is_tty=False, is_stdin_tty=False)
        output_result(ctx, lambda: CommandOutput("chain"))
        assert capsys.readouterr().out == ""

    def test_json_error(self, capsys):
        """Test that JSON errors go to stderr with the exit code."""
        ctx = CommandContext(json_output=True, is_tty=False, is_stdin_tty=False)

        def fail():
            raise InvalidArgs("Empty command")

        with pytest.raises(SystemExit) as exc_info:
            output_result(ctx, fail)

        assert exc_info.value.code == 2
        captured = capsys.readouterr()
        assert captured.out == ""
        assert json.loads(captured.err)["kind"] == "invalid_args"

    def test_human_error(self, capsys):
        """Test the human error line."""
        ctx = CommandContext(is_tty=False, is_stdin_tty=False)

        def fail():
            raise NotFound("missing")

        with pytest.raises(SystemExit) as exc_info:
            output_result(ctx, fail)

        assert exc_info.value.code == 3
        assert capsys.readouterr().err.strip() == "Error: missing"
