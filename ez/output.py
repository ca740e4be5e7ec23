import json
import sys

ENVELOPE_VERSION = 1


class CommandContext:
    """Global state handed to every command."""

    def __init__(self, json_output=False, yes=False, dry_run=False, is_tty=None, is_stdin_tty=None):
        self.json = json_output
        self.yes = yes
        self.dry_run = dry_run
        self.is_tty = sys.stdout.isatty() if is_tty is None else is_tty
        self.is_stdin_tty = sys.stdin.isatty() if is_stdin_tty is None else is_stdin_tty

    def should_confirm(self):
        """Prompt only when --yes was not passed and stdin is interactive."""
        return not self.yes and self.is_stdin_tty


class CommandOutput:
    """Structured JSON envelope shared by every command.

    ``version`` only changes on breaking changes to the envelope. New fields
    may appear without a bump, so consumers should ignore unknown keys.
    """

    def __init__(self, command, data=None, metadata=None):
        self.command = command
        self.version = ENVELOPE_VERSION
        self.success = True
        self.data = {} if data is None else data
        self.metadata = metadata

    def with_metadata(self, metadata):
        self.metadata = metadata
        return self

    def to_dict(self):
        result = {
            "command": self.command,
            "version": self.version,
            "success": self.success,
            "data": self.data,
        }
        if self.metadata is not None:
            result["metadata"] = self.metadata
        return result

    def to_json(self):
        return json.dumps(self.to_dict(), ensure_ascii=False)


class EzError(Exception):
    """Base error. Each subclass maps to its own process exit code."""

    kind = "general"
    exit_code = 1

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_json(self):
        return {
            "error": True,
            "code": self.exit_code,
            "kind": self.kind,
            "message": self.message,
        }


class GeneralError(EzError):
    pass


class InvalidArgs(EzError):
    kind = "invalid_args"
    exit_code = 2


class NotFound(EzError):
    kind = "not_found"
    exit_code = 3


class PermissionDenied(EzError):
    kind = "permission_denied"
    exit_code = 4


class Cancelled(EzError):
    kind = "cancelled"
    exit_code = 5


def output_result(ctx, run, error_prefix="Error:"):
    """Run a command callable and report its outcome.

    In JSON mode a successful ``CommandOutput`` is printed to stdout. Human
    output is printed by the command itself. Errors go to stderr and exit the
    process with the error's code.
    """
    try:
        output = run()
    except EzError as e:
        if ctx.json:
            print(json.dumps(e.to_json(), ensure_ascii=False), file=sys.stderr)
        else:
            print(f"{error_prefix} {e.message}", file=sys.stderr)
        sys.exit(e.exit_code)
    if ctx.json and output is not None:
        print(output.to_json())
    return output
