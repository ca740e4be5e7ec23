"""Tests for the command line entry point and API handling."""

import json

import pytest

import cli
from ez import custom_commands
from ez.output import Cancelled, CommandContext


@pytest.fixture(autouse=True)
def no_custom_commands(monkeypatch):
    monkeypatch.setattr(cli, "load_custom_commands", lambda *args: {})


def _run_json(capsys, argv):
    cli.main(argv)
    return json.loads(capsys.readouterr().out)


class TestExplainCommand:
    """Test the explain subcommand."""

    def test_json_single_stage(self, capsys):
        """Test the envelope for one command."""
        envelope = _run_json(capsys, ["--json", "explain", "ls -la"])

        assert envelope["command"] == "explain"
        assert envelope["version"] == 1
        assert envelope["success"] is True
        assert envelope["data"]["stages"] is None
        assert envelope["data"]["args"] == ["-la"]
        assert envelope["metadata"] == {"stage_count": 1}

    def test_json_pipeline_has_stages(self, capsys):
        """Test that stages are reported for two or more stages."""
        envelope = _run_json(capsys, ["--json", "explain", 'find . -name "*.rs" | grep "test" | wc -l'])

        stages = envelope["data"]["stages"]
        assert [stage["command"].split()[0] for stage in stages] == ["find", "grep", "wc"]
        assert envelope["data"]["plain_english"] == "Pipeline with 3 stages"

    def test_json_flag_after_subcommand(self, capsys):
        """Test that global flags are accepted after the subcommand."""
        envelope = _run_json(capsys, ["explain", "--json", "pwd"])
        assert envelope["data"]["plain_english"] == "Print working directory"

    def test_empty_command_exits_with_invalid_args(self, capsys):
        """Test exit code 2 and the JSON error for empty input."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--json", "explain", " | "])

        assert exc_info.value.code == 2
        captured = capsys.readouterr()
        assert captured.out == ""
        assert json.loads(captured.err) == {
            "error": True,
            "code": 2,
            "kind": "invalid_args",
            "message": "Empty command",
        }

    def test_overlong_input_rejected(self, capsys):
        """Test the input length limit."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["explain", "x" * (cli.MAX_INPUT_LENGTH + 1)])

        assert exc_info.value.code == 2
        assert "Input too long" in capsys.readouterr().err

    def test_human_single_stage(self, capsys):
        """Test the breakdown table and summary."""
        cli.main(["explain", "ls -l"])

        out = capsys.readouterr().out
        assert "Command Breakdown:" in out
        assert "Long format with details" in out
        assert "In plain English: List directory contents with detailed information" in out
        assert "\033[" not in out

    def test_human_pipeline(self, capsys):
        """Test per-stage rendering of a pipeline."""
        cli.main(["explain", "cat notes.txt | sort -u"])

        out = capsys.readouterr().out
        assert "Pipeline Breakdown:" in out
        assert "Stage 2" in out
        assert out.count("(pipe to next stage)") == 1
        assert "A pipeline of 2 commands processing data through multiple stages" in out

    def test_custom_command_used(self, capsys, monkeypatch):
        """Test that custom entries reach the explainer."""
        monkeypatch.setattr(cli, "load_custom_commands",
                            lambda *args: {"deploy": {"description": "Ship the app", "flags": {}}})

        envelope = _run_json(capsys, ["--json", "explain", "deploy"])
        assert envelope["data"]["breakdown"] == [{"part": "deploy", "meaning": "Ship the app"}]


class TestChainCommand:
    """Test the chain subcommand."""

    def test_json(self, capsys):
        envelope = _run_json(capsys, ["--json", "chain", "find large log files and count lines"])

        assert envelope["command"] == "chain"
        assert envelope["data"]["pipeline"] == "find . -size +10M -type f | xargs wc -l"
        assert envelope["data"]["input"] == "find large log files and count lines"
        assert "metadata" not in envelope

    def test_human(self, capsys):
        cli.main(["chain", 'find files containing "ERROR"'])

        out = capsys.readouterr().out
        assert "Step 1: find . -type f → Find matching files" in out
        assert "Step 2: grep \"ERROR\" → Filter lines containing 'ERROR'" in out
        assert 'Copy and run: find . -type f | grep "ERROR"' in out

    def test_unparseable_query_succeeds(self, capsys):
        envelope = _run_json(capsys, ["--json", "chain", "asdkjaslkdj"])
        assert envelope["success"] is True
        assert len(envelope["data"]["steps"]) == 1

    def test_long_query_is_not_rejected(self, capsys):
        """Test that chain has no input length limit."""
        query = "find " + "x" * (cli.MAX_INPUT_LENGTH + 1)
        envelope = _run_json(capsys, ["--json", "chain", query])

        assert envelope["success"] is True
        assert envelope["data"]["input"] == query
        assert envelope["data"]["pipeline"] == "find . -type f"

    def test_bad_custom_entry_does_not_break_startup(self, capsys, monkeypatch):
        """Test that a custom entry with a flags list is skipped."""
        monkeypatch.setattr(cli, "load_custom_commands",
                            lambda *args: {"x": {"description": "d", "flags": ["-a"]}})
        envelope = _run_json(capsys, ["--json", "chain", "top 3"])
        assert envelope["data"]["pipeline"] == "sort -rn | head -3"


class TestMain:
    """Test top-level options."""

    def test_no_subcommand_prints_help(self, capsys):
        cli.main([])
        assert "usage: ez" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["--version"])
        assert exc_info.value.code == 0
        assert cli.__version__ in capsys.readouterr().out


class TestAddCommand:
    """Test managing custom commands from the command line."""

    def test_dry_run_writes_nothing(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "kb.json"
        monkeypatch.setattr(cli, "KNOWLEDGE_BASE_PATH", str(path))

        envelope = _run_json(capsys, ["--json", "--dry-run", "--add-command", "mycmd", "My tool", "-v:verbose, -q:quiet"])

        assert envelope["data"]["written"] is False
        assert envelope["data"]["entry"]["flags"] == {"-v": "verbose", "-q": "quiet"}
        assert not path.exists()

    def test_add_writes_file(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "kb.json"
        monkeypatch.setattr(cli, "KNOWLEDGE_BASE_PATH", str(path))

        cli.main(["--yes", "--add-command", "mycmd", "My tool", "none"])

        assert "Success:" in capsys.readouterr().out
        assert json.loads(path.read_text()) == {"mycmd": {"description": "My tool", "flags": {}}}

    def test_replace_declined(self, tmp_path, monkeypatch):
        path = tmp_path / "kb.json"
        path.write_text(json.dumps({"mycmd": {"description": "Old", "flags": {}}}))
        monkeypatch.setattr(cli, "load_custom_commands", custom_commands.load_custom_commands)
        monkeypatch.setattr("builtins.input", lambda: "n")
        ctx = CommandContext(is_tty=False, is_stdin_tty=True)

        with pytest.raises(Cancelled):
            cli.run_add_command("mycmd", "New", "none", ctx, path=str(path))

        assert json.loads(path.read_text())["mycmd"]["description"] == "Old"

    def test_replace_confirmed(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "kb.json"
        path.write_text(json.dumps({"mycmd": {"description": "Old", "flags": {}}}))
        monkeypatch.setattr(cli, "load_custom_commands", custom_commands.load_custom_commands)
        monkeypatch.setattr("builtins.input", lambda: "y")
        ctx = CommandContext(is_tty=False, is_stdin_tty=True)

        output = cli.run_add_command("mycmd", "New", "none", ctx, path=str(path))

        assert output.data["written"] is True
        assert json.loads(path.read_text())["mycmd"]["description"] == "New"

    def test_replace_prompt_goes_to_stderr(self, tmp_path, monkeypatch, capsys):
        """Test that the prompt keeps JSON stdout clean."""
        path = tmp_path / "kb.json"
        path.write_text(json.dumps({"mycmd": {"description": "Old", "flags": {}}}))
        monkeypatch.setattr(cli, "load_custom_commands", custom_commands.load_custom_commands)
        monkeypatch.setattr("builtins.input", lambda: "y")
        ctx = CommandContext(json_output=True, is_tty=False, is_stdin_tty=True)

        cli.run_add_command("mycmd", "New", "none", ctx, path=str(path))

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Replace it? [y/N]" in captured.err


class TestApi:
    """Test API request handling without a socket."""

    def test_docs(self):
        status, payload = cli.handle_api_request("GET", "/", b"")
        assert status == 200
        assert "POST /chain" in payload["endpoints"]

    @pytest.mark.parametrize("method,path", [("GET", "/explain"), ("POST", "/missing"), ("PUT", "/chain")])
    def test_not_found(self, method, path):
        status, _ = cli.handle_api_request(method, path, b"{}")
        assert status == 404

    def test_explain(self):
        status, payload = cli.handle_api_request("POST", "/explain", json.dumps({"command": "wc -l"}).encode())

        assert status == 200
        assert payload["command"] == "explain"
        assert payload["data"]["plain_english"] == "Count lines"

    def test_chain(self):
        status, payload = cli.handle_api_request("POST", "/chain", json.dumps({"query": "top 3"}))

        assert status == 200
        assert payload["data"]["pipeline"] == "sort -rn | head -3"

    def test_invalid_json(self):
        status, payload = cli.handle_api_request("POST", "/explain", b"{oops")
        assert status == 400
        assert payload["message"] == "Invalid JSON"

    def test_missing_field(self):
        status, payload = cli.handle_api_request("POST", "/chain", b'{"command": "ls"}')
        assert status == 400
        assert payload["message"] == "Missing required field: query"

    def test_empty_command(self):
        status, payload = cli.handle_api_request("POST", "/explain", b'{"command": "  "}')
        assert status == 400
        assert payload["kind"] == "invalid_args"

    def test_api_does_not_print(self, capsys):
        cli.handle_api_request("POST", "/explain", b'{"command": "ls"}')
        assert capsys.readouterr().out == ""
