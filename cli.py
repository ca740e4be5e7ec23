#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from http.server import HTTPServer, BaseHTTPRequestHandler

from ez.chain import build_pipeline
from ez.custom_commands import (
    KNOWLEDGE_BASE_PATH,
    add_custom_command,
    load_custom_commands,
    make_custom_command,
    parse_flags,
)
from ez.explainer import explain_command
from ez.knowledge_base import build_knowledge_base
from ez.output import (
    Cancelled,
    CommandContext,
    CommandOutput,
    EzError,
    InvalidArgs,
    output_result,
)

__version__ = "0.1.0"

MAX_INPUT_LENGTH = 10000

logger = logging.getLogger("ez")


# Color codes for terminal output
class Colors:
    """Color scheme for terminal output."""
    HEADER = '\033[1;36m'       # Bright cyan for section headers
    PART = '\033[0;33m'         # Yellow for tokens and stage numbers
    MEANING = '\033[2m'         # Dim for token meanings
    PIPELINE = '\033[1;32m'     # Bright green for built pipelines
    COMMAND = '\033[0;36m'      # Cyan for pipeline fragments
    SUMMARY = '\033[1;32m'      # Bright green for the plain English label
    ERROR = '\033[1;31m'        # Bright red for errors
    SUCCESS = '\033[0;32m'      # Green for success messages
    META = '\033[0;90m'         # Dark gray for meta information

    RESET = '\033[0m'
    BOLD = '\033[1m'


# Global flag to disable colors
NO_COLOR = False


def set_no_color(disable):
    """Set the global no-color flag."""
    global NO_COLOR
    NO_COLOR = disable


def colorize_with_flag(text, color):
    """Apply color to text if colors are enabled and terminal supports it."""
    if NO_COLOR or not sys.stdout.isatty():
        return text  # No colors if disabled or not a terminal
    return f"{color}{text}{Colors.RESET}"


def configure_logging(debug=False):
    """Send log records to stderr so stdout stays clean for --json."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def check_input_length(text):
    if len(text) > MAX_INPUT_LENGTH:
        raise InvalidArgs(f"Input too long (max {MAX_INPUT_LENGTH} characters)")


def print_breakdown(breakdown, indent, width):
    for item in breakdown:
        part = colorize_with_flag(f"{indent}{item['part']:<{width}}", Colors.PART)
        meaning = colorize_with_flag(item["meaning"], Colors.MEANING)
        print(f"{part}  {meaning}")


def print_explanation(result):
    """Print an explain result as breakdown tables."""
    stages = result["stages"]
    summary_label = colorize_with_flag("In plain English:", Colors.SUMMARY)

    if not stages:
        print(colorize_with_flag("Command Breakdown:", Colors.HEADER))
        print()
        print_breakdown(result["breakdown"], "  ", 30)
        print()
        print(f"{summary_label} {result['plain_english']}")
        return

    print(colorize_with_flag("Pipeline Breakdown:", Colors.HEADER))
    print()
    for stage in stages:
        number = colorize_with_flag(str(stage["stage"]), Colors.PART)
        print(f"  {colorize_with_flag('Stage', Colors.BOLD)} {number}")
        print_breakdown(stage["breakdown"], "    ", 25)
        if stage["stage"] < len(stages):
            print(f"    {colorize_with_flag('(pipe to next stage)', Colors.META)}")
        print()
    print(f"{summary_label} A pipeline of {len(stages)} commands processing data through multiple stages")


def print_chain(result):
    """Print a built pipeline with its step-by-step explanation."""
    print(colorize_with_flag("Pipeline:", Colors.BOLD))
    print(f"  {colorize_with_flag(result['pipeline'], Colors.PIPELINE)}")
    print()
    print(colorize_with_flag("Explanation:", Colors.BOLD))
    for step in result["steps"]:
        command = colorize_with_flag(step["command"], Colors.COMMAND)
        print(f"  Step {step['step']}: {command} → {step['explanation']}")
    print()
    print(f"{colorize_with_flag('Copy and run:', Colors.META)} {result['pipeline']}")


def run_explain(command_string, ctx, knowledge_base=None):
    check_input_length(command_string)
    result = explain_command(command_string, knowledge_base)
    if not ctx.json:
        print_explanation(result)
    stage_count = len(result["stages"]) if result["stages"] else 1
    return CommandOutput("explain", result).with_metadata({"stage_count": stage_count})


def run_chain(query, ctx):
    result = build_pipeline(query)
    if not ctx.json:
        print_chain(result)
    return CommandOutput("chain", result)


def run_add_command(command, description, flags_str, ctx, path=None):
    """Add or replace an entry in the custom knowledge base."""
    path = path or KNOWLEDGE_BASE_PATH
    flags = parse_flags(flags_str)
    entry = make_custom_command(command, description, flags)

    if ctx.dry_run:
        if not ctx.json:
            print(f"{colorize_with_flag('Dry run:', Colors.META)} would add '{command}' to {path}")
        return CommandOutput("add-command", {"name": command, "entry": entry, "written": False})

    if command in load_custom_commands(path) and ctx.should_confirm():
        # Prompt on stderr so --json output stays a single object
        print(f"Custom command '{command}' already exists. Replace it? [y/N] ",
              end="", file=sys.stderr, flush=True)
        answer = input()
        if answer.strip().lower() not in ("y", "yes"):
            raise Cancelled(f"Kept existing custom command '{command}'")

    add_custom_command(command, description, flags, path)
    if not ctx.json:
        print(f"{colorize_with_flag('Success:', Colors.SUCCESS)} Command '{colorize_with_flag(command, Colors.COMMAND)}' added to the custom knowledge base.")
    return CommandOutput("add-command", {"name": command, "entry": entry, "written": True})


API_INFO = {
    "name": "ez API",
    "version": __version__,
    "description": "Explain shell commands and build pipelines from plain English",
    "endpoints": {
        "POST /explain": {
            "description": "Break a command or pipeline into explained parts",
            "parameters": {"command": "Shell command to explain (required, string)"},
        },
        "POST /chain": {
            "description": "Build a pipeline from a plain English request",
            "parameters": {"query": "What you want to do (required, string)"},
        },
        "GET /": "API documentation and usage information",
    },
    "usage_examples": {
        "curl": "curl -X POST http://localhost:8080/explain -H 'Content-Type: application/json' -d '{\"command\": \"ls -la\"}'",
    },
    "error_codes": {
        "400": "Bad Request - Invalid JSON, missing fields, empty or overlong command",
        "404": "Not Found - Invalid endpoint",
    },
}

API_FIELDS = {
    "/explain": "command",
    "/chain": "query",
}


def handle_api_request(method, path, body, knowledge_base=None):
    """Handle one API request and return ``(status, payload)``."""
    if method == "GET":
        if path == "/":
            return 200, API_INFO
        return 404, {"error": True, "message": "Not Found"}

    field = API_FIELDS.get(path)
    if method != "POST" or field is None:
        return 404, {"error": True, "message": "Not Found"}

    try:
        data = json.loads(body.decode("utf-8") if isinstance(body, bytes) else body)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return 400, InvalidArgs("Invalid JSON").to_json()

    if not isinstance(data, dict) or not isinstance(data.get(field), str):
        return 400, InvalidArgs(f"Missing required field: {field}").to_json()

    ctx = CommandContext(json_output=True, yes=True, is_tty=False, is_stdin_tty=False)
    try:
        if path == "/explain":
            output = run_explain(data[field], ctx, knowledge_base)
        else:
            output = run_chain(data[field], ctx)
    except EzError as e:
        return 400, e.to_json()
    return 200, output.to_dict()


class EzAPIHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the ez API server."""

    def __init__(self, knowledge_base, *args, **kwargs):
        self.knowledge_base = knowledge_base
        super().__init__(*args, **kwargs)

    def _send_json(self, status, payload):
        self.send_response(status)
        self.send_header('Content-type', 'application/json')
        self.send_header('Access-Control-Allow-Origin', '*')
        self.send_header('Access-Control-Allow-Methods', 'POST, GET, OPTIONS')
        self.send_header('Access-Control-Allow-Headers', 'Content-Type')
        self.end_headers()
        self.wfile.write(json.dumps(payload, indent=2).encode())

    def do_GET(self):
        """Handle GET requests - return API documentation."""
        self._send_json(*handle_api_request("GET", self.path, b"", self.knowledge_base))

    def do_POST(self):
        """Handle POST requests - explain commands and build pipelines."""
        content_length = int(self.headers.get('Content-Length') or 0)
        if content_length > MAX_INPUT_LENGTH * 4:
            self._send_json(400, InvalidArgs("Request body too large").to_json())
            return
        body = self.rfile.read(content_length)
        self._send_json(*handle_api_request("POST", self.path, body, self.knowledge_base))

    def do_OPTIONS(self):
        """Handle CORS preflight requests."""
        self.send_response(200)
        self.send_header('Access-Control-Allow-Origin', '*')
        self.send_header('Access-Control-Allow-Methods', 'POST, GET, OPTIONS')
        self.send_header('Access-Control-Allow-Headers', 'Content-Type')
        self.end_headers()

    def log_message(self, format, *args):
        logger.info("%s - %s", self.address_string(), format % args)


def create_api_handler(knowledge_base):
    """Create an API handler bound to the knowledge base."""
    def handler(*args, **kwargs):
        return EzAPIHandler(knowledge_base, *args, **kwargs)
    return handler


def start_api_server(host='localhost', port=8080, knowledge_base=None):
    """Start the API server."""
    server = HTTPServer((host, port), create_api_handler(knowledge_base))

    print(f"ez API server starting on http://{host}:{port}")
    print(f"API documentation available at http://{host}:{port}")
    print(f"Example usage: curl -X POST http://{host}:{port}/chain -H 'Content-Type: application/json' -d '{{\"query\": \"find large files\"}}'")
    print("Press Ctrl+C to stop the server")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down API server...")
        server.shutdown()


def _add_global_flags(parser, defaults):
    """Register flags accepted both before and after the subcommand."""
    default = False if defaults else argparse.SUPPRESS
    parser.add_argument("--json", action="store_true", default=default,
                        help="Output results as JSON for AI agents")
    parser.add_argument("--yes", "--no-confirm", action="store_true", default=default,
                        help="Skip confirmation prompts (answer yes to everything)")
    parser.add_argument("--dry-run", action="store_true", default=default,
                        help="Preview what would happen without making changes")
    parser.add_argument("--no-color", action="store_true", default=default,
                        help="Disable colored output")
    parser.add_argument("--debug", action="store_true", default=default,
                        help="Log debug information to stderr")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="ez",
        description="Easy Unix - explain shell commands and build pipelines from plain English.",
        epilog="Examples:\n"
               "  %(prog)s explain 'find . -name \"*.rs\" | grep test | wc -l'\n"
               "  %(prog)s chain 'find large log files and count lines'\n"
               "  %(prog)s --json explain 'tar -czf out.tar.gz src'\n"
               "  %(prog)s --api --port 8080\n"
               "  %(prog)s --add-command mycmd 'Custom command' '-v:verbose, -q:quiet'",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    _add_global_flags(parser, defaults=True)
    parser.add_argument("--add-command", nargs=3,
                        help="Add custom command to knowledge base",
                        metavar=("COMMAND", "DESCRIPTION", "FLAGS"))
    parser.add_argument("--api", action="store_true",
                        help="Start HTTP API server")
    parser.add_argument("--host", default="localhost",
                        help="API server host (default: localhost)")
    parser.add_argument("--port", type=int, default=8080,
                        help="API server port (default: 8080)")

    common = argparse.ArgumentParser(add_help=False)
    _add_global_flags(common, defaults=False)

    subparsers = parser.add_subparsers(dest="subcommand")
    explain_parser = subparsers.add_parser(
        "explain", parents=[common], help="Explain any Unix command in plain English")
    explain_parser.add_argument("command_string", help="The command or pipeline to explain")
    chain_parser = subparsers.add_parser(
        "chain", parents=[common], help="Build a Unix pipeline from natural language")
    chain_parser.add_argument("query", help="What you want to do in plain English")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.debug)
    set_no_color(args.no_color)

    ctx = CommandContext(json_output=args.json, yes=args.yes, dry_run=args.dry_run)
    knowledge_base = build_knowledge_base(load_custom_commands())
    error_prefix = colorize_with_flag("Error:", Colors.ERROR)

    # Handle API mode
    if args.api:
        start_api_server(args.host, args.port, knowledge_base)
        return

    if args.add_command:
        command, description, flags_str = args.add_command
        output_result(ctx, lambda: run_add_command(command, description, flags_str, ctx), error_prefix)
        return

    if args.subcommand == "explain":
        output_result(ctx, lambda: run_explain(args.command_string, ctx, knowledge_base), error_prefix)
    elif args.subcommand == "chain":
        output_result(ctx, lambda: run_chain(args.query, ctx), error_prefix)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
