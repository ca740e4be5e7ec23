import logging

from ez.knowledge_base import describe_command, lookup, lookup_flag
from ez.output import InvalidArgs
from ez.parser import tokenize_pipeline

logger = logging.getLogger(__name__)

EXEC_PLACEHOLDER = "{}"
# A lone "+" has a flag prefix, so it is explained as an option.
EXEC_TERMINATORS = (";", "\\;")

FIND_TYPES = {
    "f": "files only",
    "d": "directories only",
    "l": "symlinks only",
}

# Meanings for a value that directly follows a flag, keyed by the flag.
VALUE_MEANINGS = {
    "-name": lambda value: f"Search pattern: {value}",
    "-iname": lambda value: f"Search pattern: {value}",
    "-exec": lambda value: "Command to execute",
    "-C": lambda value: f"Change to directory: {value}",
    "-size": lambda value: f"File size: {value}",
    "-type": lambda value: FIND_TYPES.get(value, "type filter"),
    "-mtime": lambda value: f"Modified within: {value}",
    "-mmin": lambda value: f"Modified within: {value}",
    "-maxdepth": lambda value: f"Depth: {value}",
    "-mindepth": lambda value: f"Depth: {value}",
}


def explain_value(flag, value):
    """Describe `value` given the flag it belongs to."""
    meaning = VALUE_MEANINGS.get(flag)
    if meaning is None:
        return f"Value: {value}"
    return meaning(value)


def _item(part, meaning):
    return {"part": part, "meaning": meaning}


def explain_stage(command, args, knowledge_base=None):
    """Explain one pipeline stage token by token.

    Returns ``(breakdown, plain_english)`` where ``breakdown`` is a list of
    ``{"part", "meaning"}`` dicts in token order. A flag followed by a token
    that does not start with ``-`` consumes that token as its value.
    """
    breakdown = [_item(command, describe_command(command, knowledge_base))]

    i = 0
    while i < len(args):
        arg = args[i]
        if arg.startswith(("-", "+")):
            meaning = lookup_flag(command, arg, knowledge_base)
            if meaning is None:
                meaning = "Long option" if arg.startswith("--") else "Option"
            breakdown.append(_item(arg, meaning))

            if i + 1 < len(args) and not args[i + 1].startswith("-"):
                value = args[i + 1]
                breakdown.append(_item(value, explain_value(arg, value)))
                i += 1
        elif arg == EXEC_PLACEHOLDER:
            breakdown.append(_item(arg, "Placeholder for found file"))
        elif arg in EXEC_TERMINATORS:
            breakdown.append(_item(arg, "End of -exec command (batch mode)"))
        else:
            breakdown.append(_item(arg, "File/directory" if "." in arg else "Argument"))
        i += 1

    return breakdown, plain_english(command, args, knowledge_base)


def _has(args, *flags):
    return any(arg in flags for arg in args)


def _index(args, *flags):
    for idx, arg in enumerate(args):
        if arg in flags:
            return idx
    return None


def _value_after(args, *flags):
    idx = _index(args, *flags)
    if idx is None or idx + 1 >= len(args):
        return None
    return args[idx + 1]


def _first_positional(args):
    for arg in args:
        if not arg.startswith("-"):
            return arg
    return None


def _with_clauses(base, clauses):
    """Start from `base` and append each clause whose flags are present."""
    def describe(args):
        text = base
        for flags, clause in clauses:
            if _has(args, *flags):
                text += clause
        return text
    return describe


def _first_match(choices, default):
    """Use the sentence of the first choice whose flags are present."""
    def describe(args):
        for flags, text in choices:
            if _has(args, *flags):
                return text
        return default
    return describe


def _subcommands(table, default, bare):
    """Dispatch on the first non-flag argument."""
    def describe(args):
        subcommand = _first_positional(args)
        if subcommand is None:
            return bare
        return table.get(subcommand, default)
    return describe


def _describe_find(args):
    text = "Search for "

    type_idx = _index(args, "-type")
    if type_idx is None:
        text += "files and directories "
    elif type_idx + 1 < len(args):
        text += {"f": "files ", "d": "directories ", "l": "symlinks "}.get(args[type_idx + 1], "items ")

    pattern = _value_after(args, "-name", "-iname")
    if pattern is not None:
        text += f"matching '{pattern}' "

    size = _value_after(args, "-size")
    if size is not None:
        text += f"with size {size} "

    if _has(args, "-exec"):
        text += "and run a command on each result"

    return text.rstrip()


def _describe_grep(args):
    pattern = _first_positional(args)
    if pattern is None:
        text = "Search for a pattern in text"
    else:
        text = f"Search for '{pattern}' in text"

    if _has(args, "-i", "--ignore-case"):
        text += " (case-insensitive)"
    if _has(args, "-r", "-R", "--recursive"):
        text += " recursively"
    if _has(args, "-l", "--files-with-matches"):
        text += ", showing only filenames"
    return text


def _describe_tar(args):
    text = _first_match(
        [
            (("-c", "--create"), "Create an archive"),
            (("-x", "--extract"), "Extract files from an archive"),
            (("-t", "--list"), "List archive contents"),
        ],
        "Work with tar archives",
    )(args)
    if _has(args, "-z", "--gzip"):
        text += " (gzip compressed)"
    if _has(args, "-j", "--bzip2"):
        text += " (bzip2 compressed)"
    return text


def _describe_awk(args):
    script = _first_positional(args)
    if script is None:
        return "Process text with awk"
    if "print" in script and "$1" in script:
        return "Print the first column"
    if "print" in script and "$2" in script:
        if "sum" in script or "+=" in script:
            return "Sum up values in column 2"
        return "Print the second column"
    if "NF" in script:
        return "Process text fields"
    return "Process text with a custom script"


def _describe_sed(args):
    if any(arg.startswith(("'s/", "s/")) for arg in args):
        return "Perform text substitution"
    return "Transform text with sed"


# Each rule is either a fixed sentence or a callable taking the argument list.
PLAIN_ENGLISH_RULES = {
    "find": _describe_find,
    "grep": _describe_grep,
    "tar": _describe_tar,
    "ls": _with_clauses("List directory contents", [
        (("-a", "--all"), " including hidden files"),
        (("-l",), " with detailed information"),
        (("-R", "--recursive"), " recursively"),
    ]),
    "cat": "Display file contents",
    "awk": _describe_awk,
    "sed": _describe_sed,
    "sort": _with_clauses("Sort lines of text", [
        (("-n", "--numeric-sort"), " numerically"),
        (("-r", "--reverse"), " in reverse order"),
        (("-u", "--unique"), ", removing duplicates"),
    ]),
    "uniq": _with_clauses("Filter duplicate lines", [
        (("-c", "--count"), " and count occurrences"),
        (("-d", "--repeated"), ", showing only duplicates"),
    ]),
    "wc": _first_match(
        [
            (("-l", "--lines"), "Count lines"),
            (("-w", "--words"), "Count words"),
            (("-c", "--bytes"), "Count bytes"),
        ],
        "Count lines, words, and bytes",
    ),
    "head": "Show the beginning of a file",
    "tail": _with_clauses("Show the end of a file", [
        (("-f", "--follow"), " and follow new changes"),
    ]),
    "cut": "Extract specific columns/fields from text",
    "tr": "Translate or delete characters",
    "chmod": "Change file permissions",
    "chown": "Change file ownership",
    "curl": _with_clauses("Transfer data from/to a URL", [
        (("-O", "--remote-name"), ", saving to file"),
        (("-L", "--location"), ", following redirects"),
    ]),
    "wget": "Download files from the web",
    "ssh": "Connect to a remote server securely",
    "scp": "Copy files securely between hosts",
    "rsync": "Synchronize files between locations",
    "xargs": "Build and execute commands from input",
    "du": "Show disk usage",
    "df": "Show free disk space",
    "ps": "Show running processes",
    "kill": "Send signal to a process",
    "git": _subcommands(
        {
            "add": "Stage files for commit",
            "commit": "Record changes to repository",
            "push": "Upload commits to remote",
            "pull": "Download from remote and merge",
            "clone": "Copy a repository",
            "status": "Show working tree status",
            "log": "Show commit history",
            "branch": "List or manage branches",
            "checkout": "Switch branches",
            "merge": "Join development histories",
            "diff": "Show changes between commits",
        },
        "Execute git command",
        "Work with git repository",
    ),
    "docker": _subcommands(
        {
            "ps": "List running containers",
            "run": "Run a new container",
            "exec": "Execute command in container",
            "build": "Build an image",
            "images": "List images",
            "pull": "Download an image",
            "push": "Upload an image",
            "rm": "Remove containers",
            "rmi": "Remove images",
        },
        "Execute docker command",
        "Manage Docker containers",
    ),
    "rm": _with_clauses("Remove files or directories", [
        (("-r", "-R", "--recursive"), " recursively"),
        (("-f", "--force"), " without prompting"),
    ]),
    "cp": _with_clauses("Copy files or directories", [
        (("-r", "-R", "--recursive"), " recursively"),
    ]),
    "mv": "Move or rename files",
    "mkdir": _with_clauses("Create directories", [
        (("-p", "--parents"), " including parent directories"),
    ]),
    "diff": "Compare files and show differences",
    "ln": _first_match([(("-s", "--symbolic"), "Create a symbolic link")], "Create a hard link"),
    "top": "Monitor system processes interactively",
    "netstat": "Display network connections and statistics",
    "iptables": "Configure firewall rules",
    "crontab": "Manage scheduled tasks",
    "ffmpeg": "Convert or process audio/video",
    "make": "Build software from source",
    "gcc": "Compile C code",
}


def plain_english(command, args, knowledge_base=None):
    """Summarize a single stage as one sentence."""
    rule = PLAIN_ENGLISH_RULES.get(command)
    if rule is None:
        info = lookup(command, knowledge_base)
        if info is None:
            return f"Execute '{command}' command"
        return info["description"]
    if callable(rule):
        return rule(args)
    return rule


def explain_command(command_string, knowledge_base=None):
    """Explain a command or pipeline string.

    A single stage yields its breakdown and plain-English summary with
    ``stages`` set to None. Two or more stages are explained independently
    and reported under ``stages``.

    Raises InvalidArgs when the string holds no command at all.
    """
    stages = tokenize_pipeline(command_string)
    if not stages:
        raise InvalidArgs("Empty command")

    if len(stages) == 1:
        command, args = stages[0]
        breakdown, summary = explain_stage(command, args, knowledge_base)
        return {
            "command": command,
            "args": list(args),
            "breakdown": breakdown,
            "plain_english": summary,
            "stages": None,
        }

    logger.debug("Explaining pipeline with %d stages", len(stages))
    stage_results = []
    for idx, (command, args) in enumerate(stages, start=1):
        breakdown, _ = explain_stage(command, args, knowledge_base)
        stage_results.append({
            "stage": idx,
            "command": " ".join([command] + list(args)),
            "breakdown": breakdown,
        })

    return {
        "command": " | ".join(stage["command"] for stage in stage_results),
        "args": [],
        "breakdown": [],
        "plain_english": f"Pipeline with {len(stages)} stages",
        "stages": stage_results,
    }
