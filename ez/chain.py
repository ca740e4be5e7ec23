"""Build a shell pipeline from a plain-English request.

Each category below is a keyword test run in a fixed order, and every match
adds its fragments to the same pipeline. Categories do not know about each
other beyond a few "nothing added yet" checks, so some combined requests
produce stages that do not feed each other sensibly (for example a count
request next to a disk usage request). That is a known limitation of the
keyword approach.
"""
import logging
import re

logger = logging.getLogger(__name__)

FALLBACK_COMMAND = 'echo "Could not parse query. Try being more specific."'

EXTENSIONS = [
    "py", "rs", "js", "ts", "go", "java", "rb", "sh", "txt",
    "md", "json", "yaml", "yml", "toml", "csv", "html", "css",
]

# Longer suffixes first so "100mb" is read as megabytes, not "100m" + "b".
SIZE_UNITS = [
    ("gb", "G"), ("mb", "M"), ("kb", "K"),
    ("g", "G"), ("m", "M"), ("k", "K"),
]

_NUMBER_RE = re.compile(r"\+?[0-9]+")


def _parse_number(word):
    if _NUMBER_RE.fullmatch(word):
        return int(word)
    return None


def extract_size(query):
    """Return the first size like "100mb" or "2g" as a find size ("100M")."""
    for word in query.split():
        for suffix, unit in SIZE_UNITS:
            if word.endswith(suffix):
                number = _parse_number(word[:-len(suffix)])
                if number is not None:
                    return f"{number}{unit}"
    return None


def extract_number(query):
    """Return the first whitespace-separated word that is a whole number."""
    for word in query.split():
        number = _parse_number(word)
        if number is not None:
            return number
    return None


def extract_quoted(query):
    """Return the first double-quoted text, else the first single-quoted text."""
    for quote in ('"', "'"):
        start = query.find(quote)
        if start == -1:
            continue
        end = query.find(quote, start + 1)
        if end != -1:
            return query[start + 1:end]
    return None


def _count_or_default(q, default=10):
    n = extract_number(q)
    return default if n is None else n


def _contains_any(text, *words):
    return any(word in text for word in words)


def _find_command(q):
    find_cmd = "find ."

    for ext in EXTENSIONS:
        if _contains_any(q, f".{ext}", f"{ext} file", f"{ext} files"):
            find_cmd += f' -name "*.{ext}"'
            break

    if _contains_any(q, "large", "big", "over"):
        find_cmd += f" -size +{extract_size(q) or '10M'}"
    elif _contains_any(q, "small", "tiny"):
        find_cmd += " -size -1M"

    if _contains_any(q, "director", "folder"):
        find_cmd += " -type d"
    elif "-name" not in find_cmd:
        find_cmd += " -type f"

    return find_cmd


def build_steps(query):
    """Return the ordered ``(command, explanation)`` fragments for `query`."""
    q = query.lower()
    commands = []

    if _contains_any(q, "find", "search", "look for"):
        logger.debug("chain: find")
        commands.append((_find_command(q), "Find matching files"))

    if _contains_any(q, "count", "how many"):
        logger.debug("chain: count")
        if "line" in q:
            if not commands:
                commands.append(("find . -type f", "Find all files"))
            commands.append(("xargs wc -l", "Count lines in each file"))
        elif not commands:
            commands.append(("find . -type f", "Find all files"))
            commands.append(("wc -l", "Count total files"))

    if _contains_any(q, "sort", "order", "biggest", "largest", "top"):
        logger.debug("chain: sort")
        if _contains_any(q, "smallest", "ascending"):
            commands.append(("sort -n", "Sort numerically (ascending)"))
        else:
            commands.append(("sort -rn", "Sort numerically (largest first)"))

    if _contains_any(q, "top", "first"):
        n = _count_or_default(q)
        commands.append((f"head -{n}", f"Show top {n} results"))
    elif _contains_any(q, "last", "bottom"):
        n = _count_or_default(q)
        commands.append((f"tail -{n}", f"Show last {n} results"))

    if _contains_any(q, "contain", "with text", "matching", "grep"):
        logger.debug("chain: grep")
        # Pattern keeps the caller's casing
        pattern = extract_quoted(query)
        if pattern is not None:
            commands.append((f'grep "{pattern}"', f"Filter lines containing '{pattern}'"))
        else:
            commands.append(('grep "PATTERN"', "Filter matching lines"))

    if "duplicate" in q:
        commands.append(("sort", "Sort for grouping"))
        commands.append(("uniq -d", "Show only duplicates"))
    elif _contains_any(q, "unique", "dedup"):
        commands.append(("sort -u", "Sort and remove duplicates"))

    if _contains_any(q, "replace", "change", "substitute"):
        commands.append(("sed 's/OLD/NEW/g'", "Replace OLD with NEW"))

    if _contains_any(q, "disk", "space", "usage") and not commands:
        commands.append(("du -sh *", "Show size of each item"))
        commands.append(("sort -rh", "Sort by size (largest first)"))

    if not commands:
        logger.debug("chain: no category matched %r", query)
        commands.append((FALLBACK_COMMAND, "No matching pattern found"))

    return commands


def build_pipeline(query):
    """Build the chain result for `query`.

    Returns ``{"input", "pipeline", "steps"}`` where ``steps`` numbers each
    fragment from 1. A query that matches nothing still gets one fallback step.
    """
    commands = build_steps(query)
    return {
        "input": query,
        "pipeline": " | ".join(command for command, _ in commands),
        "steps": [
            {"step": idx, "command": command, "explanation": explanation}
            for idx, (command, explanation) in enumerate(commands, start=1)
        ],
    }
