import json
import logging
import os

from ez.output import InvalidArgs

logger = logging.getLogger(__name__)

# Store JSON next to this module, works both locally and when installed
_MODULE_DIR = os.path.dirname(os.path.abspath(__file__))
KNOWLEDGE_BASE_PATH = os.path.join(_MODULE_DIR, "custom_knowledge_base.json")

NO_FLAGS = {"none", "null", "nil", "-"}


def load_custom_commands(path=KNOWLEDGE_BASE_PATH):
    """Loads the custom knowledge base from the JSON file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            commands = json.load(f)
    except FileNotFoundError:
        return {}
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Ignoring malformed custom knowledge base %s: %s", path, e)
        return {}
    if not isinstance(commands, dict):
        logger.warning("Ignoring custom knowledge base %s: expected a JSON object", path)
        return {}
    return commands


def parse_flags(flags_str):
    """Parse "-f:desc, -g:desc" into a dict. "none" means no flags."""
    flags = {}
    if not flags_str or flags_str.strip().lower() in NO_FLAGS:
        return flags
    for part in flags_str.split(","):
        part = part.strip()
        if ":" not in part:
            continue
        k, v = part.split(":", 1)
        flags[k.strip().replace("'", "")] = v.strip().replace("'", "")
    return flags


def make_custom_command(command, description, flags):
    if not command.strip():
        raise InvalidArgs("Command name must not be empty")
    if not description.strip():
        raise InvalidArgs("Description must not be empty")
    return {"description": description, "flags": flags}


def add_custom_command(command, description, flags, path=KNOWLEDGE_BASE_PATH):
    """Adds a new command to the custom knowledge base."""
    custom_commands = load_custom_commands(path)
    custom_commands[command] = make_custom_command(command, description, flags)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(custom_commands, f, indent=4)
    logger.debug("Saved custom command %r to %s", command, path)
    return custom_commands[command]
