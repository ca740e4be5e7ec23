import logging
import shlex
from collections import namedtuple

logger = logging.getLogger(__name__)

Stage = namedtuple("Stage", ["command", "args"])

STRICT = "strict"
LENIENT = "lenient"


def split_words(segment):
    """Split one pipeline segment into shell words.

    Returns a ``(words, mode)`` pair. ``mode`` is ``STRICT`` when POSIX shell
    splitting succeeded and ``LENIENT`` when malformed quoting forced a plain
    whitespace split.
    """
    try:
        return shlex.split(segment), STRICT
    except ValueError as e:
        logger.debug("Falling back to whitespace split for %r: %s", segment, e)
        return segment.split(), LENIENT


def tokenize_pipeline(command_string):
    """Split a command string on ``|`` into a list of ``Stage`` tuples.

    Every ``|`` separates stages, so ``||`` yields an empty segment that is
    dropped rather than being read as a shell OR. Segments with no words are
    dropped as well.
    """
    stages = []
    for segment in command_string.split("|"):
        segment = segment.strip()
        if not segment:
            logger.debug("Dropping empty pipeline segment")
            continue
        words, _ = split_words(segment)
        # A quoted empty string still gives an empty command name
        if not words or not words[0]:
            continue
        stages.append(Stage(words[0], words[1:]))
    return stages
