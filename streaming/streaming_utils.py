"""
streaming_utils.py - Shared utilities for the streaming helper.

Provides caption array parsing for model responses, logging setup and
small formatting helpers used across modules.
"""

import json
import logging
import re
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# A bracketed array with no nested closing bracket
_JSON_ARRAY_RE = re.compile(r"\[[^\]]+\]")


class ParseError(ValueError):
    """Model output could not be turned into a caption list."""
    pass


class NoArrayFoundError(ParseError):
    """Response contains zero or several bracketed arrays."""
    pass


class InvalidJsonError(ParseError):
    """The bracketed array is not a JSON array of strings."""
    pass


def parse_caption_array(response_text: str) -> list[str]:
    """
    Extract a JSON array of strings from free-form model output.

    Models tend to wrap the array in prose or markdown fences. Exactly one
    bracketed array must be present; several candidates are rejected rather
    than guessed between.

    Args:
        response_text: Raw response text from the model

    Returns:
        The captions, in the order the model produced them

    Raises:
        NoArrayFoundError: If zero or more than one array is present
        InvalidJsonError: If the array is malformed or holds non-strings
    """
    matches = _JSON_ARRAY_RE.findall(response_text or "")
    if len(matches) != 1:
        raise NoArrayFoundError("could not find json array in response")

    try:
        result = json.loads(matches[0])
    except json.JSONDecodeError as e:
        raise InvalidJsonError(f"could not parse json: {e}") from e

    if not isinstance(result, list):
        raise InvalidJsonError("could not parse json: expected an array")

    for index, item in enumerate(result):
        if not isinstance(item, str):
            raise InvalidJsonError(
                f"could not parse json: item {index} is {type(item).__name__}, expected string"
            )

    return result


def configure_logging(verbose: bool = False, log_file: Path | None = None) -> None:
    """
    Set up the "streaming" logger hierarchy.

    Warnings and errors always go to stderr; -v lowers that to DEBUG. A log file,
    when given, receives everything at DEBUG level.
    """
    logger = logging.getLogger("streaming")
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    stderr_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.addHandler(stderr_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)


def format_elapsed_time(seconds: int) -> str:
    """Format seconds as human-readable duration (e.g., '2h 15m 30s')."""
    if seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        minutes = seconds // 60
        secs = seconds % 60
        return f"{minutes}m {secs}s"
    else:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        secs = seconds % 60
        return f"{hours}h {minutes}m {secs}s"
