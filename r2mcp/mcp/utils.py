import logging
from typing import Any

logger = logging.getLogger("R2MCP.mcp.utils")

TRUNCATION_SUFFIX = "\n\n[Response truncated due to size limits]"


def truncate_tool_text(text: str, name: str, max_chars: int) -> str:
    """Clamp tool output to `max_chars` characters; 0 leaves it untouched."""
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    logger.info("Truncating response for tool '%s' (%d -> %d chars)", name, len(text), max_chars)
    cutoff = max(0, max_chars - len(TRUNCATION_SUFFIX))
    return text[:cutoff] + TRUNCATION_SUFFIX


def required_string(arguments: Any, key: str) -> str:
    """Return a non-empty string argument, or "" when it is absent, empty or not a string."""
    if not isinstance(arguments, dict):
        return ""
    value = arguments.get(key)
    if not isinstance(value, str):
        return ""
    return value


def optional_int(arguments: Any, key: str, default: int) -> int:
    if not isinstance(arguments, dict):
        return default
    value = arguments.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value
