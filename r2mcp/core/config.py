"""
r2mcp Configuration
-------------------
Centralized configuration for the stdio connector.
Loads from environment variables; command-line flags override on top.
"""

import os
import logging
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger("R2MCP.Config")

_PREFIX = "R2MCP_"


def _parse_positive_int_env(name: str, default: int, allow_zero: bool = False) -> int:
    raw = os.environ.get(f"{_PREFIX}{name}")
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
        if value < 0 or (value == 0 and not allow_zero):
            raise ValueError
        return value
    except ValueError:
        logger.warning(
            "Invalid %s%s value '%s'; expected %s integer. Using %d.",
            _PREFIX,
            name,
            raw,
            "non-negative" if allow_zero else "positive",
            default,
        )
        return default


def _optional_env(name: str) -> Optional[str]:
    raw = os.environ.get(f"{_PREFIX}{name}", "").strip()
    return raw or None


class LoggingConfig(BaseModel):
    """Diagnostics go to stderr or a file, never stdout."""
    level: str = "INFO"
    file: Optional[str] = None


class TransportConfig(BaseModel):
    """stdin framing and polling."""
    poll_interval_ms: int = 100
    read_chunk_size: int = 4096
    buffer_initial_bytes: int = 65536
    buffer_max_bytes: int = 16 * 1024 * 1024


class ToolsConfig(BaseModel):
    """Tool catalogue and tool-call output."""
    page_size: int = 10
    response_max_chars: int = 0
    default_analysis_level: str = "aaa"


class EngineConfig(BaseModel):
    """radare2 process settings."""
    radare2home: Optional[str] = None


class R2McpConfig(BaseModel):
    """Root configuration for the connector."""
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)

    @classmethod
    def from_env(cls) -> "R2McpConfig":
        """
        Load configuration from environment variables.

        - R2MCP_LOG_LEVEL / R2MCP_LOG_FILE: diagnostics
        - R2MCP_POLL_INTERVAL_MS: bounded wait on stdin readiness
        - R2MCP_READ_CHUNK_SIZE: bytes per stdin read
        - R2MCP_BUFFER_INITIAL_BYTES / R2MCP_BUFFER_MAX_BYTES: read buffer sizing
        - R2MCP_TOOLS_PAGE_SIZE: tools/list page size
        - R2MCP_TOOL_RESPONSE_MAX_CHARS: tool text truncation (0 disables)
        - R2MCP_DEFAULT_ANALYSIS_LEVEL: level used by `analyze` when none given
        - R2MCP_RADARE2_HOME: directory containing the radare2 binary
        """
        initial = _parse_positive_int_env("BUFFER_INITIAL_BYTES", 65536)
        maximum = _parse_positive_int_env("BUFFER_MAX_BYTES", 16 * 1024 * 1024)
        if maximum < initial:
            logger.warning(
                "%sBUFFER_MAX_BYTES (%d) is below %sBUFFER_INITIAL_BYTES (%d); raising it to match.",
                _PREFIX,
                maximum,
                _PREFIX,
                initial,
            )
            maximum = initial

        return cls(
            logging=LoggingConfig(
                level=(_optional_env("LOG_LEVEL") or "INFO").upper(),
                file=_optional_env("LOG_FILE"),
            ),
            transport=TransportConfig(
                poll_interval_ms=_parse_positive_int_env("POLL_INTERVAL_MS", 100),
                read_chunk_size=_parse_positive_int_env("READ_CHUNK_SIZE", 4096),
                buffer_initial_bytes=initial,
                buffer_max_bytes=maximum,
            ),
            tools=ToolsConfig(
                page_size=_parse_positive_int_env("TOOLS_PAGE_SIZE", 10),
                response_max_chars=_parse_positive_int_env("TOOL_RESPONSE_MAX_CHARS", 0, allow_zero=True),
                default_analysis_level=_optional_env("DEFAULT_ANALYSIS_LEVEL") or "aaa",
            ),
            engine=EngineConfig(
                radare2home=_optional_env("RADARE2_HOME"),
            ),
        )
