"""
r2mcp MCP Protocol Constants & Errors
"""

from typing import Any, Optional

JSON_RPC_VERSION = "2.0"
LATEST_PROTOCOL_VERSION = "2024-11-05"
SUPPORTED_PROTOCOL_VERSIONS = (LATEST_PROTOCOL_VERSION,)

# Standard JSON-RPC Error Codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


def negotiate_protocol_version(version: Optional[str]) -> str:
    if version in SUPPORTED_PROTOCOL_VERSIONS:
        return version
    return LATEST_PROTOCOL_VERSION


class McpError(Exception):
    """Base class for failures raised while reading or decoding a message."""

    code = INTERNAL_ERROR


class ParseError(McpError):
    """Raised when an inbound line is not well-formed JSON."""

    code = PARSE_ERROR


class InvalidRequestError(McpError):
    """
    Raised when a well-formed payload is not a usable JSON-RPC request.

    `msg_id` holds the request id when one could still be recovered, so the
    caller can answer with an error instead of dropping the message.
    """

    code = INVALID_REQUEST

    def __init__(self, message: str, msg_id: Any = None, has_id: bool = False):
        super().__init__(message)
        self.msg_id = msg_id
        self.has_id = has_id


class FramingError(McpError):
    """Raised when the input stream can no longer be framed (buffer cap exceeded)."""
