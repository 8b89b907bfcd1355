import logging
from typing import Optional

from .state import ServerState

logger = logging.getLogger("R2MCP.mcp.capabilities")


def check_client_capability(state: ServerState, capability: str) -> bool:
    """Presence-only check against the capabilities the client last declared."""
    caps = state.client_capabilities
    if not isinstance(caps, dict):
        return False
    return capability in caps


def check_server_capability(state: ServerState, capability: str) -> bool:
    if capability == "logging":
        return state.capabilities.logging
    if capability == "tools":
        return state.capabilities.tools
    return False


def assert_capability_for_method(state: ServerState, method: str) -> Optional[str]:
    """Client-side requirements. Returns the denial reason, or None if allowed."""
    if method == "sampling/createMessage":
        if not check_client_capability(state, "sampling"):
            return "Client does not support sampling"
    elif method == "roots/list":
        if not check_client_capability(state, "roots"):
            return "Client does not support listing roots"
    return None


def assert_request_handler_capability(state: ServerState, method: str) -> Optional[str]:
    """Server-side requirements. Returns the denial reason, or None if allowed."""
    if method == "sampling/createMessage":
        if not check_server_capability(state, "sampling"):
            return "Server does not support sampling"
    elif method == "logging/setLevel":
        if not check_server_capability(state, "logging"):
            return "Server does not support logging"
    elif method.startswith("prompts/"):
        if not check_server_capability(state, "prompts"):
            return "Server does not support prompts"
    elif method.startswith("tools/"):
        if not check_server_capability(state, "tools"):
            return "Server does not support tools"
    return None


def gate_method(state: ServerState, method: str) -> Optional[str]:
    denial = assert_capability_for_method(state, method) or assert_request_handler_capability(state, method)
    if denial:
        logger.info("Capability gate rejected %s: %s", method, denial)
    return denial
