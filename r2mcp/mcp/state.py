import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from r2mcp.core.config import R2McpConfig
from r2mcp.engine import EngineBinding
from r2mcp.version import __version__

SERVER_NAME = "Radare2 MCP Connector"
SERVER_INSTRUCTIONS = "Use this server to analyze binaries with radare2"


@dataclass(frozen=True)
class ServerInfo:
    name: str = SERVER_NAME
    version: str = __version__


@dataclass(frozen=True)
class ServerCapabilities:
    logging: bool = True
    tools: bool = True


@dataclass
class ServerState:
    """
    Negotiated session state.

    `client_capabilities` and `client_info` are copies of what the most recent
    `initialize` declared; each `initialize` replaces both. Until the first
    one they are None and every client capability check fails closed.
    """

    info: ServerInfo = field(default_factory=ServerInfo)
    capabilities: ServerCapabilities = field(default_factory=ServerCapabilities)
    instructions: Optional[str] = SERVER_INSTRUCTIONS
    initialized: bool = False
    client_capabilities: Optional[Any] = None
    client_info: Optional[Any] = None

    def record_initialize(self, params: Any) -> None:
        if not isinstance(params, dict):
            params = {}
        self.client_capabilities = copy.deepcopy(params.get("capabilities"))
        self.client_info = copy.deepcopy(params.get("clientInfo"))
        self.initialized = True

    def advertised_capabilities(self) -> Dict[str, Any]:
        advertised: Dict[str, Any] = {}
        if self.capabilities.tools:
            advertised["tools"] = {"listChanged": False}
        return advertised


@dataclass
class SessionContext:
    """Everything one stdio session owns: negotiated state, engine binding, config."""

    binding: EngineBinding
    state: ServerState = field(default_factory=ServerState)
    config: R2McpConfig = field(default_factory=R2McpConfig)
