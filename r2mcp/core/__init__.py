from r2mcp.core.config import R2McpConfig

__all__ = ["R2McpConfig"]
