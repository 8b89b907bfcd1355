"""
r2mcp: radare2 analysis over the Model Context Protocol
"""

from r2mcp.version import __version__

__all__ = ["__version__"]
