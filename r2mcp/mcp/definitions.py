import copy
from typing import Any, Dict, List

DEFAULT_PAGE_SIZE = 10
DEFAULT_DISASSEMBLY_INSTRUCTIONS = 10

# Order is fixed: it is the pagination order of tools/list.
TOOLS_SCHEMAS: List[Dict[str, Any]] = [
    {
        "name": "openFile",
        "description": "Open a file for analysis",
        "inputSchema": {
            "type": "object",
            "properties": {
                "filePath": {"type": "string", "description": "Path to the file to open"}
            },
            "required": ["filePath"]
        }
    },
    {
        "name": "closeFile",
        "description": "Close the currently open file",
        "inputSchema": {
            "type": "object",
            "properties": {}
        }
    },
    {
        "name": "runCommand",
        "description": "Run a radare2 command and get the output",
        "inputSchema": {
            "type": "object",
            "properties": {
                "command": {"type": "string", "description": "Command to execute"}
            },
            "required": ["command"]
        }
    },
    {
        "name": "analyze",
        "description": "Run analysis on the current file",
        "inputSchema": {
            "type": "object",
            "properties": {
                "level": {"type": "string", "description": "Analysis level (a, aa, aaa, aaaa)"}
            },
            "required": []
        }
    },
    {
        "name": "disassemble",
        "description": "Disassemble instructions at a given address",
        "inputSchema": {
            "type": "object",
            "properties": {
                "address": {"type": "string", "description": "Address to start disassembly"},
                "numInstructions": {"type": "integer", "description": "Number of instructions to disassemble"}
            },
            "required": ["address"]
        }
    }
]

TOOL_NAMES = tuple(schema["name"] for schema in TOOLS_SCHEMAS)

# Tools that refuse to run until an artifact is open
REQUIRES_OPEN_FILE = {"runCommand", "analyze", "disassemble"}


def parse_cursor(cursor: Any) -> int:
    """Decode a tools/list cursor. Absent, non-string, malformed or negative -> 0."""
    if not isinstance(cursor, str):
        return 0
    try:
        offset = int(cursor.strip())
    except ValueError:
        return 0
    return max(0, offset)


def list_tools_page(cursor: Any = None, page_size: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
    """
    Render one page of the catalogue as a tools/list result.

    `nextCursor` (the decimal end offset) is present only while tools remain
    past this page, so following it from offset 0 visits every tool once.
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    total = len(TOOLS_SCHEMAS)
    start = parse_cursor(cursor)
    end = min(start + page_size, total)

    tools: List[Dict[str, Any]] = []
    for schema_def in TOOLS_SCHEMAS[start:end]:
        tools.append({
            "name": schema_def["name"],
            "description": schema_def["description"],
            "inputSchema": copy.deepcopy(schema_def["inputSchema"]),
        })

    result: Dict[str, Any] = {"tools": tools}
    if start + page_size < total:
        result["nextCursor"] = str(end)
    return result

