"""
Tests for the tool catalogue and tools/list pagination.
"""

import pytest

from r2mcp.mcp.definitions import (
    REQUIRES_OPEN_FILE,
    TOOL_NAMES,
    TOOLS_SCHEMAS,
    list_tools_page,
    parse_cursor,
)


def _walk(page_size):
    names = []
    cursor = None
    pages = 0
    while True:
        page = list_tools_page(cursor, page_size)
        names.extend(tool["name"] for tool in page["tools"])
        pages += 1
        cursor = page.get("nextCursor")
        if cursor is None:
            return names, pages


class TestCatalogue:
    def test_names_and_order(self):
        assert TOOL_NAMES == ("openFile", "closeFile", "runCommand", "analyze", "disassemble")

    def test_required_arguments(self):
        required = {t["name"]: t["inputSchema"].get("required") for t in TOOLS_SCHEMAS}
        assert required["openFile"] == ["filePath"]
        assert required["runCommand"] == ["command"]
        assert required["disassemble"] == ["address"]
        assert required["analyze"] == []
        assert required["closeFile"] is None

    def test_disassemble_count_is_integer(self):
        schema = TOOLS_SCHEMAS[TOOL_NAMES.index("disassemble")]["inputSchema"]
        assert schema["properties"]["numInstructions"]["type"] == "integer"

    def test_requires_open_file(self):
        assert REQUIRES_OPEN_FILE == {"runCommand", "analyze", "disassemble"}


class TestParseCursor:
    @pytest.mark.parametrize("cursor,expected", [
        (None, 0),
        ("0", 0),
        ("3", 3),
        (" 2 ", 2),
        ("-4", 0),
        ("abc", 0),
        ("", 0),
        (5, 0),
    ])
    def test_values(self, cursor, expected):
        assert parse_cursor(cursor) == expected


class TestListToolsPage:
    def test_default_page_holds_everything(self):
        page = list_tools_page()
        assert [t["name"] for t in page["tools"]] == list(TOOL_NAMES)
        assert "nextCursor" not in page

    def test_entries_have_exactly_three_keys(self):
        for tool in list_tools_page()["tools"]:
            assert set(tool) == {"name", "description", "inputSchema"}

    def test_page_size_two(self):
        first = list_tools_page(None, 2)
        assert [t["name"] for t in first["tools"]] == ["openFile", "closeFile"]
        assert first["nextCursor"] == "2"

        second = list_tools_page("2", 2)
        assert [t["name"] for t in second["tools"]] == ["runCommand", "analyze"]
        assert second["nextCursor"] == "4"

        third = list_tools_page("4", 2)
        assert [t["name"] for t in third["tools"]] == ["disassemble"]
        assert "nextCursor" not in third

    @pytest.mark.parametrize("page_size", [1, 2, 3, 4, 5, 6, 10])
    def test_following_cursors_visits_every_tool_once(self, page_size):
        names, pages = _walk(page_size)
        assert names == list(TOOL_NAMES)
        assert pages == -(-len(TOOL_NAMES) // page_size)

    def test_exact_fit_has_no_next_cursor(self):
        page = list_tools_page("0", len(TOOL_NAMES))
        assert len(page["tools"]) == len(TOOL_NAMES)
        assert "nextCursor" not in page

    def test_cursor_past_end_is_empty(self):
        page = list_tools_page("99")
        assert page == {"tools": []}

    def test_invalid_cursor_starts_from_zero(self):
        assert list_tools_page("garbage", 2)["tools"][0]["name"] == "openFile"

    def test_returned_schemas_are_copies(self):
        page = list_tools_page()
        page["tools"][0]["inputSchema"]["required"].append("mutated")
        assert TOOLS_SCHEMAS[0]["inputSchema"]["required"] == ["filePath"]

    def test_rejects_non_positive_page_size(self):
        with pytest.raises(ValueError):
            list_tools_page(None, 0)
