"""
Tests for environment-driven configuration.
"""

from r2mcp.core.config import R2McpConfig

_ENV = (
    "R2MCP_LOG_LEVEL",
    "R2MCP_LOG_FILE",
    "R2MCP_POLL_INTERVAL_MS",
    "R2MCP_READ_CHUNK_SIZE",
    "R2MCP_BUFFER_INITIAL_BYTES",
    "R2MCP_BUFFER_MAX_BYTES",
    "R2MCP_TOOLS_PAGE_SIZE",
    "R2MCP_TOOL_RESPONSE_MAX_CHARS",
    "R2MCP_DEFAULT_ANALYSIS_LEVEL",
    "R2MCP_RADARE2_HOME",
)


def _clean(monkeypatch):
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch):
    _clean(monkeypatch)
    cfg = R2McpConfig.from_env()
    assert cfg.logging.level == "INFO"
    assert cfg.logging.file is None
    assert cfg.transport.poll_interval_ms == 100
    assert cfg.transport.read_chunk_size == 4096
    assert cfg.transport.buffer_initial_bytes == 65536
    assert cfg.transport.buffer_max_bytes == 16 * 1024 * 1024
    assert cfg.tools.page_size == 10
    assert cfg.tools.response_max_chars == 0
    assert cfg.tools.default_analysis_level == "aaa"
    assert cfg.engine.radare2home is None


def test_env_overrides(monkeypatch):
    _clean(monkeypatch)
    monkeypatch.setenv("R2MCP_LOG_LEVEL", "debug")
    monkeypatch.setenv("R2MCP_LOG_FILE", "/tmp/r2mcp.log")
    monkeypatch.setenv("R2MCP_POLL_INTERVAL_MS", "50")
    monkeypatch.setenv("R2MCP_TOOLS_PAGE_SIZE", "2")
    monkeypatch.setenv("R2MCP_TOOL_RESPONSE_MAX_CHARS", "5000")
    monkeypatch.setenv("R2MCP_DEFAULT_ANALYSIS_LEVEL", "aa")
    monkeypatch.setenv("R2MCP_RADARE2_HOME", "/opt/radare2/bin")

    cfg = R2McpConfig.from_env()
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.file == "/tmp/r2mcp.log"
    assert cfg.transport.poll_interval_ms == 50
    assert cfg.tools.page_size == 2
    assert cfg.tools.response_max_chars == 5000
    assert cfg.tools.default_analysis_level == "aa"
    assert cfg.engine.radare2home == "/opt/radare2/bin"


def test_invalid_integers_fall_back(monkeypatch):
    _clean(monkeypatch)
    monkeypatch.setenv("R2MCP_POLL_INTERVAL_MS", "soon")
    monkeypatch.setenv("R2MCP_TOOLS_PAGE_SIZE", "0")
    monkeypatch.setenv("R2MCP_READ_CHUNK_SIZE", "-1")
    monkeypatch.setenv("R2MCP_TOOL_RESPONSE_MAX_CHARS", "-5")

    cfg = R2McpConfig.from_env()
    assert cfg.transport.poll_interval_ms == 100
    assert cfg.tools.page_size == 10
    assert cfg.transport.read_chunk_size == 4096
    assert cfg.tools.response_max_chars == 0


def test_zero_response_limit_allowed(monkeypatch):
    _clean(monkeypatch)
    monkeypatch.setenv("R2MCP_TOOL_RESPONSE_MAX_CHARS", "0")
    assert R2McpConfig.from_env().tools.response_max_chars == 0


def test_buffer_max_raised_to_initial(monkeypatch):
    _clean(monkeypatch)
    monkeypatch.setenv("R2MCP_BUFFER_INITIAL_BYTES", "4096")
    monkeypatch.setenv("R2MCP_BUFFER_MAX_BYTES", "1024")
    cfg = R2McpConfig.from_env()
    assert cfg.transport.buffer_initial_bytes == 4096
    assert cfg.transport.buffer_max_bytes == 4096


def test_blank_values_ignored(monkeypatch):
    _clean(monkeypatch)
    monkeypatch.setenv("R2MCP_LOG_FILE", "   ")
    monkeypatch.setenv("R2MCP_TOOLS_PAGE_SIZE", "")
    cfg = R2McpConfig.from_env()
    assert cfg.logging.file is None
    assert cfg.tools.page_size == 10
