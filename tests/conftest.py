from typing import Dict, List, Optional

import pytest

from r2mcp.core.config import R2McpConfig
from r2mcp.engine import AnalysisEngine, EngineBinding, EngineError
from r2mcp.mcp.state import SessionContext


class FakeEngine(AnalysisEngine):
    """In-memory stand-in for radare2 that records every call."""

    def __init__(self, outputs: Optional[Dict[str, str]] = None, unopenable=(), fail_commands=()):
        self.outputs = dict(outputs or {})
        self.unopenable = set(unopenable)
        self.fail_commands = set(fail_commands)
        self.calls: List[tuple] = []
        self.loaded: Optional[str] = None
        self.shut_down = False

    def open(self, path: str) -> bool:
        self.calls.append(("open", path))
        if path in self.unopenable:
            return False
        self.loaded = path
        return True

    def close(self) -> None:
        self.calls.append(("close",))
        self.loaded = None

    def run_command(self, command: str) -> str:
        self.calls.append(("cmd", command))
        if command in self.fail_commands:
            raise EngineError("broken pipe")
        return self.outputs.get(command, "")

    def run_level(self, level: str) -> None:
        self.calls.append(("level", level))

    def shutdown(self) -> None:
        self.calls.append(("shutdown",))
        self.shut_down = True


@pytest.fixture
def engine():
    return FakeEngine(outputs={"afl": "0x1000 1 10 main", "pd 10 @ 0x1000": "0x1000 nop"})


@pytest.fixture
def ctx(engine):
    return SessionContext(binding=EngineBinding(lambda: engine), config=R2McpConfig())


class _SentMessages(list):
    """List of captured messages that can carry the send callbacks as attributes."""


@pytest.fixture
def sent():
    """Captured output of a handler: ("result", id, payload) / ("error", id, code, message)."""
    messages = _SentMessages()

    def send_result(msg_id, result):
        messages.append(("result", msg_id, result))

    def send_error(msg_id, code, message):
        messages.append(("error", msg_id, code, message))

    messages.send_result = send_result
    messages.send_error = send_error
    return messages
