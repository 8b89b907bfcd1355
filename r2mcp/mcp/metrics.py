import json
import time
import logging
from typing import Any, Optional

logger = logging.getLogger("R2MCP.mcp.metrics")

DEFAULT_WARN_MS = 30000.0


class McpMetrics:
    """
    Tracks outcome and payload size for a single tools/call.
    """
    def __init__(self, msg_id: Any, name: Optional[str]):
        self.msg_id = msg_id
        self.name = name
        self.response_count = 0
        self.response_bytes = 0
        self.saw_protocol_error = False
        self.saw_tool_error = False
        self.started_monotonic = time.monotonic()

    def record_result(self, result: Any) -> None:
        self.response_count += 1
        self.response_bytes += _payload_size(result)
        if isinstance(result, dict) and result.get("isError") is True:
            self.saw_tool_error = True

    def record_error(self, code: int, message: str) -> None:
        self.response_count += 1
        self.response_bytes += _payload_size({"code": code, "message": message})
        self.saw_protocol_error = True

    def get_outcome(self) -> str:
        if self.saw_protocol_error:
            return "protocol_error"
        if self.saw_tool_error:
            return "tool_error"
        if self.response_count > 0:
            return "success"
        return "no_response"

    def log_telemetry(self, warn_threshold_ms: float = DEFAULT_WARN_MS) -> None:
        elapsed_ms = max(0.0, (time.monotonic() - self.started_monotonic) * 1000.0)
        log_method = logger.warning if elapsed_ms >= warn_threshold_ms else logger.info
        log_method(
            "Tool call telemetry: name=%s id=%r outcome=%s elapsed_ms=%.1f response_bytes=%d",
            self.name,
            self.msg_id,
            self.get_outcome(),
            elapsed_ms,
            self.response_bytes,
        )


def _payload_size(payload: Any) -> int:
    try:
        return len(json.dumps(payload).encode("utf-8"))
    except (TypeError, ValueError):
        return 0
