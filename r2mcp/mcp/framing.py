import logging
from typing import Optional

from .protocol import FramingError

logger = logging.getLogger("R2MCP.mcp.framing")

DEFAULT_INITIAL_CAPACITY = 65536
DEFAULT_MAX_CAPACITY = 16 * 1024 * 1024


class ReadBuffer:
    """
    Accumulates raw stdin bytes and hands back complete newline-delimited messages.

    Bytes `[0, size)` are unconsumed input: zero or more complete lines followed
    by at most one partial line. Capacity doubles whenever an append would
    overflow it, up to `max_capacity`; past the cap the append fails with
    `FramingError` and the buffer is left untouched.
    """

    def __init__(
        self,
        initial_capacity: int = DEFAULT_INITIAL_CAPACITY,
        max_capacity: Optional[int] = DEFAULT_MAX_CAPACITY,
    ):
        if initial_capacity <= 0:
            raise ValueError("initial_capacity must be positive")
        if max_capacity is not None and max_capacity < initial_capacity:
            raise ValueError("max_capacity must be at least initial_capacity")
        self._data = bytearray()
        self.capacity = initial_capacity
        self.max_capacity = max_capacity

    @property
    def size(self) -> int:
        return len(self._data)

    def append(self, data: bytes) -> None:
        if not data:
            return
        required = len(self._data) + len(data)
        if self.max_capacity is not None and required > self.max_capacity:
            raise FramingError(
                f"Unterminated input exceeds {self.max_capacity} bytes "
                f"({required} bytes buffered without a newline)"
            )
        new_capacity = self.capacity
        while required > new_capacity:
            new_capacity *= 2
        if self.max_capacity is not None:
            new_capacity = min(new_capacity, self.max_capacity)
        if new_capacity != self.capacity:
            logger.debug("Growing read buffer %d -> %d bytes", self.capacity, new_capacity)
            self.capacity = new_capacity
        self._data.extend(data)

    def next_message(self) -> Optional[bytes]:
        """
        Pop the first complete line (without its newline), or None if there is none yet.

        Call repeatedly after each append until it returns None.
        """
        newline = self._data.find(b"\n")
        if newline < 0:
            return None
        message = bytes(self._data[:newline])
        del self._data[: newline + 1]
        return message

    def pending(self) -> bytes:
        """Bytes still waiting for a terminating newline."""
        return bytes(self._data)
