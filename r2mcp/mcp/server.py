import os
import sys
import select
import logging
import threading
from typing import Any, BinaryIO, Dict, Optional

from .codec import RpcRequest, decode_message, encode_error, encode_success, serialize
from .framing import ReadBuffer
from .handlers import dispatch_request
from .protocol import INTERNAL_ERROR, FramingError, InvalidRequestError, ParseError
from .state import SessionContext

logger = logging.getLogger("R2MCP.mcp.server")


class McpServer:
    """
    Serves one client over newline-delimited JSON-RPC on a pair of byte streams.

    Requests are handled strictly one at a time on the calling thread. The
    only suspension point is the bounded wait for stdin readiness, after which
    the shutdown flag is re-checked.
    """
    def __init__(
        self,
        ctx: SessionContext,
        input_stream: Optional[BinaryIO] = None,
        output_stream: Optional[BinaryIO] = None,
    ):
        self.ctx = ctx
        self._input = input_stream if input_stream is not None else sys.stdin.buffer
        self._output = output_stream if output_stream is not None else sys.stdout.buffer

        transport = ctx.config.transport
        self.poll_interval = transport.poll_interval_ms / 1000.0
        self.read_chunk_size = transport.read_chunk_size
        self.buffer = ReadBuffer(transport.buffer_initial_bytes, transport.buffer_max_bytes)

        self.shutdown_requested = threading.Event()
        self.transport_closed = threading.Event()

    def request_shutdown(self) -> None:
        """Ask the loop to stop after the request in flight, if any."""
        self.shutdown_requested.set()

    # Output

    def send_rpc(self, message: Dict[str, Any]) -> None:
        """Serialize and send one JSON-RPC message as a single line."""
        if self.transport_closed.is_set():
            return
        line = serialize(message)
        try:
            self._output.write(line)
            self._output.flush()
        except (BrokenPipeError, OSError, ValueError) as exc:
            self.transport_closed.set()
            logger.warning("MCP stdio transport closed while sending: %s", exc)

    def send_result(self, msg_id: Any, result: Any) -> None:
        self.send_rpc(encode_success(result, msg_id))

    def send_error(self, msg_id: Any, code: int, message: str, data_uri: Optional[str] = None) -> None:
        """Convenience method for sending JSON-RPC errors."""
        self.send_rpc(encode_error(code, message, msg_id, data_uri))

    def _probe_output(self) -> bool:
        """
        Idle-tick liveness check on the output side.

        Flushing an empty write makes no syscall on a real pipe, so it only
        catches streams that are already closed; a reader that went away is
        detected by polling the output descriptor for POLLERR/POLLHUP.
        """
        try:
            self._output.write(b"")
            self._output.flush()
        except (BrokenPipeError, OSError, ValueError) as exc:
            self.transport_closed.set()
            logger.info("Client disconnected (stdout closed): %s", exc)
            return False
        if self._output_hung_up():
            self.transport_closed.set()
            logger.info("Client disconnected (stdout reader gone)")
            return False
        return True

    def _output_hung_up(self) -> bool:
        try:
            fd = self._output.fileno()
        except (AttributeError, OSError, ValueError):
            return False
        if not hasattr(select, "poll"):
            return False
        poller = select.poll()
        poller.register(fd, select.POLLOUT)
        for _, events in poller.poll(0):
            if events & (select.POLLERR | select.POLLHUP):
                return True
        return False

    # Input

    def feed(self, data: bytes) -> None:
        """
        Buffer a chunk of stdin and process every message it completes.

        The chunk is appended one line at a time, so the buffer cap bounds a
        single message rather than the whole chunk.
        """
        start = 0
        while start < len(data) and not self.transport_closed.is_set():
            newline = data.find(b"\n", start)
            end = len(data) if newline < 0 else newline + 1
            self.buffer.append(data[start:end])
            start = end
            self._drain()

    def _drain(self) -> None:
        while not self.transport_closed.is_set():
            message = self.buffer.next_message()
            if message is None:
                break
            self.process_message(message)

    def process_message(self, raw: bytes) -> None:
        if not raw.strip():
            logger.debug("Skipping blank line on stdio transport")
            return
        try:
            request = decode_message(raw)
        except ParseError as exc:
            logger.warning("Dropping malformed message: %s", exc)
            return
        except InvalidRequestError as exc:
            if exc.has_id:
                self.send_rpc(encode_error(exc.code, str(exc), exc.msg_id, include_null_id=True))
            else:
                logger.warning("Dropping invalid message without id: %s", exc)
            return

        if request.is_notification:
            logger.debug("Ignoring notification: %s", request.method)
            return
        self._dispatch_guarded(request)

    def _dispatch_guarded(self, request: RpcRequest) -> None:
        try:
            dispatch_request(self.ctx, request, self.send_error, self.send_result)
        except Exception:
            logger.exception("Unexpected error during RPC dispatch of %s", request.method)
            if not self.transport_closed.is_set():
                self.send_error(request.id, INTERNAL_ERROR, "Internal error during request dispatch.")

    # Loop

    def serve(self) -> str:
        """
        Run until EOF, a write failure, a fatal read error or a shutdown request.

        Returns a short reason for the termination.
        """
        logger.info("Running in MCP direct mode (stdin/stdout)")
        fd = self._input.fileno()
        was_blocking = os.get_blocking(fd)
        os.set_blocking(fd, False)
        reason = "shutdown requested"
        try:
            while not self.shutdown_requested.is_set():
                if self.transport_closed.is_set():
                    reason = "write failure"
                    break
                try:
                    ready, _, _ = select.select([fd], [], [], self.poll_interval)
                except InterruptedError:
                    continue
                except (OSError, ValueError) as exc:
                    logger.error("Select error: %s", exc)
                    reason = "select error"
                    break

                if not ready:
                    if not self._probe_output():
                        reason = "client disconnected"
                        break
                    continue

                try:
                    chunk = os.read(fd, self.read_chunk_size)
                except (BlockingIOError, InterruptedError):
                    continue
                except OSError as exc:
                    logger.error("Error reading from stdin: %s", exc)
                    reason = "read error"
                    break

                if not chunk:
                    logger.info("End of input stream")
                    reason = "end of input"
                    break

                try:
                    self.feed(chunk)
                except FramingError as exc:
                    logger.error("Framing error, closing session: %s", exc)
                    reason = "framing error"
                    break
            else:
                logger.info("Shutdown requested")
        finally:
            try:
                os.set_blocking(fd, was_blocking)
            except OSError as exc:
                logger.debug("Could not restore stdin blocking mode: %s", exc)
        logger.info("Direct mode loop terminated (%s)", reason)
        return reason
