import logging
from typing import Any, Callable, Dict, Optional

from r2mcp.engine import EngineError

from .capabilities import gate_method
from .codec import RpcRequest, tool_error_result, tool_text_result
from .definitions import (
    DEFAULT_DISASSEMBLY_INSTRUCTIONS, REQUIRES_OPEN_FILE, list_tools_page
)
from .metrics import McpMetrics
from .protocol import INVALID_PARAMS, METHOD_NOT_FOUND, negotiate_protocol_version
from .state import SessionContext
from .utils import optional_int, required_string, truncate_tool_text

logger = logging.getLogger("R2MCP.mcp.handlers")

SendErrorFn = Callable[[Any, int, str], None]
SendResultFn = Callable[[Any, Any], None]

NO_FILE_OPEN_MESSAGE = "No file is currently open. Please open a file first."


class MissingParameterError(Exception):
    """A tools/call argument the tool cannot run without is absent or empty."""

    def __init__(self, parameter: str):
        super().__init__(f"Missing required parameter: {parameter}")
        self.parameter = parameter


def dispatch_request(ctx: SessionContext, request: RpcRequest, send_error_fn: SendErrorFn, send_result_fn: SendResultFn) -> None:
    """
    Route one JSON-RPC request (never a notification) to its handler.

    The capability gate runs first; a denial answers -32601 with the reason.
    """
    method = request.method
    msg_id = request.id
    params = request.params

    denial = gate_method(ctx.state, method)
    if denial:
        send_error_fn(msg_id, METHOD_NOT_FOUND, denial)
        return

    if method == "initialize":
        handle_initialize(ctx, msg_id, params, send_error_fn, send_result_fn)
    elif method == "ping":
        send_result_fn(msg_id, {})
    elif method.startswith(("resources/", "resource/")):
        send_error_fn(msg_id, METHOD_NOT_FOUND, _unsupported_resource_message(method))
    elif method.startswith("prompts/"):
        send_error_fn(msg_id, METHOD_NOT_FOUND, "Method not implemented: prompts are not supported")
    elif method in ("tools/list", "tool/list"):
        handle_list_tools(ctx, msg_id, params, send_error_fn, send_result_fn)
    elif method in ("tools/call", "tool/call"):
        handle_call_tool(ctx, msg_id, params, send_error_fn, send_result_fn)
    else:
        logger.debug("Unknown method requested: %s", method)
        send_error_fn(msg_id, METHOD_NOT_FOUND, f"Unknown method: {method}")


def _unsupported_resource_message(method: str) -> str:
    if method == "resources/templates/list":
        return "Method not implemented: templates are not supported"
    if method.endswith("/subscribe") or method.endswith("/unsubscribe"):
        return "Method not implemented: subscriptions are not supported"
    return "Method not implemented: resources are not supported"


def handle_initialize(ctx: SessionContext, msg_id: Any, params: Any, send_error_fn: SendErrorFn, send_result_fn: SendResultFn) -> None:
    """Capture client capabilities/info and describe this server."""
    state = ctx.state
    if state.initialized:
        logger.info("Re-initialization requested; replacing previously negotiated client state")

    requested_version = params.get("protocolVersion") if isinstance(params, dict) else None
    negotiated_version = negotiate_protocol_version(requested_version)
    if requested_version and requested_version != negotiated_version:
        logger.info(
            "Client requested protocol %s; answering with %s",
            requested_version,
            negotiated_version,
        )

    state.record_initialize(params)
    client_name = state.client_info.get("name") if isinstance(state.client_info, dict) else None
    logger.info("Client initialized connection (client=%s)", client_name or "unknown")

    result: Dict[str, Any] = {
        "protocolVersion": negotiated_version,
        "serverInfo": {"name": state.info.name, "version": state.info.version},
        "capabilities": state.advertised_capabilities(),
    }
    if state.instructions:
        result["instructions"] = state.instructions
    send_result_fn(msg_id, result)


def handle_list_tools(ctx: SessionContext, msg_id: Any, params: Any, send_error_fn: SendErrorFn, send_result_fn: SendResultFn) -> None:
    """List one page of the tool catalogue."""
    cursor = params.get("cursor") if isinstance(params, dict) else None
    send_result_fn(msg_id, list_tools_page(cursor, ctx.config.tools.page_size))


def handle_call_tool(ctx: SessionContext, msg_id: Any, params: Any, send_error_fn: SendErrorFn, send_result_fn: SendResultFn) -> None:
    """
    Execute a single tool call.

    Missing arguments and unknown tools are protocol errors (-32602); problems
    running the tool itself come back as a result with `isError: true`.
    """
    name = required_string(params, "name")
    metrics = McpMetrics(msg_id, name or None)
    try:
        if not name:
            metrics.record_error(INVALID_PARAMS, "Missing required parameter: name")
            send_error_fn(msg_id, INVALID_PARAMS, "Missing required parameter: name")
            return

        arguments = params.get("arguments")
        if not isinstance(arguments, dict):
            arguments = {}

        try:
            result = _do_call_tool_logic(ctx, name, arguments)
        except MissingParameterError as exc:
            metrics.record_error(INVALID_PARAMS, str(exc))
            send_error_fn(msg_id, INVALID_PARAMS, str(exc))
            return
        except EngineError as exc:
            logger.error("Tool %s failed in radare2: %s", name, exc)
            result = tool_error_result(f"radare2 error: {exc}")

        if result is None:
            message = f"Unknown tool: {name}"
            metrics.record_error(INVALID_PARAMS, message)
            send_error_fn(msg_id, INVALID_PARAMS, message)
            return

        metrics.record_result(result)
        send_result_fn(msg_id, result)
    finally:
        metrics.log_telemetry()


def _do_call_tool_logic(ctx: SessionContext, name: str, arguments: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Dispatch to tool implementations. None means no such tool."""
    dispatch = {
        "openFile": _do_open_file,
        "closeFile": _do_close_file,
        "runCommand": _do_run_command,
        "analyze": _do_analyze,
        "disassemble": _do_disassemble,
    }

    handler = dispatch.get(name)
    if not handler:
        return None
    if name in REQUIRES_OPEN_FILE and not ctx.binding.artifact_open:
        return tool_error_result(NO_FILE_OPEN_MESSAGE)
    return handler(ctx, arguments)


def _text(ctx: SessionContext, name: str, text: str) -> Dict[str, Any]:
    return tool_text_result(truncate_tool_text(text, name, ctx.config.tools.response_max_chars))


def _do_open_file(ctx: SessionContext, args: Dict[str, Any]) -> Dict[str, Any]:
    file_path = required_string(args, "filePath")
    if not file_path:
        raise MissingParameterError("filePath")
    if not ctx.binding.open_artifact(file_path):
        return tool_error_result("Failed to open file.")
    return tool_text_result("File opened successfully.")


def _do_close_file(ctx: SessionContext, args: Dict[str, Any]) -> Dict[str, Any]:
    if not ctx.binding.close_artifact():
        return tool_text_result("No file was open.")
    return tool_text_result("File closed successfully.")


def _do_run_command(ctx: SessionContext, args: Dict[str, Any]) -> Dict[str, Any]:
    command = required_string(args, "command")
    if not command:
        raise MissingParameterError("command")
    return _text(ctx, "runCommand", ctx.binding.run_command(command))


def _do_analyze(ctx: SessionContext, args: Dict[str, Any]) -> Dict[str, Any]:
    level = required_string(args, "level") or ctx.config.tools.default_analysis_level
    ctx.binding.run_level(level)
    functions = ctx.binding.run_command("afl")
    return _text(ctx, "analyze", f"Analysis completed with level {level}.\n\n{functions}")


def _do_disassemble(ctx: SessionContext, args: Dict[str, Any]) -> Dict[str, Any]:
    address = required_string(args, "address")
    if not address:
        raise MissingParameterError("address")
    count = optional_int(args, "numInstructions", DEFAULT_DISASSEMBLY_INSTRUCTIONS)
    return _text(ctx, "disassemble", ctx.binding.run_command(f"pd {count} @ {address}"))
