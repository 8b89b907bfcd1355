"""
JSON-RPC envelope decoding/encoding for the stdio transport.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .protocol import JSON_RPC_VERSION, InvalidRequestError, ParseError

RequestId = Union[str, int]


@dataclass
class RpcRequest:
    method: str
    params: Any = None
    id: Optional[RequestId] = None
    has_id: bool = False

    @property
    def is_notification(self) -> bool:
        return not self.has_id


def _valid_id(value: Any) -> bool:
    # bool is an int subclass but not a legal JSON-RPC id
    return isinstance(value, str) or (isinstance(value, int) and not isinstance(value, bool))


def decode_message(raw: Union[bytes, str]) -> RpcRequest:
    """
    Parse one framed line into an RpcRequest.

    Raises ParseError for anything that is not JSON, InvalidRequestError for
    JSON that is not a request object with a string method and a string or
    integer id. A null id is read as no id at all.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Invalid UTF-8 in message: {exc}") from exc
    try:
        msg = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc.msg}") from exc
    except RecursionError as exc:
        raise ParseError("Invalid JSON: nesting too deep") from exc

    if not isinstance(msg, dict):
        raise InvalidRequestError("Invalid Request: message must be a JSON object")

    msg_id = msg.get("id")
    has_id = msg_id is not None
    if has_id and not _valid_id(msg_id):
        raise InvalidRequestError(
            "Invalid Request: id must be a string or an integer",
            msg_id=None,
            has_id=True,
        )

    method = msg.get("method")
    if not isinstance(method, str):
        raise InvalidRequestError(
            "Invalid Request: missing method",
            msg_id=msg_id,
            has_id=has_id,
        )

    return RpcRequest(method=method, params=msg.get("params"), id=msg_id, has_id=has_id)


def encode_success(result: Any, msg_id: Optional[RequestId]) -> Dict[str, Any]:
    envelope: Dict[str, Any] = {"jsonrpc": JSON_RPC_VERSION}
    if msg_id is not None:
        envelope["id"] = msg_id
    envelope["result"] = result
    return envelope


def encode_error(
    code: int,
    message: str,
    msg_id: Optional[RequestId],
    data_uri: Optional[str] = None,
    include_null_id: bool = False,
) -> Dict[str, Any]:
    envelope: Dict[str, Any] = {"jsonrpc": JSON_RPC_VERSION}
    if msg_id is not None or include_null_id:
        envelope["id"] = msg_id
    error: Dict[str, Any] = {"code": code, "message": message}
    if data_uri:
        error["data"] = {"uri": data_uri}
    envelope["error"] = error
    return envelope


def serialize(envelope: Dict[str, Any]) -> bytes:
    """Render one envelope as a single protocol line, newline included."""
    return json.dumps(envelope, separators=(",", ":")).encode("ascii") + b"\n"


# Tool results

def tool_text_result(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}]}


def tool_error_result(text: str) -> Dict[str, Any]:
    return {"content": [{"type": "text", "text": text}], "isError": True}
