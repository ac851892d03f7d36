"""Wire models for RPC requests and response envelopes.

Request:  {"rpcModule": str, "rpcAction": str, "rpcParams": [...]}
Success:  {"success": true, "data": any}
Failure:  {"success": false, "error": {"code": str, "message": str}}
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import to_jsonable_python

from modrpc.utils.exceptions import (
    INTERNAL_ERROR,
    InvalidRequestError,
    ProtocolError,
    RpcError,
    error_code_of,
    error_message_of,
    sanitize_error_message,
)


class RpcRequest(BaseModel):
    """One call: module name, action name and positional params."""

    model_config = ConfigDict(populate_by_name=True)

    module: str = Field(alias="rpcModule")
    action: str = Field(alias="rpcAction")
    params: list[Any] = Field(default_factory=list, alias="rpcParams")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ErrorBody(BaseModel):
    code: str = INTERNAL_ERROR
    message: str = ""


class SuccessEnvelope(BaseModel):
    success: Literal[True] = True
    data: Any = None


class FailureEnvelope(BaseModel):
    success: Literal[False] = False
    error: ErrorBody


def parse_request(body: Any) -> RpcRequest:
    """Extract an RpcRequest from a decoded body, raising InvalidRequestError."""
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    module = body.get("rpcModule")
    action = body.get("rpcAction")
    if not isinstance(module, str) or not module or not isinstance(action, str) or not action:
        raise InvalidRequestError("rpcModule and rpcAction are required")
    params = body.get("rpcParams")
    if params is None:
        params = []
    if not isinstance(params, (list, tuple)):
        raise InvalidRequestError("rpcParams must be an array")
    return RpcRequest(rpcModule=module, rpcAction=action, rpcParams=list(params))


def success_envelope(data: Any) -> dict[str, Any]:
    return SuccessEnvelope(data=data).model_dump()


def failure_envelope(code: str, message: str) -> dict[str, Any]:
    return FailureEnvelope(error=ErrorBody(code=code, message=message)).model_dump()


def error_to_envelope(error: BaseException) -> dict[str, Any]:
    """Map any exception onto a failure envelope.

    Coded errors keep their code and message verbatim; uncoded ones become
    INTERNAL_ERROR with a sanitized message.
    """
    code = error_code_of(error)
    if code is not None:
        return failure_envelope(code, error_message_of(error))
    message = sanitize_error_message(error_message_of(error)) or "Internal Server Error"
    return failure_envelope(INTERNAL_ERROR, message)


def is_envelope(value: Any) -> bool:
    return isinstance(value, dict) and isinstance(value.get("success"), bool)


def dumps(value: Any) -> str:
    """Serialize an envelope (or any handler result) to JSON text."""
    return json.dumps(value, default=to_jsonable_python, ensure_ascii=False)


def decode_envelope(payload: Any) -> Any:
    """Unwrap a decoded response body into the handler result.

    Raises RpcError carrying the server's code on failure envelopes.
    """
    if payload is None or payload in ("", b""):
        raise ProtocolError("No data received from server")
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ProtocolError(f"Response body is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise ProtocolError()
    if payload.get("success"):
        return payload.get("data")
    error = payload.get("error")
    if error:
        if isinstance(error, dict):
            raise RpcError(
                str(error.get("code") or INTERNAL_ERROR),
                str(error.get("message") or "Unknown RPC Error"),
            )
        raise RpcError(INTERNAL_ERROR, str(error))
    raise ProtocolError()
