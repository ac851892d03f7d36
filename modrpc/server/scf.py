"""Serverless function adapter for API-gateway style events.

The gateway hands over ``{headers, body, isBase64Encoded, ...}`` and expects
``{statusCode, headers, body}`` back, with ``body`` as a JSON string.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from modrpc.core.context import CallContext
from modrpc.core.envelope import dumps
from modrpc.core.hooks import default_after
from modrpc.server.base import RpcAdapter
from modrpc.utils.exceptions import INVALID_JSON, InvalidRequestError


def gateway_response(envelope: Any) -> dict[str, Any]:
    """Wrap an envelope in the function-gateway response shape (always 200)."""
    return {
        "isBase64Encoded": False,
        "statusCode": 200,
        "headers": {"Content-Type": "application/json"},
        "body": dumps(envelope),
    }


def decode_event_body(event: dict[str, Any]) -> Any:
    """Return the decoded request body of a gateway event."""
    body = event.get("body")
    if body is None or body in ("", b""):
        return {}
    if isinstance(body, (str, bytes)):
        if event.get("isBase64Encoded"):
            try:
                body = base64.b64decode(body, validate=True)
            except (binascii.Error, ValueError) as e:
                raise InvalidRequestError("Request body is not valid base64", code=INVALID_JSON) from e
        try:
            return json.loads(body)
        except ValueError as e:
            raise InvalidRequestError("Request body is not valid JSON", code=INVALID_JSON) from e
    return body


class ScfRpcHandler(RpcAdapter):
    """Entry for serverless runtimes behind an HTTP function gateway."""

    @staticmethod
    def default_after(ctx: Any, result: Any, error: BaseException | None) -> dict[str, Any]:
        return gateway_response(default_after(ctx, result, error))

    async def handle(self, event: Any, context: Any = None) -> Any:
        event = event if isinstance(event, dict) else {}
        headers = event.get("headers") or {}
        try:
            body = decode_event_body(event)
        except InvalidRequestError as exc:
            ctx = CallContext(source=event, headers=headers, body={}, platform_context=context)
            return await self.dispatcher.fail(ctx, exc)
        ctx = CallContext(source=event, headers=headers, body=body, platform_context=context)
        return await self.dispatcher.dispatch(ctx)


def create_scf_handler(config=None, *, before=None, after=None, registry=None) -> ScfRpcHandler:
    """Create a serverless RPC entry; ``after`` replaces the gateway wrapping when given."""
    return ScfRpcHandler(config, before=before, after=after, registry=registry)
