"""Mini-program cloud function adapter.

The cloud runtime delivers the caller's ``data`` object as the event, already
structured, and returns whatever the function returns to the caller as-is.
"""

from __future__ import annotations

from typing import Any

from modrpc.core.context import CallContext
from modrpc.server.base import RpcAdapter


class CloudRpcHandler(RpcAdapter):
    """Entry for a single cloud function serving every RPC module."""

    async def handle(self, event: Any, context: Any = None) -> Any:
        event = event if event is not None else {}
        ctx = CallContext(source=event, headers={}, body=event, platform_context=context)
        return await self.dispatcher.dispatch(ctx)


def create_cloud_handler(config=None, *, before=None, after=None, registry=None) -> CloudRpcHandler:
    return CloudRpcHandler(config, before=before, after=after, registry=registry)
