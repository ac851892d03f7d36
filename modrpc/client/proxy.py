"""RPC client: build requests, send them, unwrap envelopes.

    client = create_fetch_client("https://api.example.com/rpc", headers=get_token_headers)
    profile = await client.call("user", "getProfile", 42)
    profile = await client.user.getProfile(42)  # same call
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import httpx

from modrpc.client.transports import (
    CallFunction,
    CloudFunctionTransport,
    FetchTransport,
    RequestFunction,
    RequestTransport,
    RpcTransport,
    TransportResponse,
)
from modrpc.config.schema import ClientConfig
from modrpc.core.envelope import RpcRequest, decode_envelope
from modrpc.core.hooks import maybe_await
from modrpc.utils.exceptions import HTTP_ERROR, TransportError

HeadersSource = dict[str, Any] | Callable[[], dict[str, Any] | Awaitable[dict[str, Any]]] | None


class RpcClient:
    """Calls ``module.action(*params)`` on a remote server through ``transport``.

    A call resolves with the handler's return value or raises an RpcError
    subclass carrying the failure ``code``; it never returns a failure envelope.
    """

    def __init__(self, transport: RpcTransport, *, headers: HeadersSource = None):
        self._transport = transport
        self._headers = headers

    async def _resolve_headers(self) -> dict[str, Any]:
        if callable(self._headers):
            return dict(await maybe_await(self._headers()) or {})
        if isinstance(self._headers, dict):
            return dict(self._headers)
        return {}

    async def call(self, module: str, action: str, *params: Any) -> Any:
        request = RpcRequest(rpcModule=module, rpcAction=action, rpcParams=list(params))
        headers = await self._resolve_headers()
        response = await self._transport.send(request.to_wire(), headers)
        return unwrap_response(response)

    def __getattr__(self, module: str) -> ModuleProxy:
        if module.startswith("_"):
            raise AttributeError(module)
        return ModuleProxy(self, module)

    async def aclose(self) -> None:
        close = getattr(self._transport, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> RpcClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


class ModuleProxy:
    """``client.<module>``; attribute access yields an async action callable."""

    def __init__(self, client: RpcClient, module: str):
        self._client = client
        self._module = module

    def __getattr__(self, action: str) -> Callable[..., Awaitable[Any]]:
        if action.startswith("_"):
            raise AttributeError(action)

        async def _invoke(*params: Any) -> Any:
            return await self._client.call(self._module, action, *params)

        _invoke.__name__ = action
        _invoke.__qualname__ = f"{self._module}.{action}"
        return _invoke

    def __repr__(self) -> str:
        return f"<ModuleProxy {self._module}>"


def unwrap_response(response: TransportResponse) -> Any:
    """Turn a transport response into the handler result or a raised error."""
    status = response.status_code
    if status is not None and not 200 <= int(status) < 300:
        raise TransportError(f"HTTP Error: {status}", code=HTTP_ERROR, status_code=int(status))
    return decode_envelope(response.data)


def create_fetch_client(
    url: str,
    *,
    headers: HeadersSource = None,
    http_client: httpx.AsyncClient | None = None,
    timeout: float = 30.0,
) -> RpcClient:
    return RpcClient(FetchTransport(url, http_client=http_client, timeout=timeout), headers=headers)


def create_request_client(url: str, request: RequestFunction, *, headers: HeadersSource = None) -> RpcClient:
    return RpcClient(RequestTransport(url, request), headers=headers)


def create_cloud_client(function_name: str, call_function: CallFunction) -> RpcClient:
    return RpcClient(CloudFunctionTransport(function_name, call_function))


def create_client(
    config: ClientConfig,
    *,
    request: RequestFunction | None = None,
    call_function: CallFunction | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> RpcClient:
    """Build a client from ``ClientConfig``.

    ``function_name`` selects the cloud-function transport (``call_function``
    required); otherwise ``url`` is used, through ``request`` when one is given
    and httpx when not.
    """
    if config.function_name:
        if call_function is None:
            raise ValueError("[modrpc.client] `function_name` needs a `call_function` callable.")
        return create_cloud_client(config.function_name, call_function)
    headers = config.headers or None
    if request is not None:
        return create_request_client(config.url, request, headers=headers)
    return create_fetch_client(config.url, headers=headers, http_client=http_client, timeout=config.timeout)
