"""Client transports: how a built RPC request reaches the server."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

import httpx

from modrpc.core.hooks import maybe_await
from modrpc.utils.exceptions import NETWORK_ERROR, TransportError


@dataclass(slots=True)
class TransportResponse:
    """Status (None when the transport has none) and decoded body."""

    status_code: int | None
    data: Any


@runtime_checkable
class RpcTransport(Protocol):
    """Send one RPC payload with headers and return the raw response."""

    async def send(self, payload: dict[str, Any], headers: dict[str, Any]) -> TransportResponse:
        ...


class FetchTransport:
    """HTTP POST with a JSON body through ``httpx.AsyncClient``."""

    def __init__(self, url: str, *, http_client: httpx.AsyncClient | None = None, timeout: float = 30.0):
        if not url:
            raise ValueError("[modrpc.client] `url` is required.")
        self.url = url
        self.timeout = timeout
        self._http_client = http_client
        self._owns_client = http_client is None

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._http_client

    async def send(self, payload: dict[str, Any], headers: dict[str, Any]) -> TransportResponse:
        client = await self._get_http_client()
        merged = {"Content-Type": "application/json", **{k: str(v) for k, v in headers.items()}}
        try:
            response = await client.post(self.url, json=payload, headers=merged)
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {e}", code=NETWORK_ERROR) from e
        if not response.is_success:
            return TransportResponse(status_code=response.status_code, data=response.text)
        return TransportResponse(status_code=response.status_code, data=response.content)

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None


RequestFunction = Callable[[dict[str, Any]], Awaitable[Any] | Any]


class RequestTransport:
    """Mini-program style ``request({url, method, header, data})`` function.

    The function returns ``{statusCode, data}`` (``status`` is accepted too),
    either directly or as an awaitable.
    """

    def __init__(self, url: str, request: RequestFunction):
        if not url:
            raise ValueError("[modrpc.client] `url` is required.")
        if request is None:
            raise ValueError("[modrpc.client] a `request` function is required.")
        self.url = url
        self.request = request

    async def send(self, payload: dict[str, Any], headers: dict[str, Any]) -> TransportResponse:
        config = {
            "url": self.url,
            "method": "POST",
            "header": {"content-type": "application/json", **headers},
            "data": payload,
        }
        try:
            res = await maybe_await(self.request(config))
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Request failed: {e}", code=NETWORK_ERROR) from e
        res = res if isinstance(res, dict) else {"data": res}
        status = res.get("statusCode") or res.get("status")
        return TransportResponse(status_code=status, data=res.get("data"))


CallFunction = Callable[[dict[str, Any]], Awaitable[Any] | Any]


class CloudFunctionTransport:
    """Invoke one named cloud function carrying the RPC payload as ``data``.

    Cloud calls carry no headers; they are ignored.
    """

    def __init__(self, function_name: str, call_function: CallFunction):
        if not function_name:
            raise ValueError("[modrpc.client] `function_name` is required.")
        if call_function is None:
            raise ValueError("[modrpc.client] a `call_function` callable is required.")
        self.function_name = function_name
        self.call_function = call_function

    async def send(self, payload: dict[str, Any], headers: dict[str, Any]) -> TransportResponse:
        try:
            res = await maybe_await(self.call_function({"name": self.function_name, "data": payload}))
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Cloud function call failed: {e}", code=NETWORK_ERROR) from e
        result = res.get("result") if isinstance(res, dict) else getattr(res, "result", None)
        return TransportResponse(status_code=None, data=result)
