import json

import httpx
import pytest

from modrpc.client import (
    CloudFunctionTransport,
    FetchTransport,
    RequestTransport,
    RpcClient,
    create_client,
    create_cloud_client,
    create_fetch_client,
    create_request_client,
)
from modrpc.config.schema import ClientConfig
from modrpc.utils.exceptions import ProtocolError, RpcError, TransportError

URL = "http://rpc.test/api"


def _mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_call_posts_wire_request_and_returns_data():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "data": {"name": "Ann"}})

    client = create_fetch_client(URL, http_client=_mock_client(handler))
    assert await client.call("user", "getProfile", 42) == {"name": "Ann"}
    assert seen == {
        "method": "POST",
        "url": URL,
        "content_type": "application/json",
        "body": {"rpcModule": "user", "rpcAction": "getProfile", "rpcParams": [42]},
    }


@pytest.mark.asyncio
async def test_dot_call_sugar_matches_call():
    bodies = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "data": None})

    client = create_fetch_client(URL, http_client=_mock_client(handler))
    assert await client.user.getProfile(42) is None
    await client.call("user", "getProfile", 42)
    assert bodies[0] == bodies[1]


@pytest.mark.asyncio
async def test_headers_are_evaluated_per_call():
    tokens = iter(["t1", "t2"])
    seen = []

    async def headers():
        return {"Authorization": f"Bearer {next(tokens)}"}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers["authorization"])
        return httpx.Response(200, json={"success": True, "data": 1})

    client = create_fetch_client(URL, headers=headers, http_client=_mock_client(handler))
    await client.user.whoami()
    await client.user.whoami()
    assert seen == ["Bearer t1", "Bearer t2"]


@pytest.mark.asyncio
async def test_static_header_dict():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True, "data": request.headers["x-app"]})

    client = create_fetch_client(URL, headers={"X-App": "demo"}, http_client=_mock_client(handler))
    assert await client.call("meta", "app") == "demo"


@pytest.mark.asyncio
async def test_failure_envelope_raises_rpc_error_with_code():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "error": {"code": "NOT_FOUND", "message": "gone"}})

    client = create_fetch_client(URL, http_client=_mock_client(handler))
    with pytest.raises(RpcError) as exc_info:
        await client.user.getProfile(404)
    assert (exc_info.value.code, exc_info.value.message) == ("NOT_FOUND", "gone")


@pytest.mark.asyncio
async def test_non_2xx_status_is_http_error():
    client = create_fetch_client(URL, http_client=_mock_client(lambda r: httpx.Response(502, text="bad gateway")))
    with pytest.raises(TransportError) as exc_info:
        await client.call("user", "getProfile")
    assert exc_info.value.code == "HTTP_ERROR"
    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "HTTP Error: 502"


@pytest.mark.asyncio
async def test_connection_failure_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = create_fetch_client(URL, http_client=_mock_client(handler))
    with pytest.raises(TransportError) as exc_info:
        await client.call("user", "getProfile")
    assert exc_info.value.code == "NETWORK_ERROR"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"data": 1}, {"success": False}, [1]])
async def test_unknown_response_shape_is_protocol_error(payload):
    client = create_fetch_client(URL, http_client=_mock_client(lambda r: httpx.Response(200, json=payload)))
    with pytest.raises(ProtocolError) as exc_info:
        await client.call("user", "getProfile")
    assert exc_info.value.code == "PROTOCOL_ERROR"


@pytest.mark.asyncio
async def test_empty_response_body_is_protocol_error():
    client = create_fetch_client(URL, http_client=_mock_client(lambda r: httpx.Response(200)))
    with pytest.raises(ProtocolError, match="No data received"):
        await client.call("user", "getProfile")


@pytest.mark.asyncio
async def test_request_transport_builds_request_config():
    configs = []

    async def request(config):
        configs.append(config)
        return {"statusCode": 200, "data": {"success": True, "data": "ok"}}

    client = create_request_client(URL, request, headers=lambda: {"Authorization": "Bearer x"})
    assert await client.user.ping() == "ok"
    assert configs == [
        {
            "url": URL,
            "method": "POST",
            "header": {"content-type": "application/json", "Authorization": "Bearer x"},
            "data": {"rpcModule": "user", "rpcAction": "ping", "rpcParams": []},
        }
    ]


@pytest.mark.asyncio
async def test_request_transport_error_status_and_failures():
    client = create_request_client(URL, lambda config: {"statusCode": 500, "data": "oops"})
    with pytest.raises(TransportError) as exc_info:
        await client.call("user", "ping")
    assert exc_info.value.status_code == 500

    def broken(config):
        raise OSError("offline")

    with pytest.raises(TransportError) as exc_info:
        await create_request_client(URL, broken).call("user", "ping")
    assert exc_info.value.code == "NETWORK_ERROR"


@pytest.mark.asyncio
async def test_cloud_transport_reads_result():
    calls = []

    def call_function(options):
        calls.append(options)
        return {"result": {"success": True, "data": [1, 2]}}

    client = create_cloud_client("rpc", call_function)
    assert await client.list.items("a") == [1, 2]
    assert calls == [{"name": "rpc", "data": {"rpcModule": "list", "rpcAction": "items", "rpcParams": ["a"]}}]


@pytest.mark.asyncio
async def test_cloud_transport_missing_result_is_protocol_error():
    client = create_cloud_client("rpc", lambda options: {"errMsg": "ok"})
    with pytest.raises(ProtocolError):
        await client.call("user", "ping")


def test_private_attributes_are_not_proxied():
    client = RpcClient(CloudFunctionTransport("rpc", lambda o: None))
    with pytest.raises(AttributeError):
        client._secret
    with pytest.raises(AttributeError):
        client.user.__wrapped__


def test_factories_validate_required_arguments():
    with pytest.raises(ValueError, match="`url` is required"):
        FetchTransport("")
    with pytest.raises(ValueError, match="`url` is required"):
        RequestTransport("", lambda c: None)
    with pytest.raises(ValueError, match="`function_name` is required"):
        create_cloud_client("", lambda o: None)


@pytest.mark.asyncio
async def test_client_context_manager_closes_owned_http_client():
    async with create_fetch_client(URL) as client:
        transport = client._transport
        await transport._get_http_client()
    assert transport._http_client is None


@pytest.mark.asyncio
async def test_create_client_from_config_uses_function_name_for_cloud_calls():
    calls = []

    def call_function(options):
        calls.append(options["name"])
        return {"result": {"success": True, "data": "pong"}}

    client = create_client(ClientConfig(function_name="rpc-main"), call_function=call_function)
    assert await client.user.ping() == "pong"
    assert calls == ["rpc-main"]


@pytest.mark.asyncio
async def test_create_client_from_config_uses_url_headers_and_http_client():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True, "data": [str(request.url), request.headers["x-app"]]})

    config = ClientConfig(url=URL, headers={"X-App": "demo"})
    client = create_client(config, http_client=_mock_client(handler))
    assert await client.meta.info() == [URL, "demo"]


@pytest.mark.asyncio
async def test_create_client_from_config_with_request_function():
    client = create_client(
        ClientConfig(url=URL),
        request=lambda config: {"statusCode": 200, "data": {"success": True, "data": config["url"]}},
    )
    assert await client.user.ping() == URL


def test_create_client_requires_call_function_for_cloud_config():
    with pytest.raises(ValueError, match="call_function"):
        create_client(ClientConfig(function_name="rpc-main"))
    with pytest.raises(ValueError, match="`url` is required"):
        create_client(ClientConfig())
