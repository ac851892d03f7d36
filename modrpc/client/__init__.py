"""Client call proxy and transports."""

from modrpc.client.proxy import (
    ModuleProxy,
    RpcClient,
    create_client,
    create_cloud_client,
    create_fetch_client,
    create_request_client,
    unwrap_response,
)
from modrpc.client.transports import (
    CloudFunctionTransport,
    FetchTransport,
    RequestTransport,
    RpcTransport,
    TransportResponse,
)

__all__ = [
    "CloudFunctionTransport",
    "FetchTransport",
    "ModuleProxy",
    "RequestTransport",
    "RpcClient",
    "RpcTransport",
    "TransportResponse",
    "create_client",
    "create_cloud_client",
    "create_fetch_client",
    "create_request_client",
    "unwrap_response",
]
