"""modrpc - module/action RPC over HTTP, serverless gateways and cloud functions."""

__version__ = "0.1.0"
__logo__ = "⚡"

from modrpc.client import RpcClient, create_client, create_cloud_client, create_fetch_client, create_request_client
from modrpc.config import ClientConfig, ServerConfig, SslConfig, load_config
from modrpc.core import ActionRegistry, CallContext, Dispatcher
from modrpc.server import (
    create_cloud_handler,
    create_rpc_app,
    create_scf_handler,
    create_timer_handler,
    run_server,
)
from modrpc.utils.exceptions import (
    ActionNotFoundError,
    InvalidRequestError,
    ModuleNotFoundError as RpcModuleNotFoundError,
    ProtocolError,
    RpcError,
    TransportError,
)

__all__ = [
    "ActionNotFoundError",
    "ActionRegistry",
    "CallContext",
    "ClientConfig",
    "Dispatcher",
    "InvalidRequestError",
    "ProtocolError",
    "RpcClient",
    "RpcError",
    "RpcModuleNotFoundError",
    "ServerConfig",
    "SslConfig",
    "TransportError",
    "__version__",
    "create_client",
    "create_cloud_client",
    "create_cloud_handler",
    "create_fetch_client",
    "create_request_client",
    "create_rpc_app",
    "create_scf_handler",
    "create_timer_handler",
    "load_config",
    "run_server",
]
