"""Server-side transport adapters."""

from modrpc.server.cloud import CloudRpcHandler, create_cloud_handler
from modrpc.server.http import create_rpc_app, run_server
from modrpc.server.scf import ScfRpcHandler, create_scf_handler
from modrpc.server.timer import TimerHandler, create_timer_handler

__all__ = [
    "CloudRpcHandler",
    "ScfRpcHandler",
    "TimerHandler",
    "create_cloud_handler",
    "create_rpc_app",
    "create_scf_handler",
    "create_timer_handler",
    "run_server",
]
