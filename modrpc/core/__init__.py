"""Dispatch core shared by every server adapter."""

from modrpc.core.context import CallContext
from modrpc.core.dispatcher import Dispatcher
from modrpc.core.envelope import RpcRequest, decode_envelope, failure_envelope, parse_request, success_envelope
from modrpc.core.hooks import default_after, default_before
from modrpc.core.registry import ActionRegistry

__all__ = [
    "ActionRegistry",
    "CallContext",
    "Dispatcher",
    "RpcRequest",
    "decode_envelope",
    "default_after",
    "default_before",
    "failure_envelope",
    "parse_request",
    "success_envelope",
]
