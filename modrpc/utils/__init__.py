"""Utility modules for modrpc."""

from modrpc.utils.exceptions import (
    ActionNotFoundError,
    ErrorCategory,
    InvalidRequestError,
    ModuleNotFoundError,
    ProtocolError,
    RpcError,
    TransportError,
    classify_exception,
    sanitize_error_message,
)

__all__ = [
    "ActionNotFoundError",
    "ErrorCategory",
    "InvalidRequestError",
    "ModuleNotFoundError",
    "ProtocolError",
    "RpcError",
    "TransportError",
    "classify_exception",
    "sanitize_error_message",
]
