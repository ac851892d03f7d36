"""
Exception hierarchy and error handling utilities for modrpc.

Provides:
- RpcError and the dispatch/client error taxonomy, each with a wire code
- Error categorization used when logging failures
- Safe error message formatting (no sensitive data leak)
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


INTERNAL_ERROR = "INTERNAL_ERROR"
INVALID_REQUEST = "INVALID_REQUEST"
INVALID_JSON = "INVALID_JSON"
MODULE_NOT_FOUND = "MODULE_NOT_FOUND"
FUNCTION_NOT_FOUND = "FUNCTION_NOT_FOUND"
HTTP_ERROR = "HTTP_ERROR"
NETWORK_ERROR = "NETWORK_ERROR"
PROTOCOL_ERROR = "PROTOCOL_ERROR"


class ErrorCategory(Enum):
    """Error categories for classification."""
    CLIENT = "client"
    NOT_FOUND = "not_found"
    HANDLER = "handler"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    FATAL = "fatal"


class RpcError(Exception):
    """Base exception carrying a wire-level error code.

    Business handlers raise this (or any exception with ``code``/``message``
    attributes) to send a specific code back to the caller.
    """

    def __init__(
        self,
        code: str = INTERNAL_ERROR,
        message: str = "",
        category: ErrorCategory = ErrorCategory.HANDLER,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InvalidRequestError(RpcError):
    """Request is missing rpcModule/rpcAction or its body cannot be parsed."""

    def __init__(self, message: str, code: str = INVALID_REQUEST):
        super().__init__(code, message, category=ErrorCategory.CLIENT)


class ModuleNotFoundError(RpcError):
    """No handler file matches the requested module name."""

    def __init__(self, module_name: str, message: str | None = None):
        super().__init__(
            MODULE_NOT_FOUND,
            message or f"Module '{module_name}' not found",
            category=ErrorCategory.NOT_FOUND,
            details={"module": module_name},
        )


class ActionNotFoundError(RpcError):
    """Loaded module has no public callable under the requested action name."""

    def __init__(self, module_name: str, action_name: str):
        super().__init__(
            FUNCTION_NOT_FOUND,
            f"Action '{action_name}' not found",
            category=ErrorCategory.NOT_FOUND,
            details={"module": module_name, "action": action_name},
        )


class TransportError(RpcError):
    """Non-2xx status or failed request on the client side."""

    def __init__(self, message: str, code: str = HTTP_ERROR, status_code: int | None = None):
        super().__init__(
            code,
            message,
            category=ErrorCategory.TRANSPORT,
            details={"status_code": status_code} if status_code is not None else None,
        )
        self.status_code = status_code


class ProtocolError(RpcError):
    """Response body is not a recognised envelope."""

    def __init__(self, message: str = "Unknown server response format."):
        super().__init__(PROTOCOL_ERROR, message, category=ErrorCategory.PROTOCOL)


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"bearer\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"[a-zA-Z0-9]{32,}"),
    re.compile(r"sk-[a-zA-Z0-9]{20,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def error_code_of(exc: BaseException) -> str | None:
    """Return the wire code an exception carries, if any."""
    code = getattr(exc, "code", None)
    if isinstance(code, str) and code:
        return code
    return None


def error_message_of(exc: BaseException) -> str:
    """Return the human message of an exception, preferring a ``message`` attribute."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc)


def classify_exception(exc: BaseException) -> tuple[str, ErrorCategory]:
    """
    Classify an exception and return (error_code, category).

    Coded exceptions keep their own code; everything else maps to
    INTERNAL_ERROR with a category derived from the exception type.
    """
    if isinstance(exc, RpcError):
        return exc.code, exc.category

    code = error_code_of(exc)
    if code:
        return code, ErrorCategory.HANDLER

    if isinstance(exc, json.JSONDecodeError):
        return INVALID_JSON, ErrorCategory.CLIENT

    if isinstance(exc, (asyncio.TimeoutError, ConnectionError)):
        return INTERNAL_ERROR, ErrorCategory.TRANSPORT

    return INTERNAL_ERROR, ErrorCategory.FATAL
