"""Pre/post-dispatch hook types and defaults."""

from __future__ import annotations

import inspect
from typing import Any, Awaitable, Callable

from modrpc.core.context import CallContext
from modrpc.core.envelope import error_to_envelope, success_envelope


BeforeHook = Callable[[CallContext], Awaitable[None] | None]
AfterHook = Callable[[CallContext, Any, BaseException | None], Awaitable[Any] | Any]


async def maybe_await(value: Any) -> Any:
    return await value if inspect.isawaitable(value) else value


async def call_hook(hook: Callable[..., Any], *args: Any) -> Any:
    """Invoke a sync or async hook and return its (awaited) result."""
    return await maybe_await(hook(*args))


def default_before(ctx: CallContext) -> None:
    """No-op pre-dispatch hook."""
    return None


def default_after(ctx: CallContext, result: Any, error: BaseException | None) -> dict[str, Any]:
    """Build the plain ``{success, data}`` / ``{success, error}`` envelope."""
    if error is not None:
        return error_to_envelope(error)
    return success_envelope(result)
