"""Request-scoped dispatch: parse, pre-hook, resolve, invoke, post-hook."""

from __future__ import annotations

from typing import Any, Callable

from loguru import logger

from modrpc.core.context import CallContext
from modrpc.core.envelope import parse_request
from modrpc.core.hooks import AfterHook, BeforeHook, call_hook, default_after, default_before, maybe_await
from modrpc.core.registry import ActionRegistry
from modrpc.utils.exceptions import ErrorCategory, classify_exception, sanitize_error_message


class Dispatcher:
    """Runs one RPC call per ``dispatch`` and always returns an envelope.

    Holds no per-request state; the registry's module cache is the only
    thing shared between concurrent dispatches.

    ``fallback_after`` shapes the response when the configured ``after``
    hook itself fails. Adapters that wrap envelopes pass their own default.
    ``encode`` turns the hook output into the transport response (for
    example serialized JSON); it runs inside the same error boundary.
    """

    def __init__(
        self,
        registry: ActionRegistry,
        *,
        before: BeforeHook | None = None,
        after: AfterHook | None = None,
        fallback_after: AfterHook | None = None,
        encode: Callable[[Any], Any] | None = None,
    ):
        self.registry = registry
        self.encode = encode
        self.fallback_after = fallback_after or default_after
        self.before = before or default_before
        self.after = after or self.fallback_after

    async def dispatch(self, ctx: CallContext, body: Any = None) -> Any:
        """Dispatch the RPC request found in ``body`` (defaults to ``ctx.body``)."""
        payload = ctx.body if body is None else body
        result: Any = None
        error: BaseException | None = None
        module = action = None
        try:
            request = parse_request(payload)
            module, action = request.module, request.action
        except Exception as exc:
            error = exc
        else:
            try:
                await call_hook(self.before, ctx)
                handler = self.registry.resolve(request.module, request.action)
                result = await maybe_await(handler(ctx, *request.params))
            except Exception as exc:
                error = exc

        if error is not None:
            log_dispatch_error(module, action, error)
        return await self.finish(ctx, result, error)

    async def fail(self, ctx: CallContext, error: BaseException) -> Any:
        """Produce a response for an error raised before dispatch could start."""
        log_dispatch_error(None, None, error)
        return await self.finish(ctx, None, error)

    async def finish(self, ctx: CallContext, result: Any, error: BaseException | None) -> Any:
        """Run the after hook and encode its output; failures are turned into an error response.

        A result that cannot be shaped or encoded is handed back to the after
        hook as an error. If that fails too, ``fallback_after`` gets the last
        error and whatever it raises propagates.
        """
        try:
            return await self._respond(self.after, ctx, result, error)
        except Exception as exc:
            logger.exception("RPC response could not be produced: {}", sanitize_error_message(str(exc)))
            last_error = exc
        if error is None:
            try:
                return await self._respond(self.after, ctx, None, last_error)
            except Exception as exc:
                logger.exception("RPC after hook failed: {}", sanitize_error_message(str(exc)))
                last_error = exc
        return await self._respond(self.fallback_after, ctx, None, last_error)

    async def _respond(self, hook: AfterHook, ctx: CallContext, result: Any, error: BaseException | None) -> Any:
        response = await call_hook(hook, ctx, result, error)
        return self.encode(response) if self.encode is not None else response


def log_dispatch_error(module: str | None, action: str | None, error: BaseException) -> None:
    target = f"{module}.{action}" if module and action else "<request>"
    code, category = classify_exception(error)
    sanitized = sanitize_error_message(str(error))
    if category is ErrorCategory.FATAL:
        logger.opt(exception=error).error("[RPC Error] {} failed with [{}]: {}", target, code, sanitized)
    else:
        logger.warning("[RPC Error] {} failed with [{}]: {}", target, code, sanitized)
