"""Timer-trigger adapter.

Routes a scheduled invocation to ``<api_dir>/<TriggerName>.py`` and runs its
``main`` function. Failures are re-raised so the platform marks the run failed.
"""

from __future__ import annotations

import inspect
from types import ModuleType
from typing import Any, Callable

from loguru import logger

from modrpc.core.envelope import success_envelope
from modrpc.core.hooks import maybe_await
from modrpc.server.base import Entrypoint
from modrpc.utils.exceptions import ModuleNotFoundError, RpcError

TASK_ENTRY_NAMES = ("main", "main_handler")


def find_task_function(module: ModuleType, trigger_name: str) -> Callable[..., Any]:
    for name in TASK_ENTRY_NAMES:
        candidate = getattr(module, name, None)
        if callable(candidate) and not inspect.isclass(candidate):
            return candidate
    raise RpcError(
        "TASK_NOT_CALLABLE",
        f"File {trigger_name}.py must define a 'main' function.",
    )


def call_with_supported_args(fn: Callable[..., Any], *args: Any) -> Any:
    """Call ``fn`` with as many leading ``args`` as its signature accepts."""
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return fn(*args)
    params = list(sig.parameters.values())
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
        return fn(*args)
    positional = [
        p for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    return fn(*args[: len(positional)])


class TimerHandler(Entrypoint):
    """Entry for timer-triggered cloud functions."""

    async def handle(self, event: Any, context: Any = None) -> Any:
        event = event if isinstance(event, dict) else {}
        trigger_name = event.get("TriggerName")
        if not trigger_name:
            logger.warning('[Timer] No "TriggerName" found in event. Skipped.')
            return {"success": False, "message": "Not a timer event"}

        logger.info("[Timer] Triggered: {}", trigger_name)
        try:
            try:
                module = self.registry.load_module(str(trigger_name))
            except ModuleNotFoundError as exc:
                raise ModuleNotFoundError(
                    str(trigger_name),
                    f"Timer task file not found: {self.registry.root.name}/{trigger_name}.py",
                ) from exc
            task = find_task_function(module, str(trigger_name))
            result = await maybe_await(call_with_supported_args(task, event, context))
        except Exception:
            logger.exception("[Timer] Task {} failed", trigger_name)
            raise

        logger.info("[Timer] Task {} completed.", trigger_name)
        return success_envelope(result)


def create_timer_handler(config=None, *, registry=None) -> TimerHandler:
    return TimerHandler(config, registry=registry)
