"""Shared plumbing for function-style server adapters."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any

from modrpc.config.schema import ServerConfig
from modrpc.core.dispatcher import Dispatcher
from modrpc.core.hooks import AfterHook, BeforeHook, default_after
from modrpc.core.registry import ActionRegistry


def build_registry(config: ServerConfig) -> ActionRegistry:
    """Registry rooted at ``<cwd>/<api_dir_name>``; production disables hot reload."""
    return ActionRegistry(config.api_dir_name, hot_reload=not config.production)


class Entrypoint(ABC):
    """An ``(event, context)`` function entry with async and sync call styles."""

    def __init__(self, config: ServerConfig | None = None, *, registry: ActionRegistry | None = None):
        self.config = config or ServerConfig()
        self.registry = registry or build_registry(self.config)

    @abstractmethod
    async def handle(self, event: Any, context: Any = None) -> Any:
        """Process one platform invocation."""

    def __call__(self, event: Any, context: Any = None) -> Any:
        """Synchronous entry for runtimes that invoke a plain function."""
        return asyncio.run(self.handle(event, context))


class RpcAdapter(Entrypoint):
    """Entrypoint that runs RPC requests through a Dispatcher."""

    @staticmethod
    def default_after(ctx: Any, result: Any, error: BaseException | None) -> Any:
        return default_after(ctx, result, error)

    def __init__(
        self,
        config: ServerConfig | None = None,
        *,
        before: BeforeHook | None = None,
        after: AfterHook | None = None,
        registry: ActionRegistry | None = None,
    ):
        super().__init__(config, registry=registry)
        self.dispatcher = Dispatcher(
            self.registry,
            before=before,
            after=after,
            fallback_after=self.default_after,
        )
