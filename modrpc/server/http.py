"""Long-running HTTP server adapter (FastAPI + uvicorn).

POST on any path is an RPC call; OPTIONS answers the CORS preflight; GET serves
files from ``static_dir`` when configured. Everything else is a 404.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, PlainTextResponse, Response
from loguru import logger

from modrpc.config.schema import ServerConfig
from modrpc.core.context import CallContext
from modrpc.core.dispatcher import Dispatcher
from modrpc.core.envelope import dumps
from modrpc.core.hooks import AfterHook, BeforeHook
from modrpc.core.registry import ActionRegistry
from modrpc.server.base import build_registry
from modrpc.utils.exceptions import INVALID_JSON, InvalidRequestError

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "*",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Max-Age": "3600",
}

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def resolve_static_file(root: Path, relative: str) -> Path | None:
    """Map a request path onto a file under ``root``; directories fall back to index.html."""
    candidate = (root / relative.lstrip("/")).resolve()
    if candidate != root and root not in candidate.parents:
        return None
    if candidate.is_dir():
        candidate = candidate / "index.html"
    return candidate if candidate.is_file() else None


def envelope_response(envelope: Any) -> Response:
    """Business failures travel in the payload; HTTP status stays 200."""
    if isinstance(envelope, Response):
        return envelope
    return Response(content=dumps(envelope), media_type="application/json", status_code=200)


async def handle_rpc_request(request: Request, dispatcher: Dispatcher) -> Response:
    headers = dict(request.headers)
    raw = await request.body()
    if not raw:
        body: Any = {}
    else:
        try:
            body = json.loads(raw)
        except ValueError:
            ctx = CallContext(source=request, headers=headers, body={})
            error = InvalidRequestError("Request body is not valid JSON", code=INVALID_JSON)
            return await dispatcher.fail(ctx, error)
    ctx = CallContext(source=request, headers=headers, body=body)
    return await dispatcher.dispatch(ctx)


def create_rpc_app(
    config: ServerConfig | None = None,
    *,
    before: BeforeHook | None = None,
    after: AfterHook | None = None,
    registry: ActionRegistry | None = None,
) -> FastAPI:
    """Create the FastAPI application serving RPC (and optionally static files)."""
    config = config or ServerConfig()
    dispatcher = Dispatcher(
        registry or build_registry(config),
        before=before,
        after=after,
        encode=envelope_response,
    )
    static_root = Path(config.static_dir).resolve() if config.static_dir else None

    app = FastAPI(title="modrpc", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.config = config
    app.state.dispatcher = dispatcher

    if config.cors:
        @app.middleware("http")
        async def add_cors_headers(request: Request, call_next):
            response = await call_next(request)
            response.headers.update(CORS_HEADERS)
            return response

    @app.api_route("/{path:path}", methods=_ALL_METHODS, include_in_schema=False)
    async def entry(request: Request, path: str):
        method = request.method
        if method == "OPTIONS" and config.cors:
            return Response(status_code=204)
        if method == "GET" and static_root is not None:
            file_path = resolve_static_file(static_root, path)
            if file_path is not None:
                return FileResponse(file_path)
        if method == "POST":
            return await handle_rpc_request(request, dispatcher)
        return PlainTextResponse(f"Cannot {method} {request.url.path}", status_code=404)

    return app


def run_server(
    config: ServerConfig | None = None,
    *,
    before: BeforeHook | None = None,
    after: AfterHook | None = None,
) -> None:
    """Run the RPC server until interrupted (HTTPS when ssl key and cert are set)."""
    config = config or ServerConfig()
    app = create_rpc_app(config, before=before, after=after)
    protocol = "https" if config.ssl.enabled else "http"
    logger.info("RPC Server running at {}://localhost:{}", protocol, config.port)
    if config.static_dir:
        logger.info("Serving static files from: {}", config.static_dir)
    if not config.production:
        logger.info("Hot reload enabled for {}", app.state.dispatcher.registry.root)
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        ssl_keyfile=config.ssl.key if config.ssl.enabled else None,
        ssl_certfile=config.ssl.cert if config.ssl.enabled else None,
        timeout_keep_alive=30,
        log_level=config.log_level.lower(),
    )
