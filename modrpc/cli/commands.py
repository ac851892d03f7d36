"""CLI commands for modrpc.

``serve`` runs the HTTP adapter; ``call`` is a one-shot client for poking a
running server from the shell.
"""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from modrpc import __logo__, __version__
from modrpc.cli.logging_utils import configure_console_logging, ensure_rotating_log_file
from modrpc.client.proxy import create_fetch_client
from modrpc.config.loader import load_config
from modrpc.config.schema import ClientConfig
from modrpc.utils.exceptions import RpcError

app = typer.Typer(
    name="modrpc",
    help=f"{__logo__} modrpc - module/action RPC server and client",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} modrpc v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """modrpc - module/action RPC server and client."""
    pass


@app.command()
def version():
    """Show the installed modrpc version."""
    console.print(f"{__logo__} modrpc v{__version__}")


@app.command()
def serve(
    config_file: Path = typer.Option(None, "--config", "-c", help="JSON config file (camelCase keys accepted)"),
    host: str = typer.Option(None, "--host", help="Bind host"),
    port: int = typer.Option(None, "--port", "-p", help="Listen port (default 3000)"),
    api_dir: str = typer.Option(None, "--api-dir", help="Handler directory, relative to the working directory"),
    static_dir: str = typer.Option(None, "--static-dir", help="Serve GET requests from this directory"),
    ssl_key: str = typer.Option(None, "--ssl-key", help="TLS private key file"),
    ssl_cert: str = typer.Option(None, "--ssl-cert", help="TLS certificate file"),
    cors: bool = typer.Option(None, "--cors/--no-cors", help="Answer CORS preflight and add CORS headers"),
    production: bool = typer.Option(False, "--production", help="Cache handler modules instead of hot reloading"),
    log_file: Path = typer.Option(None, "--log-file", help="Also write logs to a rotating file"),
):
    """Start the RPC HTTP server."""
    from modrpc.server.http import run_server

    ssl = {k: v for k, v in (("key", ssl_key), ("cert", ssl_cert)) if v}
    try:
        config = load_config(
            config_file,
            host=host,
            port=port,
            api_dir_name=api_dir,
            static_dir=static_dir,
            ssl=ssl or None,
            cors=cors,
            env="production" if production else None,
        )
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    configure_console_logging(config.log_level)
    if log_file:
        ensure_rotating_log_file(log_file, level=config.log_level)
        console.print(f"[dim]Logs: {log_file}[/dim]")

    api_root = Path.cwd() / config.api_dir_name
    if not api_root.is_dir():
        console.print(f"[yellow]Warning: handler directory {api_root} does not exist yet.[/yellow]")

    console.print(f"{__logo__} Starting modrpc server on {config.host}:{config.port}...")
    run_server(config)


def _parse_param(raw: str):
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _parse_headers(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"header must look like NAME=VALUE: {item!r}")
        headers[name.strip()] = value.strip()
    return headers


@app.command()
def call(
    url: str = typer.Argument(..., help="RPC endpoint URL"),
    module: str = typer.Argument(..., help="RPC module name"),
    action: str = typer.Argument(..., help="RPC action name"),
    params: list[str] | None = typer.Argument(None, help="Positional params, parsed as JSON when possible"),
    header: list[str] = typer.Option([], "--header", "-H", help="Extra request header NAME=VALUE (repeatable)"),
    timeout: float = typer.Option(30.0, "--timeout", help="Request timeout in seconds"),
):
    """Call MODULE.ACTION on a running server and print the result."""
    client_config = ClientConfig(url=url, headers=_parse_headers(header), timeout=timeout)
    parsed = [_parse_param(p) for p in (params or [])]

    async def _run():
        async with create_fetch_client(
            client_config.url, headers=client_config.headers, timeout=client_config.timeout
        ) as client:
            return await client.call(module, action, *parsed)

    try:
        result = asyncio.run(_run())
    except RpcError as e:
        console.print(f"[red]Error {escape(f'[{e.code}]')}:[/red] {escape(e.message)}")
        raise typer.Exit(1)
    console.print_json(data=result)


if __name__ == "__main__":
    app()
