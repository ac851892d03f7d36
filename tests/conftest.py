"""Pytest hooks and fixtures."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from modrpc.core.registry import ActionRegistry

USER_MODULE = '''
from modrpc import RpcError

VERSION = "1"


def getProfile(ctx, user_id):
    if user_id == 404:
        raise RpcError("NOT_FOUND", "no such user")
    return {"name": "Ann", "id": user_id}


async def whoami(ctx):
    return ctx.state.get("user")


def echo(ctx, *args):
    return list(args)


def boom(ctx):
    raise RuntimeError("kaboom")


def _private(ctx):
    return "hidden"


class Helper:
    pass
'''


def write_module(root: Path, name: str, source: str) -> Path:
    path = root.joinpath(*name.split("/")[:-1], f"{name.split('/')[-1]}.py")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(source).lstrip(), encoding="utf-8")
    return path


@pytest.fixture
def api_dir(tmp_path: Path) -> Path:
    """An ``api`` handler directory under tmp_path holding a ``user`` module."""
    root = tmp_path / "api"
    root.mkdir()
    write_module(root, "user", USER_MODULE)
    return root


@pytest.fixture
def registry(api_dir: Path) -> ActionRegistry:
    return ActionRegistry("api", base_dir=api_dir.parent, hot_reload=True)


@pytest.fixture
def write_handler(api_dir: Path):
    """Write ``source`` as handler module ``name`` under the api directory."""

    def _write(name: str, source: str) -> Path:
        return write_module(api_dir, name, source)

    return _write
