"""Resolve (module, action) pairs to handler callables loaded from disk."""

from __future__ import annotations

import hashlib
import importlib.machinery
import importlib.util
import inspect
import re
import sys
import threading
from pathlib import Path
from types import ModuleType
from typing import Any, Callable

from loguru import logger

from modrpc.utils.exceptions import ActionNotFoundError, ModuleNotFoundError

_SEGMENT_RE = re.compile(r"[A-Za-z0-9_\-]+")
_MODULE_PREFIX = "modrpc_api"


class _SourceLoader(importlib.machinery.SourceFileLoader):
    """Compiles straight from source; cached bytecode can lag edits made within the same second."""

    def get_code(self, fullname):
        return self.source_to_code(self.get_data(self.path), self.path)


class ActionRegistry:
    """Loads handler modules from ``<base_dir>/<api_dir_name>/<module>.py``.

    With ``hot_reload`` on, each resolution drops the cached module and reads
    the file again so edits are picked up without a restart. With it off the
    first load of each module is kept for the process lifetime.
    """

    def __init__(
        self,
        api_dir_name: str = "api",
        *,
        base_dir: Path | str | None = None,
        hot_reload: bool = True,
    ):
        root = Path(base_dir) if base_dir is not None else Path.cwd()
        self.root = (root / api_dir_name).resolve()
        self.hot_reload = hot_reload
        self._lock = threading.RLock()
        self._modules: dict[str, ModuleType] = {}

    def get(self, key: str) -> ModuleType | None:
        with self._lock:
            return self._modules.get(key)

    def put(self, key: str, module: ModuleType) -> None:
        with self._lock:
            self._modules[key] = module

    def invalidate(self, key: str | None = None) -> None:
        """Drop one cached module (or all of them)."""
        with self._lock:
            if key is None:
                for name in list(self._modules):
                    sys.modules.pop(_import_name(name), None)
                self._modules.clear()
                return
            self._modules.pop(key, None)
            sys.modules.pop(_import_name(key), None)

    def module_path(self, module_name: str) -> Path:
        """Map a module name onto its file under the namespace root."""
        segments = module_name.split("/")
        if not all(_SEGMENT_RE.fullmatch(seg) for seg in segments):
            raise ModuleNotFoundError(module_name)
        path = self.root.joinpath(*segments[:-1], f"{segments[-1]}.py")
        if not path.is_file():
            raise ModuleNotFoundError(module_name)
        return path

    def load_module(self, module_name: str) -> ModuleType:
        """Return the loaded module for ``module_name``, honouring the reload policy."""
        with self._lock:
            if self.hot_reload:
                self.invalidate(module_name)
            else:
                cached = self._modules.get(module_name)
                if cached is not None:
                    return cached
            path = self.module_path(module_name)
            module = self._exec_module(module_name, path)
            self.put(module_name, module)
            return module

    def resolve(self, module_name: str, action_name: str) -> Callable[..., Any]:
        """Return the callable behind ``module_name.action_name``."""
        module = self.load_module(module_name)
        if action_name.startswith("_"):
            raise ActionNotFoundError(module_name, action_name)
        target = getattr(module, action_name, None)
        if target is None or inspect.isclass(target) or not callable(target):
            raise ActionNotFoundError(module_name, action_name)
        return target

    def _exec_module(self, module_name: str, path: Path) -> ModuleType:
        import_name = _import_name(module_name)
        loader = _SourceLoader(import_name, str(path))
        spec = importlib.util.spec_from_file_location(import_name, path, loader=loader)
        if spec is None or spec.loader is None:
            raise ModuleNotFoundError(module_name, f"Module '{module_name}' could not be loaded")
        module = importlib.util.module_from_spec(spec)
        sys.modules[import_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(import_name, None)
            raise
        logger.debug("Loaded RPC module {} from {}", module_name, path)
        return module


def _import_name(module_name: str) -> str:
    digest = hashlib.sha1(module_name.encode("utf-8")).hexdigest()[:12]
    safe = re.sub(r"[^A-Za-z0-9_]", "_", module_name)
    return f"{_MODULE_PREFIX}_{safe}_{digest}"
