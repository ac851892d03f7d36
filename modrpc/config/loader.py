"""Configuration loading utilities."""

import json
from pathlib import Path
from typing import Any

from modrpc.config.schema import ServerConfig


def load_config(config_path: Path | None = None, **overrides: Any) -> ServerConfig:
    """
    Load server configuration from a JSON file, environment and overrides.

    Args:
        config_path: Optional JSON file. Keys may be camelCase (``apiDirName``).
        overrides: Explicit values that win over the file (``None`` values are ignored).

    Returns:
        Validated configuration object.
    """
    data: dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        try:
            with open(path, encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Failed to load config from {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ValueError(f"Config file must be a JSON object: {path}")
        data = convert_keys(raw)

    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(data.get(key), dict):
            data[key] = {**data[key], **value}
        else:
            data[key] = value

    try:
        return ServerConfig(**data)
    except ValueError as e:
        raise ValueError(f"Invalid configuration: {e}") from e


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)
