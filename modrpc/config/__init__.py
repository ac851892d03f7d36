"""Configuration module for modrpc."""

from modrpc.config.loader import load_config
from modrpc.config.schema import ClientConfig, ServerConfig, SslConfig

__all__ = ["ClientConfig", "ServerConfig", "SslConfig", "load_config"]
