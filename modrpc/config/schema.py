"""Configuration schema using Pydantic.

Server options mirror the recognised option surface
(port, apiDirName, staticDir, ssl, cors); hooks are passed in code, not config.
"""

from typing import Any

from pydantic import BaseModel, Field, ConfigDict
from pydantic_settings import BaseSettings


class SslConfig(BaseModel):
    """TLS key/cert file paths. Both must be set to serve HTTPS."""
    key: str | None = None
    cert: str | None = None

    @property
    def enabled(self) -> bool:
        return bool(self.key and self.cert)


class ServerConfig(BaseSettings):
    """Root configuration for the RPC server adapters."""
    host: str = "0.0.0.0"
    port: int = 3000
    api_dir_name: str = "api"  # Handler namespace, relative to the working directory
    static_dir: str | None = None  # GET requests are served from here when set
    ssl: SslConfig = Field(default_factory=SslConfig)
    cors: bool = True
    env: str = "development"  # "production" caches handler modules for the process lifetime
    log_level: str = "INFO"

    model_config = ConfigDict(
        env_prefix="MODRPC_",
        env_nested_delimiter="__",
    )

    @property
    def production(self) -> bool:
        return self.env.strip().lower() == "production"


class ClientConfig(BaseModel):
    """Client options: url for HTTP transports, function_name for cloud calls."""
    url: str = ""
    headers: dict[str, Any] = Field(default_factory=dict)
    timeout: float = 30.0
    function_name: str = ""
