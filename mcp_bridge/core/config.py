"""
Configuration Settings.

This module defines the bridge configuration using Pydantic's BaseSettings.
Values are read from environment variables prefixed with ``MCP_BRIDGE_`` and
from an optional ``.env`` file. Nested values use ``__`` as delimiter, and the
list of remote servers may be given as JSON, for example::

    MCP_BRIDGE_SERVERS='[{"name": "clickup", "endpoint_url": "http://clickup-mcp:8000/mcp/"}]'
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mcp_bridge.schemas.config import RemoteServerConfig


class BridgeSettings(BaseSettings):
    """Runtime settings for the schema/type bridge and tool proxies."""

    log_level: str = Field(default="INFO", description="Console log level (DEBUG, INFO, WARNING, ERROR)")
    log_format: Literal["simple", "detailed", "json"] = Field(
        default="detailed", description="Log record format used by setup_logging()"
    )
    default_timeout_seconds: float = Field(
        default=900.0,
        gt=0,
        description="Timeout applied to tool invocations when the caller does not supply one",
    )
    deduplicate_types: bool = Field(
        default=False,
        description="Reuse registered types whose structure matches instead of registering a new one per compile",
    )
    complex_groups: List[str] = Field(
        default_factory=lambda: ["mcpClient"],
        description="Operation groups whose types are recursive; only an input schema is advertised for them",
    )
    fail_on_remote_error: bool = Field(
        default=True,
        description="Abort connect_servers() on the first remote discovery failure instead of skipping the server",
    )
    servers: List[RemoteServerConfig] = Field(
        default_factory=list,
        description="Remote MCP servers whose tools are proxied and registered at start-up",
    )

    model_config = SettingsConfigDict(
        env_prefix="MCP_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> BridgeSettings:
    """Return the process-wide settings instance, loaded once."""
    return BridgeSettings()
