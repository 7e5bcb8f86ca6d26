"""
Configuration management for the bridge.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Settings(BaseSettings):
    """Bridge settings, read from the environment and an optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Remote peer
    endpoint: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("mcp_endpoint", "endpoint"),
        description="WebSocket URL of the remote MCP peer",
    )
    open_timeout_s: float = Field(default=10.0, gt=0, description="Connection open timeout")
    ping_interval_s: Optional[float] = Field(default=20.0, description="Transport keepalive interval")
    ping_timeout_s: Optional[float] = Field(default=20.0, description="Transport keepalive timeout")
    max_message_bytes: int = Field(default=1 << 20, gt=0, description="Largest inbound frame accepted")

    # Server identity advertised on initialize
    server_name: str = Field(default="mcp-bridge")
    server_version: str = Field(default="1.0.0")
    protocol_version: str = Field(default="2024-11-05")
    instructions: Optional[str] = Field(
        default="MCP bridge exposing the tools registered in this process.",
    )

    # Tools
    tool_modules: List[str] = Field(
        default_factory=lambda: ["mcp_bridge.tools.courses"],
        description="Modules exposing register_tools(registry)",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)

    @field_validator("endpoint")
    @classmethod
    def _blank_endpoint_is_unset(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def require_endpoint(self) -> str:
        """Return the peer endpoint or fail startup."""
        if not self.endpoint:
            raise ConfigurationError("MCP client endpoint is required (set MCP_ENDPOINT)")
        if not self.endpoint.startswith(("ws://", "wss://")):
            raise ConfigurationError(f"MCP client endpoint must be a ws:// or wss:// URL: {self.endpoint}")
        return self.endpoint


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
