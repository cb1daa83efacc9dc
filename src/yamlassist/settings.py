"""Shared settings loaded from environment / .env file."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration for the yamlassist engine and REST API server.

    Values are read from environment variables and from a ``.env`` file
    in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Shared
    log_level: str = "INFO"

    # REST API
    api_server_host: str = "localhost"
    api_server_port: int = 8000
    port: int | None = None  # Cloud Run injects PORT; takes precedence over api_server_port

    @property
    def effective_port(self) -> int:
        """Return the port to listen on (PORT takes precedence)."""
        return self.port if self.port is not None else self.api_server_port

    # Engine
    max_recovery_deletions: int = 256  # truncation attempts per request
    max_document_size: int = 5_000_000  # characters
    schema_dir: Path | None = None  # extra YAML schemas registered at startup
