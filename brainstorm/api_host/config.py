"""
Configuration for the App Host server.

Provides sensible defaults that can be overridden via environment variables
or by passing a custom AppConfig to create_app().
"""

import os
from dataclasses import dataclass, field
from typing import Optional
from pathlib import Path


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class AppConfig:
    """Configuration for the app host server."""

    # Node storage configuration
    storage_file: str = field(default_factory=lambda: os.getenv("BRAINSTORM_STORAGE_FILE", "brainstorm.json"))

    # Server configuration
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))

    # API configuration
    api_prefix: str = field(default_factory=lambda: os.getenv("API_PREFIX", "/api"))

    # Expansion configuration
    # None means this server's own suggestion endpoint on the configured port
    expansion_url: Optional[str] = field(default_factory=lambda: os.getenv("EXPANSION_URL") or None)
    expansion_path: str = field(default_factory=lambda: os.getenv("EXPANSION_PATH", "/api/ai/expand"))
    expansion_timeout: float = field(default_factory=lambda: float(os.getenv("EXPANSION_TIMEOUT", "10")))
    local_fallback: bool = field(default_factory=lambda: _env_flag("LOCAL_FALLBACK", "false"))
    serve_ai_endpoint: bool = field(default_factory=lambda: _env_flag("SERVE_AI_ENDPOINT", "true"))

    # Static files configuration
    web_static_path: Optional[str] = field(default_factory=lambda: os.getenv("WEB_STATIC_PATH"))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()

    def get_expansion_url(self) -> str:
        """Get the base URL expansion requests are sent to."""
        if self.expansion_url:
            return self.expansion_url
        return f"http://127.0.0.1:{self.port}"

    def get_storage_path(self) -> Path:
        """Get resolved path to the storage file."""
        storage_path = Path(self.storage_file)
        if not storage_path.is_absolute():
            storage_path = Path.cwd() / storage_path
        return storage_path
