"""Configuration module for page-search.

Loads configuration from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path


def _positive_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        value = int(raw)
        if value < 1:
            raise ValueError(f"Must be >= 1, got {value}")
    except ValueError as e:
        raise ValueError(f"Invalid {name} value '{raw}': {e}") from e
    return value


@dataclass
class Config:
    """Application configuration."""

    search_db: Path
    search_port: int
    rebuild_concurrency: int
    stream_batch_size: int
    rebuild_shadow: bool

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        default_db = str(Path.home() / ".page-search" / "search.db")
        search_db = Path(os.getenv("SEARCH_DB", default_db)).expanduser()

        port_str = os.getenv("SEARCH_PORT", "8080")
        try:
            search_port = int(port_str)
            if not 1 <= search_port <= 65535:
                raise ValueError(f"Port must be between 1 and 65535, got {search_port}")
        except ValueError as e:
            raise ValueError(f"Invalid SEARCH_PORT value '{port_str}': {e}") from e

        rebuild_concurrency = _positive_int("SEARCH_REBUILD_CONCURRENCY", "1")
        stream_batch_size = _positive_int("SEARCH_STREAM_BATCH_SIZE", "100")

        # Shadow rebuilds are opt-in
        rebuild_shadow = os.getenv("SEARCH_REBUILD_SHADOW", "").lower() in ("1", "true", "yes")

        return cls(
            search_db=search_db,
            search_port=search_port,
            rebuild_concurrency=rebuild_concurrency,
            stream_batch_size=stream_batch_size,
            rebuild_shadow=rebuild_shadow,
        )


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
