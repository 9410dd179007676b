"""
Configuration settings with environment variable loading.

All secrets MUST be provided via environment variables.
Never log or expose tokens in any output.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


@dataclass(frozen=True)
class BackendConfig:
    """Workflow-automation backend (webhook) configuration."""
    webhook_url: str
    timeout: float = 30.0
    max_retries: int = 0
    sync_settle_delay: float = 1.0

    def __post_init__(self):
        if not self.webhook_url:
            raise ConfigurationError("DASHBOARD_WEBHOOK_URL is required")
        if not self.webhook_url.startswith("https://"):
            raise ConfigurationError("DASHBOARD_WEBHOOK_URL must use HTTPS")
        if self.timeout <= 0:
            raise ConfigurationError("DASHBOARD_TIMEOUT must be positive")
        if self.max_retries < 0:
            raise ConfigurationError("DASHBOARD_MAX_RETRIES cannot be negative")
        if self.sync_settle_delay < 0:
            raise ConfigurationError("DASHBOARD_SYNC_SETTLE_DELAY cannot be negative")


@dataclass(frozen=True)
class SupabaseConfig:
    """Session provider (Supabase Auth) configuration."""
    url: str
    anon_key: str
    session_path: Path = field(default_factory=lambda: Path("data/session.json"))

    def __post_init__(self):
        if not self.url:
            raise ConfigurationError("SUPABASE_URL is required")
        if not self.anon_key:
            raise ConfigurationError("SUPABASE_ANON_KEY is required")
        if not self.url.startswith("https://"):
            raise ConfigurationError("SUPABASE_URL must use HTTPS")
        object.__setattr__(self, 'session_path', Path(self.session_path))

    def __repr__(self) -> str:
        """Never expose the API key in repr."""
        return (
            f"SupabaseConfig(url='{self.url}', anon_key='***REDACTED***', "
            f"session_path='{self.session_path}')"
        )


@dataclass(frozen=True)
class Settings:
    """
    Application settings container.

    All configuration is loaded from environment variables.
    Secrets are never logged or exposed.
    """
    backend: BackendConfig
    supabase: SupabaseConfig
    log_level: str = "INFO"

    def __repr__(self) -> str:
        return (
            f"Settings(\n"
            f"  backend={self.backend},\n"
            f"  supabase={self.supabase},\n"
            f"  log_level={self.log_level}\n"
            f")"
        )


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Load settings from environment variables.

    Optionally loads from a .env file first.

    Args:
        env_file: Optional path to .env file

    Returns:
        Configured Settings instance

    Raises:
        ConfigurationError: If required configuration is missing
    """
    if env_file and env_file.exists():
        _load_env_file(env_file)
    elif Path(".env").exists():
        _load_env_file(Path(".env"))

    try:
        backend = BackendConfig(
            webhook_url=os.getenv("DASHBOARD_WEBHOOK_URL", "").rstrip("/"),
            timeout=float(os.getenv("DASHBOARD_TIMEOUT", "30")),
            max_retries=int(os.getenv("DASHBOARD_MAX_RETRIES", "0")),
            sync_settle_delay=float(os.getenv("DASHBOARD_SYNC_SETTLE_DELAY", "1.0")),
        )

        supabase = SupabaseConfig(
            url=os.getenv("SUPABASE_URL", "").rstrip("/"),
            anon_key=os.getenv("SUPABASE_ANON_KEY", ""),
            session_path=Path(os.getenv("SUPABASE_SESSION_PATH", "data/session.json")),
        )

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        if log_level not in LOG_LEVELS:
            raise ConfigurationError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level}")

        settings = Settings(
            backend=backend,
            supabase=supabase,
            log_level=log_level,
        )

        logger.info("Configuration loaded successfully")
        logger.debug(f"Settings: {settings}")

        return settings

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to load configuration: {e}") from e


def _read_env_file(path: Path) -> dict[str, str]:
    """
    Parse a dotenv file into a dict.

    Accepts ``KEY=value`` and ``export KEY=value``. Quoted values are taken
    literally; unquoted values end at a `` #`` comment.
    """
    values = {}
    for line_num, raw in enumerate(path.read_text().splitlines(), 1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()

        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            logger.warning(f"Ignoring line {line_num} in {path}: expected KEY=value")
            continue

        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        else:
            value = value.split(" #", 1)[0].rstrip()
        values[key] = value
    return values


def _load_env_file(path: Path) -> None:
    """Apply a dotenv file without overriding variables already set."""
    logger.debug(f"Loading environment from {path}")
    for key, value in _read_env_file(path).items():
        os.environ.setdefault(key, value)
