"""
Service configuration.

Settings come from the process environment. A ``.env`` file in the working
directory is loaded first when present, without overriding variables that are
already set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from ragnok.errors import ConfigurationError

DEFAULT_FRONTEND_URL = "http://localhost:5501"
DEFAULT_PORT = 3001
DEFAULT_RATE_LIMIT = "100 per 15 minutes"
DEFAULT_VERIFIER_TIMEOUT = 10.0

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _parse_bool(name: str, value: str) -> bool:
    v = value.strip().lower()
    if v in _TRUTHY:
        return True
    if v in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _parse_number(name: str, value: str, kind):
    try:
        parsed = kind(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a {kind.__name__}, got {value!r}") from None
    if parsed <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value!r}")
    return parsed


@dataclass(frozen=True)
class Settings:
    owner_private_key: str = ""
    twitter_bearer_token: str = ""
    discord_bot_token: str = ""
    discord_guild_id: str = ""
    discord_member_search: bool = True
    frontend_url: str = DEFAULT_FRONTEND_URL
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    environment: str = "production"
    verifier_timeout: float = DEFAULT_VERIFIER_TIMEOUT
    rate_limit: str = DEFAULT_RATE_LIMIT
    log_level: str = "INFO"

    @property
    def debug(self) -> bool:
        """Development mode: stack traces in 500 bodies, interactive docs."""
        return self.environment == "development"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from a mapping (defaults to ``os.environ``)."""
        env = os.environ if env is None else env
        return cls(
            owner_private_key=env.get("OWNER_PRIVATE_KEY", "").strip(),
            twitter_bearer_token=env.get("TWITTER_BEARER_TOKEN", ""),
            discord_bot_token=env.get("DISCORD_BOT_TOKEN", ""),
            discord_guild_id=env.get("DISCORD_GUILD_ID", "").strip(),
            discord_member_search=_parse_bool(
                "DISCORD_MEMBER_SEARCH", env.get("DISCORD_MEMBER_SEARCH", "true")),
            frontend_url=env.get("FRONTEND_URL") or DEFAULT_FRONTEND_URL,
            host=env.get("HOST", "0.0.0.0"),
            port=_parse_number("PORT", env.get("PORT", str(DEFAULT_PORT)), int),
            environment=env.get("RAGNOK_ENV", "production").strip().lower(),
            verifier_timeout=_parse_number(
                "VERIFIER_TIMEOUT", env.get("VERIFIER_TIMEOUT", str(DEFAULT_VERIFIER_TIMEOUT)), float),
            rate_limit=env.get("RATE_LIMIT") or DEFAULT_RATE_LIMIT,
            log_level=env.get("LOG_LEVEL", "INFO"),
        )


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """Load ``.env`` (if any) into the environment, then read settings."""
    load_dotenv(dotenv_path)
    return Settings.from_env()
