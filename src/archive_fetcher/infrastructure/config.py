"""Application configuration — loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

_CACHE_ROOT = Path.home() / ".cache" / "archive-fetcher"


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    github_access_token: SecretStr | None = None
    gitlab_access_token: SecretStr | None = None
    store_dir: Path = _CACHE_ROOT / "store"
    cache_dir: Path = _CACHE_ROOT / "fetcher-cache"
    http_timeout: float = 30.0
    cache_key_includes_host: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    def token_for(self, scheme_type: str) -> str | None:
        """Return the access token configured for a provider, if any."""
        secret = {
            "github": self.github_access_token,
            "gitlab": self.gitlab_access_token,
        }.get(scheme_type)
        if secret is None:
            return None
        return secret.get_secret_value() or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()
