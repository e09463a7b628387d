from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .client import DEFAULT_BASE_URL, DEFAULT_MAX_DEPTH, DEFAULT_PAGELEN, BitbucketClient
from .errors import ConfigError


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}.") from None
    if value < 1:
        raise ConfigError(f"{name} must be at least 1, got {value}.")
    return value


@dataclass(frozen=True)
class Settings:
    token: str | None = None
    username: str | None = None
    app_password: str | None = None
    base_url: str = DEFAULT_BASE_URL
    pagelen: int = DEFAULT_PAGELEN
    max_depth: int = DEFAULT_MAX_DEPTH

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from BITBUCKET_* environment variables."""
        env = os.environ if env is None else env
        username = env.get("BITBUCKET_USERNAME", "").strip() or None
        app_password = env.get("BITBUCKET_APP_PASSWORD", "").strip() or None
        if bool(username) != bool(app_password):
            raise ConfigError("BITBUCKET_USERNAME and BITBUCKET_APP_PASSWORD must be set together.")

        return cls(
            token=env.get("BITBUCKET_TOKEN", "").strip() or None,
            username=username,
            app_password=app_password,
            base_url=env.get("BITBUCKET_API_BASE_URL", "").strip() or DEFAULT_BASE_URL,
            pagelen=_int_setting(env, "BITBUCKET_PAGELEN", DEFAULT_PAGELEN),
            max_depth=_int_setting(env, "BITBUCKET_MAX_DEPTH", DEFAULT_MAX_DEPTH),
        )

    @property
    def has_credentials(self) -> bool:
        return bool(self.token or (self.username and self.app_password))

    def make_client(self) -> BitbucketClient:
        return BitbucketClient(
            self.token,
            username=self.username,
            password=self.app_password,
            base_url=self.base_url,
            pagelen=self.pagelen,
            max_depth=self.max_depth,
        )
