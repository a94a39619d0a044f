"""
Service configuration.

A ServiceConfig is built once and never mutated, so it can be shared by
every request, including uploads running on worker threads.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional, Union

from .constants import DEFAULT_CONFIG
from .exceptions import ConfigurationError
from .signing import secret_to_bytes


@dataclass(frozen=True)
class ServiceConfig:
    """Process-wide settings read by every call."""

    api_key: str = ""
    secret_key: Optional[bytes] = None
    enforce_signing: bool = DEFAULT_CONFIG['enforce_signing']
    api_url: str = DEFAULT_CONFIG['api_url']
    publisher_id: Optional[str] = DEFAULT_CONFIG['publisher_id']
    proxy: Optional[str] = DEFAULT_CONFIG['proxy']
    user_agent: str = DEFAULT_CONFIG['user_agent']
    timeout: Optional[float] = DEFAULT_CONFIG['timeout']
    temp_dir: Optional[str] = DEFAULT_CONFIG['temp_dir']
    max_workers: int = DEFAULT_CONFIG['max_workers']

    def __post_init__(self):
        # Accept str secrets but always store bytes
        object.__setattr__(self, "secret_key", secret_to_bytes(self.secret_key))

    @classmethod
    def create(cls, api_key: str, secret_key: Optional[Union[str, bytes]] = None,
               **config) -> "ServiceConfig":
        """
        Build a validated configuration from defaults and overrides.

        Args:
            api_key: Scribd API key
            secret_key: Shared secret for signing calls
            **config: Overrides for any key in DEFAULT_CONFIG

        Raises:
            ConfigurationError: If an override is unknown or invalid
        """
        unknown = set(config) - set(DEFAULT_CONFIG)
        if unknown:
            raise ConfigurationError(f"unknown config option(s): {', '.join(sorted(unknown))}")

        merged = {**DEFAULT_CONFIG, **config}
        instance = cls(api_key=api_key or "", secret_key=secret_key, **merged)
        instance.validate()
        return instance

    @classmethod
    def from_env(cls, **config) -> "ServiceConfig":
        """Build a configuration from SCRIBD_* environment variables."""
        env = {
            'api_url': os.environ.get("SCRIBD_API_URL"),
            'publisher_id': os.environ.get("SCRIBD_PUBLISHER_ID"),
            'proxy': os.environ.get("SCRIBD_PROXY"),
        }
        overrides = {key: value for key, value in env.items() if value}

        enforce = os.environ.get("SCRIBD_ENFORCE_SIGNING")
        if enforce is not None:
            overrides['enforce_signing'] = enforce.strip().lower() in ("1", "true", "yes", "on")

        overrides.update(config)
        return cls.create(
            os.environ.get("SCRIBD_API_KEY", ""),
            os.environ.get("SCRIBD_SECRET_KEY") or None,
            **overrides,
        )

    def validate(self):
        """Validate configuration values."""
        if not self.api_url:
            raise ConfigurationError("api_url cannot be empty")

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

        if self.max_workers <= 0:
            raise ConfigurationError("max_workers must be positive")

    def with_overrides(self, **changes) -> "ServiceConfig":
        """Return a copy with some fields replaced."""
        updated = replace(self, **changes)
        updated.validate()
        return updated

    @property
    def can_sign(self) -> bool:
        return bool(self.secret_key)

    @property
    def proxies(self) -> Optional[dict]:
        if not self.proxy:
            return None
        return {"http": self.proxy, "https": self.proxy}
