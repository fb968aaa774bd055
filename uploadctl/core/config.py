"""Configuration management for uploadctl.

Supports YAML profiles and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from uploadctl.core.exceptions import ConfigurationError, ProfileNotFoundError
from uploadctl.uploaders.constants import (
    DEFAULT_FILTERS,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_TIMEOUT,
    MAX_FILE_SIZE,
    SESSION_OBSERVATION_DELAY,
    THUMBNAIL_MAX_DIMENSION,
)

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "uploadctl"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

BACKENDS = ("simulated", "http")

# Environment variable names
ENV_URL = "UPLOADCTL_URL"
ENV_PROFILE = "UPLOADCTL_PROFILE"
ENV_VERIFY_SSL = "UPLOADCTL_VERIFY_SSL"
ENV_TIMEOUT = "UPLOADCTL_TIMEOUT"
ENV_MAX_CONCURRENCY = "UPLOADCTL_MAX_CONCURRENCY"


def validate_upload_url(url: str) -> str:
    """Check that ``url`` is an absolute http(s) URL.

    Raises:
        ConfigurationError: If the URL is malformed.
    """
    url = url.strip()
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise ConfigurationError(f"Invalid upload URL: {e}", field="url", value=url) from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigurationError(
            "Upload URL must start with http:// or https://", field="url", value=url
        )
    return url


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer", field=name, value=raw) from None


def _check_concurrency(value: Any) -> None:
    # bool is an int subclass; reject it explicitly
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigurationError(
            "max_concurrency must be a positive integer or null",
            field="max_concurrency",
            value=value,
        )


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigurationError(f"'{key}' must be a mapping", field=key, value=value)
    return value


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Configuration profile naming an upload backend."""

    backend: str = "simulated"
    url: str = ""
    verify_ssl: bool = True
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown backend (expected one of: {', '.join(BACKENDS)})",
                field="backend",
                value=self.backend,
            )
        if self.backend == "http":
            if not self.url:
                raise ConfigurationError("HTTP profiles need an upload URL", field="url")
            self.url = validate_upload_url(self.url)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "backend": self.backend,
            "url": self.url,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            backend=data.get("backend", "simulated"),
            url=data.get("url") or "",
            verify_ssl=data.get("verify_ssl", True),
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
        )


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    default_profile: str = "default"
    output_format: str = "table"
    max_concurrency: Optional[int] = DEFAULT_MAX_CONCURRENCY
    observation_delay: float = SESSION_OBSERVATION_DELAY
    max_file_size: int = MAX_FILE_SIZE
    thumbnail_size: int = THUMBNAIL_MAX_DIMENSION
    filters: dict[str, list[str]] = field(
        default_factory=lambda: {name: list(exts) for name, exts in DEFAULT_FILTERS.items()}
    )
    profiles: dict[str, Profile] = field(default_factory=lambda: {"default": Profile()})

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file.

        Returns:
            Loaded configuration.

        Raises:
            ConfigurationError: If the file or a value is malformed.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load config: {e}") from e
            if not isinstance(data, dict):
                raise ConfigurationError("Config file must contain a mapping")
            config._apply(data)

        if url := os.getenv(ENV_URL):
            verify_ssl = os.getenv(ENV_VERIFY_SSL, "true").lower() in ("true", "1", "yes")
            config.profiles["default"] = Profile(
                backend="http",
                url=url,
                verify_ssl=verify_ssl,
                timeout=_env_int(ENV_TIMEOUT, DEFAULT_TIMEOUT),
            )

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        if os.getenv(ENV_MAX_CONCURRENCY):
            config.max_concurrency = _env_int(ENV_MAX_CONCURRENCY, 0) or None
            _check_concurrency(config.max_concurrency)

        return config

    def _apply(self, data: dict[str, Any]) -> None:
        try:
            self.default_profile = data.get("default_profile", "default")
            self.output_format = data.get("output_format", "table")
            self.max_concurrency = data.get("max_concurrency", DEFAULT_MAX_CONCURRENCY)
            self.observation_delay = float(
                data.get("observation_delay", SESSION_OBSERVATION_DELAY)
            )
            self.max_file_size = int(data.get("max_file_size", MAX_FILE_SIZE))
            self.thumbnail_size = int(data.get("thumbnail_size", THUMBNAIL_MAX_DIMENSION))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid config value: {e}") from e

        _check_concurrency(self.max_concurrency)

        for name, exts in _section(data, "filters").items():
            if not isinstance(exts, list):
                raise ConfigurationError(
                    "Filter must be a list of extensions", field=f"filters.{name}", value=exts
                )
            self.filters[name] = [str(e) for e in exts]

        profiles = _section(data, "profiles")
        if profiles:
            self.profiles = {}
            for name, pdata in profiles.items():
                if pdata is not None and not isinstance(pdata, dict):
                    raise ConfigurationError(
                        "Profile must be a mapping", field=f"profiles.{name}", value=pdata
                    )
                self.profiles[name] = Profile.from_dict(pdata or {})

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file.

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "output_format": self.output_format,
            "max_concurrency": self.max_concurrency,
            "observation_delay": self.observation_delay,
            "max_file_size": self.max_file_size,
            "thumbnail_size": self.thumbnail_size,
            "filters": self.filters,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get_profile(self, name: Optional[str] = None) -> Profile:
        """Get profile by name or default.

        Args:
            name: Profile name. If None, uses default_profile.

        Returns:
            Profile configuration.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        name = name or self.default_profile
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        """Check if profile exists."""
        return name in self.profiles

    def add_profile(
        self,
        name: str,
        backend: str = "simulated",
        url: str = "",
        verify_ssl: bool = True,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> Profile:
        """Add or update a profile.

        Args:
            name: Profile name.
            backend: "simulated" or "http".
            url: Upload endpoint (required for http).
            verify_ssl: Whether to verify SSL certificates.
            timeout: Connect timeout in seconds.

        Returns:
            Created profile.
        """
        profile = Profile(backend=backend, url=url, verify_ssl=verify_ssl, timeout=timeout)
        self.profiles[name] = profile
        return profile

    def remove_profile(self, name: str) -> bool:
        """Remove a profile.

        Returns:
            True if removed, False if didn't exist.
        """
        if name in self.profiles:
            del self.profiles[name]
            return True
        return False

    def set_default_profile(self, name: str) -> None:
        """Set the default profile.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        self.default_profile = name

    def resolve_filter(self, name: str) -> list[str]:
        """Return the extension allow-list of a named filter.

        Raises:
            ConfigurationError: If no filter has that name.
        """
        if name not in self.filters:
            raise ConfigurationError(
                f"Unknown filter (available: {', '.join(self.filters)})",
                field="filter",
                value=name,
            )
        return list(self.filters[name])
