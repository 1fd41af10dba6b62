"""Configuration management for mediactl.

Supports YAML profiles and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from mediactl.core.exceptions import ConfigurationError, ProfileNotFoundError

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "mediactl"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_TIMEOUT = 30
DEFAULT_MAX_FILES = 4
DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024
DEFAULT_MIME_PREFIX = "image/"
DEFAULT_FALLBACK_CATEGORY = "posts"

# Environment variable names
ENV_URL = "MEDIACTL_URL"
ENV_STORAGE_URL = "MEDIACTL_STORAGE_URL"
ENV_STORAGE_BUCKET = "MEDIACTL_STORAGE_BUCKET"
ENV_TOKEN = "MEDIACTL_TOKEN"
ENV_UID = "MEDIACTL_UID"
ENV_PROFILE = "MEDIACTL_PROFILE"
ENV_VERIFY_SSL = "MEDIACTL_VERIFY_SSL"
ENV_TIMEOUT = "MEDIACTL_TIMEOUT"


def _env_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Configuration profile for an upload backend and its fallback store."""

    url: str
    storage_url: Optional[str] = None
    storage_bucket: Optional[str] = None
    verify_ssl: bool = True
    timeout: int = DEFAULT_TIMEOUT
    max_files: int = DEFAULT_MAX_FILES
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    allowed_mime_prefix: str = DEFAULT_MIME_PREFIX
    fallback_category: str = DEFAULT_FALLBACK_CATEGORY

    @property
    def has_fallback(self) -> bool:
        """Whether a fallback blob store is configured."""
        return bool(self.storage_url and self.storage_bucket)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "url": self.url,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
            "max_files": self.max_files,
            "max_file_size": self.max_file_size,
            "allowed_mime_prefix": self.allowed_mime_prefix,
            "fallback_category": self.fallback_category,
        }
        if self.storage_url:
            data["storage_url"] = self.storage_url
        if self.storage_bucket:
            data["storage_bucket"] = self.storage_bucket
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            url=data.get("url", ""),
            storage_url=data.get("storage_url"),
            storage_bucket=data.get("storage_bucket"),
            verify_ssl=data.get("verify_ssl", True),
            timeout=data.get("timeout", DEFAULT_TIMEOUT),
            max_files=data.get("max_files", DEFAULT_MAX_FILES),
            max_file_size=data.get("max_file_size", DEFAULT_MAX_FILE_SIZE),
            allowed_mime_prefix=data.get("allowed_mime_prefix", DEFAULT_MIME_PREFIX),
            fallback_category=data.get("fallback_category", DEFAULT_FALLBACK_CATEGORY),
        )


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    default_profile: str = "default"
    output_format: str = "table"
    profiles: dict[str, Profile] = field(default_factory=dict)

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
            ConfigurationError: If the file exists but cannot be parsed.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

                config.default_profile = data.get("default_profile", "default")
                config.output_format = data.get("output_format", "table")

                for name, pdata in (data.get("profiles") or {}).items():
                    config.profiles[name] = Profile.from_dict(pdata or {})
            except (OSError, yaml.YAMLError, AttributeError, TypeError) as e:
                raise ConfigurationError(f"Failed to load config: {e}") from e

        # Environment variable overrides
        if url := os.getenv(ENV_URL):
            base = config.profiles.get("default")
            profile = Profile.from_dict(base.to_dict()) if base else Profile(url=url)
            profile.url = url
            if verify := os.getenv(ENV_VERIFY_SSL):
                profile.verify_ssl = _env_bool(verify)
            if timeout := os.getenv(ENV_TIMEOUT):
                try:
                    profile.timeout = int(timeout)
                except ValueError as e:
                    raise ConfigurationError(
                        f"Invalid {ENV_TIMEOUT}", field="timeout", value=timeout
                    ) from e
            if storage_url := os.getenv(ENV_STORAGE_URL):
                profile.storage_url = storage_url
            if bucket := os.getenv(ENV_STORAGE_BUCKET):
                profile.storage_bucket = bucket
            config.profiles["default"] = profile

        if profile_name := os.getenv(ENV_PROFILE):
            config.default_profile = profile_name

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file (excludes secrets).

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "output_format": self.output_format,
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

    def add_profile(self, name: str, url: str, **options: Any) -> Profile:
        """Add or update a profile.

        Args:
            name: Profile name.
            url: Backend base URL.
            **options: Any other Profile field.

        Returns:
            Created profile.
        """
        profile = Profile(url=url, **options)
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
