"""Token cache for mediactl.

Stores the bearer token issued by the identity provider so that CLI runs
can reuse it until it expires.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

from mediactl.core.config import CONFIG_DIR, ENV_TOKEN, ENV_UID

# =============================================================================
# Constants
# =============================================================================

SESSION_CACHE_FILE = CONFIG_DIR / ".session"
SESSION_EXPIRY_HOURS = 1  # ID tokens are short-lived


# =============================================================================
# Session Cache
# =============================================================================


@dataclass
class CachedSession:
    """Cached bearer token with metadata."""

    token: str
    uid: str
    url: str
    created_at: datetime
    expires_at: datetime | None = None

    def is_expired(self) -> bool:
        """Check if token has expired."""
        if self.expires_at:
            return datetime.now() >= self.expires_at
        return False

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "token": self.token,
            "uid": self.uid,
            "url": self.url,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CachedSession:
        """Create from dictionary."""
        return cls(
            token=data["token"],
            uid=data["uid"],
            url=data["url"],
            created_at=datetime.fromisoformat(data["created_at"]),
            expires_at=(
                datetime.fromisoformat(data["expires_at"]) if data.get("expires_at") else None
            ),
        )


# =============================================================================
# AuthManager
# =============================================================================


class AuthManager:
    """Manages the cached bearer token."""

    def __init__(self, cache_file: Path | None = None):
        """Initialize auth manager.

        Args:
            cache_file: Path to session cache file.
        """
        self.cache_file = cache_file or SESSION_CACHE_FILE

    def get_token_from_env(self) -> str | None:
        """Get bearer token from environment variable."""
        return os.getenv(ENV_TOKEN)

    def get_uid_from_env(self) -> str | None:
        """Get identity uid from environment variable."""
        return os.getenv(ENV_UID)

    # =========================================================================
    # Session Cache
    # =========================================================================

    def save_session(
        self,
        token: str,
        uid: str,
        url: str,
        expiry_hours: float = SESSION_EXPIRY_HOURS,
    ) -> CachedSession:
        """Save token to cache.

        Args:
            token: Bearer token.
            uid: Identity the token was issued to.
            url: Backend URL the token is used against.
            expiry_hours: Hours until the token is considered expired.

        Returns:
            Cached session object.
        """
        now = datetime.now()
        session = CachedSession(
            token=token,
            uid=uid,
            url=url,
            created_at=now,
            expires_at=now + timedelta(hours=expiry_hours),
        )

        self.cache_file.parent.mkdir(parents=True, exist_ok=True)

        with open(self.cache_file, "w") as f:
            json.dump(session.to_dict(), f)

        # Owner read/write only
        try:
            os.chmod(self.cache_file, 0o600)
        except OSError:
            pass  # May fail on some systems

        return session

    def load_session(self, url: str | None = None) -> CachedSession | None:
        """Load cached token.

        Args:
            url: Optional URL to match. If provided, only returns a token for that URL.

        Returns:
            Cached session if valid, None otherwise.
        """
        if not self.cache_file.exists():
            return None

        try:
            with open(self.cache_file) as f:
                data = json.load(f)

            session = CachedSession.from_dict(data)
        except (OSError, json.JSONDecodeError, KeyError, ValueError, TypeError):
            # Invalid cache file
            self.clear_session()
            return None

        if url and session.url != url:
            return None

        if session.is_expired():
            self.clear_session()
            return None

        return session

    def clear_session(self) -> bool:
        """Clear cached token.

        Returns:
            True if cache was cleared.
        """
        if self.cache_file.exists():
            try:
                self.cache_file.unlink()
                return True
            except OSError:
                pass
        return False

    def get_session_info(self, url: str | None = None) -> dict | None:
        """Get token information for display (never the token itself)."""
        session = self.load_session(url)
        if not session:
            return None

        return {
            "url": session.url,
            "uid": session.uid,
            "created_at": session.created_at.isoformat(),
            "expires_at": session.expires_at.isoformat() if session.expires_at else None,
            "is_expired": session.is_expired(),
        }
