"""Caller identity capability.

Every component receives an ``Identity`` and calls ``current_token()``
immediately before each request; tokens are never held across steps, so a
refresh that happens mid-batch is picked up by the next request.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from mediactl.core.auth import AuthManager
from mediactl.core.exceptions import NotAuthenticatedError


@runtime_checkable
class Identity(Protocol):
    """Authenticated caller as seen by the upload engine."""

    @property
    def uid(self) -> str:
        """Stable identifier of the caller, used in fallback storage paths."""
        ...

    async def current_token(self) -> str:
        """Return a bearer token valid right now."""
        ...


class StaticIdentity:
    """Identity with a fixed uid and token."""

    def __init__(self, uid: str, token: str) -> None:
        self._uid = uid
        self._token = token

    @property
    def uid(self) -> str:
        return self._uid

    async def current_token(self) -> str:
        if not self._token:
            raise NotAuthenticatedError()
        return self._token

    def refresh(self, token: str) -> None:
        """Replace the token (e.g. after the provider issued a new one)."""
        self._token = token


class CachedIdentity:
    """Identity backed by ``MEDIACTL_TOKEN`` or the on-disk token cache.

    The environment and cache are re-read on every call.
    """

    def __init__(self, url: str, auth_manager: AuthManager | None = None) -> None:
        self.url = url
        self.auth_manager = auth_manager or AuthManager()

    @property
    def uid(self) -> str:
        if uid := self.auth_manager.get_uid_from_env():
            return uid
        session = self.auth_manager.load_session(self.url)
        if session is None:
            raise NotAuthenticatedError(self.url)
        return session.uid

    async def current_token(self) -> str:
        if token := self.auth_manager.get_token_from_env():
            return token
        session = self.auth_manager.load_session(self.url)
        if session is None:
            raise NotAuthenticatedError(self.url)
        return session.token
