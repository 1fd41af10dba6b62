"""Async HTTP client for the upload backend.

Injects a fresh bearer token into every request and maps transport and
status failures onto the mediactl exception hierarchy. Retries are not
performed here; fallback policy belongs to the orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx

from mediactl.core.exceptions import (
    BackendError,
    MediaCtlError,
    NetworkError,
    PermissionDeniedError,
    ServerUnreachableError,
    SessionExpiredError,
)
from mediactl.core.identity import Identity
from mediactl.core.validation import validate_server_url

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TIMEOUT = 30


# =============================================================================
# BackendClient
# =============================================================================


@dataclass
class BackendClient:
    """HTTP client for a bearer-authenticated JSON backend."""

    base_url: str
    identity: Identity
    timeout: float | None = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)
    _client: httpx.AsyncClient | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate and normalize URL."""
        self.base_url = validate_server_url(self.base_url)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self.verify_ssl,
                follow_redirects=True,
                transport=self.transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> BackendClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    # =========================================================================
    # Requests
    # =========================================================================

    async def auth_headers(self) -> dict[str, str]:
        """Build the Authorization header from the identity's current token."""
        token = await self.identity.current_token()
        return {"Authorization": f"Bearer {token}"}

    async def build_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        content: bytes | None = None,
        data: dict[str, Any] | None = None,
        files: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Request:
        """Build an authenticated request without sending it."""
        merged = await self.auth_headers()
        if headers:
            merged.update(headers)
        return self._get_client().build_request(
            method,
            path,
            params=params,
            json=json,
            content=content,
            data=data,
            files=files,
            headers=merged,
        )

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send a prepared request and check its status.

        Raises:
            ServerUnreachableError: If the connection could not be opened.
            NetworkError: On timeouts, redirect loops and other request failures.
            SessionExpiredError: On HTTP 401.
            PermissionDeniedError: On HTTP 403.
            BackendError: On any other non-2xx status.
        """
        url = str(request.url)
        try:
            resp = await self._get_client().send(request)
        except httpx.ConnectError as e:
            raise ServerUnreachableError(self.base_url) from e
        except httpx.TimeoutException as e:
            raise NetworkError(url, f"Timeout: {e}") from e
        except httpx.TransportError as e:
            raise NetworkError(url, str(e) or type(e).__name__) from e
        except httpx.HTTPError as e:
            raise NetworkError(url, f"{type(e).__name__}: {e}") from e

        self._check_status(resp, request.method, request.url.path)
        return resp

    def _check_status(self, resp: httpx.Response, method: str, path: str) -> None:
        if resp.is_success:
            return
        if resp.status_code == 401:
            err: MediaCtlError = SessionExpiredError(self.base_url)
        elif resp.status_code == 403:
            err = PermissionDeniedError(path, method.lower())
        else:
            err = BackendError(f"{self.base_url}{path}", resp.status_code, resp.text)
        err.details.update({"status_code": resp.status_code, "method": method, "path": path})
        raise err

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Build, authenticate and send a request."""
        request = await self.build_request(method, path, **kwargs)
        return await self.send(request)

    async def post_json(self, path: str, payload: dict[str, Any]) -> Any:
        """POST a JSON body and return the decoded JSON response.

        Raises:
            BackendError: If the response body is not JSON.
        """
        resp = await self.request("POST", path, json=payload)
        try:
            return resp.json()
        except ValueError as e:
            raise BackendError(
                f"{self.base_url}{path}", resp.status_code, "response is not JSON"
            ) from e
