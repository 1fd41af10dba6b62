"""Tests for mediactl.uploaders.proxy module."""

from __future__ import annotations

import httpx
import pytest

from conftest import BACKEND_URL, FakeBackend, make_candidate
from mediactl.core.client import BackendClient
from mediactl.core.exceptions import ProxyTransferError
from mediactl.core.identity import StaticIdentity
from mediactl.models.upload import UploadSession
from mediactl.uploaders.proxy import ProxyTransferer

SESSION = UploadSession(session_id="sess-1", storage_key="uploads/photo.png")


def _client(transport: httpx.AsyncBaseTransport) -> BackendClient:
    return BackendClient(
        base_url=BACKEND_URL,
        identity=StaticIdentity(uid="user-1", token="tok-1"),
        transport=transport,
    )


class TestProxyTransferer:
    """Tests for multipart proxy uploads."""

    @pytest.mark.asyncio
    async def test_sends_multipart_with_session(self, backend: FakeBackend):
        async with _client(backend.transport) as client:
            await ProxyTransferer(client).transfer(make_candidate("photo.png"), SESSION)

        (request,) = backend.requests
        assert request.url.path == "/api/uploads/proxy-upload"
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert request.headers["Authorization"] == "Bearer tok-1"
        assert b'name="sessionId"' in request.content
        assert b"sess-1" in request.content
        assert b'name="file"; filename="photo.png"' in request.content
        assert b"Content-Type: image/png" in request.content

    @pytest.mark.asyncio
    async def test_reports_increasing_progress(self, backend: FakeBackend):
        seen: list[int] = []

        async with _client(backend.transport) as client:
            await ProxyTransferer(client).transfer(
                make_candidate(size=400_000), SESSION, on_progress=seen.append
            )

        assert len(seen) > 1
        assert seen == sorted(set(seen))
        assert seen[0] > 10
        assert seen[-1] == 90

    @pytest.mark.asyncio
    async def test_empty_file_still_reaches_90(self, backend: FakeBackend):
        seen: list[int] = []

        async with _client(backend.transport) as client:
            await ProxyTransferer(client).transfer(
                make_candidate(size=0), SESSION, on_progress=seen.append
            )

        assert seen[-1] == 90

    @pytest.mark.asyncio
    async def test_server_rejection(self, backend: FakeBackend):
        backend.fail["proxy"] = 413

        async with _client(backend.transport) as client:
            with pytest.raises(ProxyTransferError) as exc_info:
                await ProxyTransferer(client).transfer(make_candidate(), SESSION)

        assert exc_info.value.status_code == 413
        assert exc_info.value.kind == "transfer"

    @pytest.mark.asyncio
    async def test_network_failure(self, backend: FakeBackend):
        backend.fail["proxy"] = "network"

        async with _client(backend.transport) as client:
            with pytest.raises(ProxyTransferError, match="Proxy upload failed"):
                await ProxyTransferer(client).transfer(make_candidate(), SESSION)

    @pytest.mark.asyncio
    async def test_unknown_mime_sent_as_octet_stream(self, backend: FakeBackend):
        async with _client(backend.transport) as client:
            await ProxyTransferer(client).transfer(make_candidate(mime_type=""), SESSION)

        assert b"Content-Type: application/octet-stream" in backend.requests[0].content
