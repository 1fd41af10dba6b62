"""Pytest configuration and fixtures for mediactl tests."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator
from urllib.parse import unquote

import httpx
import pytest

from mediactl.core.config import Profile
from mediactl.core.events import EventStream
from mediactl.core.identity import StaticIdentity
from mediactl.models.upload import FileCandidate
from mediactl.services.uploads import UploadOrchestrator

BACKEND_URL = "https://api.example.com"
STORAGE_URL = "https://storage.example.com"
BUCKET = "media-bucket"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep MEDIACTL_* variables from the developer shell out of tests."""
    for var in (
        "MEDIACTL_URL",
        "MEDIACTL_STORAGE_URL",
        "MEDIACTL_STORAGE_BUCKET",
        "MEDIACTL_TOKEN",
        "MEDIACTL_UID",
        "MEDIACTL_PROFILE",
        "MEDIACTL_VERIFY_SSL",
        "MEDIACTL_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test
output_format: table

profiles:
  test:
    url: https://api-test.example.com
    storage_url: https://storage.example.com
    storage_bucket: media-bucket
    verify_ssl: false
    timeout: 30

  production:
    url: https://api.example.com
    verify_ssl: true
    timeout: 60
    max_files: 8
"""


# =============================================================================
# Identity & Files
# =============================================================================


@pytest.fixture
def identity() -> StaticIdentity:
    """Identity with a fixed uid and token."""
    return StaticIdentity(uid="user-1", token="tok-1")


def make_candidate(
    name: str = "photo.png",
    size: int = 1024,
    mime_type: str = "image/png",
) -> FileCandidate:
    """Build an in-memory candidate of ``size`` bytes."""
    return FileCandidate(name=name, data=b"\x89" * size, mime_type=mime_type)


@pytest.fixture
def candidate_factory() -> Callable[..., FileCandidate]:
    return make_candidate


# =============================================================================
# Fake Backend
# =============================================================================


class FakeBackend:
    """In-memory upload backend served through httpx.MockTransport.

    Set ``fail`` to map an endpoint name (presign, proxy, confirm, resolve)
    to a status code, or to ``"network"`` to raise a connection error.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail: dict[str, Any] = {}
        self.file_url: str | None = None
        self._counter = 0

    def calls(self, endpoint: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(endpoint)]

    def names_sent(self, endpoint: str) -> list[str]:
        """File names seen by a JSON endpoint, in call order."""
        return [json.loads(r.content)["name"] for r in self.calls(endpoint)]

    def _failure(self, endpoint: str, request: httpx.Request) -> httpx.Response | None:
        failure = self.fail.get(endpoint)
        if failure is None:
            return None
        if failure == "network":
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(failure, json={"error": f"{endpoint} failed"})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/api/uploads/presign":
            if (resp := self._failure("presign", request)) is not None:
                return resp
            self._counter += 1
            body = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "uploadSessionId": f"sess-{self._counter}",
                    "key": f"uploads/{body['name']}",
                    "uploadType": "proxy",
                },
            )

        if path == "/api/uploads/proxy-upload":
            if (resp := self._failure("proxy", request)) is not None:
                return resp
            return httpx.Response(200, json={"ok": True})

        if path == "/api/uploads/confirm":
            if (resp := self._failure("confirm", request)) is not None:
                return resp
            body = json.loads(request.content)
            payload = {"fileId": f"file-{body['uploadSessionId']}"}
            if self.file_url:
                payload["fileUrl"] = self.file_url
            return httpx.Response(200, json=payload)

        if path == "/api/files/presign-get":
            if (resp := self._failure("resolve", request)) is not None:
                return resp
            body = json.loads(request.content)
            return httpx.Response(
                200, json={"downloadUrl": f"https://cdn.example.com/{body['fileId']}?sig=abc"}
            )

        return httpx.Response(404, json={"error": "not found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeStore:
    """In-memory blob store speaking the object REST API."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.objects: dict[str, bytes] = {}
        self.fail: int | str | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail == "network":
            raise httpx.ConnectError("connection refused", request=request)
        if self.fail is not None:
            return httpx.Response(int(self.fail), json={"error": "store failed"})

        if request.method == "POST":
            name = request.url.params["name"]
            self.objects[name] = request.content
            return httpx.Response(
                200,
                json={
                    "name": name,
                    "bucket": BUCKET,
                    "size": str(len(request.content)),
                    "contentType": request.headers.get("Content-Type"),
                    "downloadTokens": "tok-abc",
                },
            )

        if request.method == "DELETE":
            name = unquote(request.url.raw_path.decode().split("/o/", 1)[1])
            if self.objects.pop(name, None) is None:
                return httpx.Response(404, json={"error": "no such object"})
            return httpx.Response(204)

        return httpx.Response(405)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def profile() -> Profile:
    return Profile(url=BACKEND_URL, storage_url=STORAGE_URL, storage_bucket=BUCKET)


@pytest.fixture
def make_orchestrator(
    profile: Profile,
    identity: StaticIdentity,
    backend: FakeBackend,
    store: FakeStore,
) -> Callable[..., UploadOrchestrator]:
    """Factory for orchestrators wired to the fake backend and store."""

    def factory(**kwargs: Any) -> UploadOrchestrator:
        kwargs.setdefault("events", EventStream())
        kwargs.setdefault("success_grace", 0)
        return UploadOrchestrator.from_profile(
            profile,
            identity,
            transport=backend.transport,
            storage_transport=store.transport,
            **kwargs,
        )

    return factory
