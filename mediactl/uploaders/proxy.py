"""Proxied transfer of file bytes to the upload backend.

The file is sent as a multipart body (``file`` + ``sessionId``) to the
backend's proxy endpoint. Bytes are counted as the transport pulls them
from the request stream, and the count is reported as a percentage
remapped into [10, 90] of the task's progress scale.
"""

from __future__ import annotations

import io
import logging
from collections.abc import AsyncIterator

import httpx

from mediactl.core.client import BackendClient
from mediactl.core.exceptions import BackendError, MediaCtlError, ProxyTransferError
from mediactl.models.upload import FileCandidate, UploadSession
from mediactl.uploaders.common import ProgressCallback, ProgressThrottle
from mediactl.uploaders.constants import PROXY_UPLOAD_PATH

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class ProgressStream(httpx.AsyncByteStream):
    """Request body wrapper that counts bytes handed to the transport."""

    def __init__(self, stream: httpx.AsyncByteStream, throttle: ProgressThrottle) -> None:
        self._stream = stream
        self._throttle = throttle

    async def __aiter__(self) -> AsyncIterator[bytes]:
        async for chunk in self._stream:
            yield chunk
            self._throttle.update(len(chunk))

    async def aclose(self) -> None:
        await self._stream.aclose()


class ProxyTransferer:
    """Streams a candidate's bytes through the authenticated proxy."""

    def __init__(self, client: BackendClient) -> None:
        self.client = client

    async def transfer(
        self,
        candidate: FileCandidate,
        session: UploadSession,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        """Upload the bytes for an issued session.

        Args:
            candidate: File to send.
            session: Session returned by negotiation.
            on_progress: Called with strictly increasing values in [11, 90].

        Raises:
            ProxyTransferError: On transport failure or non-2xx completion.
        """
        logger.debug(
            "Proxy upload start: session=%s name=%s size=%d",
            session.session_id,
            candidate.name,
            candidate.byte_size,
        )
        try:
            request = await self.client.build_request(
                "POST",
                PROXY_UPLOAD_PATH,
                data={"sessionId": session.session_id},
                files={
                    "file": (
                        candidate.name,
                        io.BytesIO(candidate.data),
                        candidate.mime_type or DEFAULT_CONTENT_TYPE,
                    )
                },
            )
            total = int(request.headers.get("Content-Length") or candidate.byte_size)
            throttle = ProgressThrottle(total, on_progress)
            request.stream = ProgressStream(request.stream, throttle)
            resp = await self.client.send(request)
        except BackendError as e:
            raise ProxyTransferError(
                f"Proxy upload failed with status {e.status_code}",
                candidate.name,
                cause=e,
                status_code=e.status_code,
            ) from e
        except MediaCtlError as e:
            raise ProxyTransferError(
                f"Proxy upload failed: {e.message}",
                candidate.name,
                cause=e,
                status_code=e.details.get("status_code"),
            ) from e

        throttle.finish()
        logger.debug("Proxy upload ok: session=%s status=%d", session.session_id, resp.status_code)
