"""Upload session negotiation and confirmation.

The backend issues a session (id + storage key) before bytes are sent and
turns it into a durable file record once the transfer is finished. Neither
step is retried here.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from mediactl.core.exceptions import (
    BackendError,
    ConfirmError,
    MediaCtlError,
    SessionNegotiationError,
)
from mediactl.models.upload import (
    ConfirmedUpload,
    ConfirmRequest,
    ConfirmResponse,
    FileCandidate,
    PresignRequest,
    PresignResponse,
    UploadSession,
)
from mediactl.uploaders.constants import CONFIRM_PATH, PRESIGN_PATH

from .base import BaseService

logger = logging.getLogger(__name__)


class SessionNegotiator(BaseService):
    """Obtains upload sessions from the backend."""

    async def negotiate(
        self,
        candidate: FileCandidate,
        parent_id: str | None = None,
    ) -> UploadSession:
        """Request an upload session for an admitted file.

        Args:
            candidate: Admitted file.
            parent_id: Target folder/container id.

        Returns:
            Issued UploadSession.

        Raises:
            SessionNegotiationError: On any non-2xx, transport error or
                malformed response.
        """
        request = PresignRequest(
            name=candidate.name,
            size=candidate.byte_size,
            mime=candidate.mime_type,
            parent_id=parent_id,
        )
        logger.debug("Requesting upload session for %s", candidate.name)

        try:
            resp = await self._post(PRESIGN_PATH, request, PresignResponse)
        except BackendError as e:
            raise SessionNegotiationError(
                f"Backend refused upload session ({e.status_code})",
                candidate.name,
                cause=e,
                status_code=e.status_code,
            ) from e
        except MediaCtlError as e:
            raise SessionNegotiationError(
                f"Could not reach upload backend: {e.message}",
                candidate.name,
                cause=e,
                status_code=e.details.get("status_code"),
            ) from e
        except PydanticValidationError as e:
            raise SessionNegotiationError(
                "Backend returned an invalid upload session",
                candidate.name,
                cause=e,
            ) from e

        session = resp.to_session()
        logger.debug(
            "Upload session issued: session=%s key=%s type=%s",
            session.session_id,
            session.storage_key,
            resp.upload_type,
        )
        return session


class Confirmer(BaseService):
    """Finalizes transferred files into durable records."""

    async def confirm(
        self,
        candidate: FileCandidate,
        session: UploadSession,
        parent_id: str | None = None,
    ) -> ConfirmedUpload:
        """Tell the backend the byte stream is complete.

        Args:
            candidate: File whose bytes were transferred.
            session: Session used for the transfer.
            parent_id: Target folder/container id.

        Returns:
            Durable file id and optional direct URL.

        Raises:
            ConfirmError: On transport/server error. The transferred bytes
                may be left orphaned server-side.
        """
        request = ConfirmRequest(
            upload_session_id=session.session_id,
            key=session.storage_key,
            size=candidate.byte_size,
            mime=candidate.mime_type,
            name=candidate.name,
            parent_id=parent_id,
        )

        try:
            resp = await self._post(CONFIRM_PATH, request, ConfirmResponse)
        except (MediaCtlError, PydanticValidationError) as e:
            status_code = e.details.get("status_code") if isinstance(e, MediaCtlError) else None
            reason = e.message if isinstance(e, MediaCtlError) else "invalid confirm response"
            raise ConfirmError(
                f"Could not confirm upload: {reason}",
                candidate.name,
                cause=e,
                status_code=status_code,
                session_id=session.session_id,
                storage_key=session.storage_key,
            ) from e

        logger.debug("Upload confirmed: session=%s file_id=%s", session.session_id, resp.file_id)
        return resp.to_confirmed()
