"""Download URL resolution for confirmed files."""

from __future__ import annotations

import logging

from pydantic import ValidationError as PydanticValidationError

from mediactl.core.exceptions import MediaCtlError, ResolutionError
from mediactl.models.upload import DownloadUrlResponse
from mediactl.uploaders.constants import PRESIGN_GET_PATH

from .base import BaseService

logger = logging.getLogger(__name__)


class DownloadUrlResolver(BaseService):
    """Exchanges durable file ids for short-lived signed URLs."""

    async def resolve(self, file_id: str) -> str:
        """Request a signed retrieval URL.

        Not retried internally; callers may retry on ResolutionError.

        Args:
            file_id: Durable id returned by confirm.

        Returns:
            Time-limited download URL.

        Raises:
            ResolutionError: On transport/server error or malformed response.
        """
        try:
            resp = await self._post(PRESIGN_GET_PATH, {"fileId": file_id}, DownloadUrlResponse)
        except MediaCtlError as e:
            raise ResolutionError(file_id, cause=e, status_code=e.details.get("status_code")) from e
        except PydanticValidationError as e:
            raise ResolutionError(file_id, cause=e) from e

        logger.debug("Resolved download URL for %s", file_id)
        return resp.download_url
