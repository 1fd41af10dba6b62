"""Direct upload to the fallback blob store.

Used only when the primary session/proxy path fails before confirmation.
Objects are written under ``{uid}/{category}/{timestamp}_{name}`` through
the store's REST object API and addressed by the public download URL the
store hands back.
"""

from __future__ import annotations

import logging
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError

from mediactl.core.client import BackendClient
from mediactl.core.exceptions import (
    BackendError,
    FallbackUploadError,
    MediaCtlError,
    UploadError,
)
from mediactl.models.upload import FileCandidate, StoredObject
from mediactl.uploaders.common import (
    MonotonicMillis,
    build_storage_path,
    object_path_from_url,
)
from mediactl.uploaders.constants import FALLBACK_CATEGORY

logger = logging.getLogger(__name__)


class FallbackStorageClient:
    """Uploads candidates straight to a bucket, bypassing the backend."""

    def __init__(
        self,
        client: BackendClient,
        bucket: str,
        *,
        category: str = FALLBACK_CATEGORY,
        clock: MonotonicMillis | None = None,
    ) -> None:
        """Initialize the fallback client.

        Args:
            client: Client whose base URL is the blob store endpoint.
            bucket: Bucket objects are written to.
            category: Path segment grouping objects by use (e.g. "posts").
            clock: Timestamp source for object names.
        """
        self.client = client
        self.bucket = bucket
        self.category = category
        self.clock = clock or MonotonicMillis()

    def _objects_path(self) -> str:
        return f"/v0/b/{quote(self.bucket, safe='')}/o"

    def object_path(self, candidate: FileCandidate) -> str:
        """Storage key for a new upload of ``candidate``."""
        return build_storage_path(
            self.client.identity.uid, self.category, self.clock(), candidate.name
        )

    def download_url(self, stored: StoredObject) -> str:
        """Public URL for a stored object, from the store's own response."""
        name = quote(stored.name, safe="")
        url = f"{self.client.base_url}{self._objects_path()}/{name}?alt=media"
        if token := stored.first_token:
            url = f"{url}&token={token}"
        return url

    async def upload(
        self,
        candidate: FileCandidate,
        primary_error: UploadError | None = None,
    ) -> str:
        """Upload a candidate and return its public URL.

        Args:
            candidate: File to upload.
            primary_error: Failure of the primary path that led here.

        Returns:
            Download URL of the stored object.

        Raises:
            FallbackUploadError: If the store rejected or could not be reached.
        """
        try:
            path = self.object_path(candidate)
            logger.debug("Fallback upload start: bucket=%s path=%s", self.bucket, path)
            resp = await self.client.request(
                "POST",
                self._objects_path(),
                params={"name": path},
                content=candidate.data,
                headers={"Content-Type": candidate.mime_type or "application/octet-stream"},
            )
            stored = StoredObject.model_validate(resp.json())
        except BackendError as e:
            raise FallbackUploadError(
                f"Fallback upload failed with status {e.status_code}",
                candidate.name,
                cause=e,
                status_code=e.status_code,
                primary_error=primary_error,
            ) from e
        except MediaCtlError as e:
            raise FallbackUploadError(
                f"Fallback upload failed: {e.message}",
                candidate.name,
                cause=e,
                status_code=e.details.get("status_code"),
                primary_error=primary_error,
            ) from e
        except (ValueError, PydanticValidationError) as e:
            raise FallbackUploadError(
                "Fallback store returned an unreadable response",
                candidate.name,
                cause=e,
                primary_error=primary_error,
            ) from e

        return self.download_url(stored)

    async def delete(self, url: str) -> bool:
        """Best-effort removal of an object previously uploaded here.

        Failures are logged and reported as False; nothing is raised.
        Orphaned objects are not tracked for later cleanup.

        Returns:
            True if the store confirmed the deletion.
        """
        path = object_path_from_url(url)
        if not path:
            logger.warning("Not a fallback store URL, skipping delete: %s", url)
            return False

        try:
            await self.client.request(
                "DELETE", f"{self._objects_path()}/{quote(path, safe='')}"
            )
        except MediaCtlError as e:
            logger.warning("Failed to delete fallback object %s: %s", path, e)
            return False

        logger.info("Deleted fallback object %s", path)
        return True
