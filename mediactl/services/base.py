"""Base service with common methods for backend services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from mediactl.models.base import BaseModel

if TYPE_CHECKING:
    from mediactl.core.client import BackendClient

M = TypeVar("M", bound=BaseModel)


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, client: "BackendClient") -> None:
        """Initialize service with a backend client.

        Args:
            client: BackendClient bound to an identity
        """
        self.client = client

    async def _post(self, path: str, payload: BaseModel | dict[str, Any], model: type[M]) -> M:
        """POST a JSON body and validate the response.

        Args:
            path: API endpoint path
            payload: Request model or plain dict
            model: Response model to validate against

        Returns:
            Validated response model

        Raises:
            MediaCtlError: On transport, auth or status failures
            pydantic.ValidationError: If the response does not match ``model``
        """
        body = payload.to_payload() if isinstance(payload, BaseModel) else payload
        data = await self.client.post_json(path, body)
        return model.model_validate(data)
