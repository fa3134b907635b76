"""HTTP client for the remote JSON document.

The store is a single addressable JSON resource: GET returns the whole
document, PUT overwrites it. There is no partial update, no versioning and
no concurrency control; the last PUT wins.
"""

import logging
from typing import Any

import httpx

from yume.core.errors import DocumentStoreError, handle_errors

logger = logging.getLogger(__name__)


class RemoteDocumentStore:
    """Reads and overwrites the remote application document."""

    def __init__(self, url: str, timeout: float = 15.0, client: httpx.AsyncClient | None = None):
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    @handle_errors(
        error_types=(httpx.HTTPError, ValueError),
        default_message="Failed to fetch remote document",
        log_level="warning",
        wrap_as=DocumentStoreError,
    )
    async def fetch(self) -> dict[str, Any] | None:
        """GET the whole document.

        Returns:
            The decoded JSON object, or None when the store has no document yet
            (404 or an empty body).

        Raises:
            DocumentStoreError: transport failure, error status, or a body that
                is not a JSON object.
        """
        response = await self._client.get(self.url)
        if response.status_code == 404 or not response.content.strip():
            logger.info(f"No document stored at {self.url}")
            return None
        response.raise_for_status()

        data = response.json()
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data

    @handle_errors(
        error_types=(httpx.HTTPError,),
        default_message="Failed to save remote document",
        wrap_as=DocumentStoreError,
    )
    async def save(self, document: dict[str, Any]) -> None:
        """PUT the whole document, replacing whatever is stored."""
        response = await self._client.put(self.url, json=document)
        response.raise_for_status()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
