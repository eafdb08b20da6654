"""Base repository class for document store repositories."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

if TYPE_CHECKING:
    from opensearchpy import AsyncOpenSearch


class BaseRepository[T](ABC):
    """Abstract base class for document store repositories.

    Repositories handle ALL persistence operations for the resources they
    manage: creation, retrieval, deletion, and any store-specific request.

    Type Parameters:
        T: The type of resource this repository manages
    """

    def __init__(self, *, client: AsyncOpenSearch) -> None:
        """Initialize the repository with an async OpenSearch client."""
        self._client = client

    @abstractmethod
    async def create(self, *_: Any, **__: Any) -> Any:
        """Create a new resource."""

    @abstractmethod
    async def get(self, *_: Any, **__: Any) -> Any:
        """Get a resource by identifier."""

    @abstractmethod
    async def delete(self, *_: Any, **__: Any) -> Any:
        """Delete a resource."""

    @staticmethod
    def _path(*parts: str | None) -> str:
        """Build a URL path from its segments, skipping empty ones."""
        return "/" + "/".join(quote(part, safe="_") for part in parts if part)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        """Send a raw request through the client's transport."""
        return await self._client.transport.perform_request(
            method, url, params=params or None, body=body
        )
