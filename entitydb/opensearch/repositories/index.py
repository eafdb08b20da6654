"""Index repository."""

from __future__ import annotations

from typing import Any

from entitydb.logging import get_logger
from entitydb.opensearch.entities.index import Index
from entitydb.opensearch.exceptions import translate_store_errors
from entitydb.opensearch.repositories.base_repository import BaseRepository
from entitydb.opensearch.validation import require_mapping

logger = get_logger(__name__)


class IndexRepository(BaseRepository[Index]):
    """Repository for index administration.

    Every method except ``get`` returns the raw store response unmodified.
    """

    async def create(self, *, index: str, body: dict[str, Any] | None = None, **_: Any) -> Any:
        """Create an index.

        Args:
            index: Name of the index
            body: Optional settings and mappings

        Returns:
            Creation response
        """
        if body is not None:
            require_mapping(body, "body")
        logger.info("Creating index %s", index)
        async with translate_store_errors(index=index):
            return await self._client.indices.create(index=index, body=body)

    async def get(self, *, index: str, **_: Any) -> Index:
        """Get index settings and mappings as an Index instance."""
        async with translate_store_errors(index=index):
            data = await self._client.indices.get(index=index)

        # An alias resolves to the concrete index name
        name, details = next(iter(data.items()))
        return Index(
            name=name,
            settings=details.get("settings", {}),
            mappings=details.get("mappings", {}),
            _repository=self,
        )

    async def delete(self, *, index: str, **_: Any) -> Any:
        """Delete an index and every document in it."""
        logger.info("Deleting index %s", index)
        async with translate_store_errors(index=index):
            return await self._client.indices.delete(index=index)

    async def exists(self, *, index: str) -> bool:
        """Check if an index exists."""
        async with translate_store_errors(index=index):
            return await self._client.indices.exists(index=index)

    async def refresh(self, *, index: str) -> Any:
        """Make every pending write to the index visible to searches."""
        async with translate_store_errors(index=index):
            return await self._client.indices.refresh(index=index)

    async def get_mapping(self, *, index: str, category: str | None = None) -> Any:
        """Get the field mappings of an index, optionally for one category."""
        async with translate_store_errors(index=index, category=category):
            return await self._request("GET", self._path(index, "_mapping", category))

    async def put_mapping(
        self, *, index: str, mapping: dict[str, Any], category: str | None = None
    ) -> Any:
        """Add or update field mappings of an index."""
        require_mapping(mapping, "mapping")
        async with translate_store_errors(index=index, category=category):
            return await self._request("PUT", self._path(index, "_mapping", category), body=mapping)
