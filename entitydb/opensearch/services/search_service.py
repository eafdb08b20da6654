"""Search service for document store queries."""

from typing import Any

from opensearchpy import AsyncOpenSearch

from entitydb.interfaces import ISearchService, SearchQuery, SearchResults
from entitydb.logging import get_logger
from entitydb.opensearch.exceptions import translate_store_errors
from entitydb.opensearch.services.base_service import BaseService

logger = get_logger(__name__)


def _total(hits: dict[str, Any]) -> int:
    # Older stores report a bare integer, newer ones {"value": n, "relation": ...}.
    total = hits.get("total", 0)
    if isinstance(total, dict):
        return total.get("value", 0)
    return total


class SearchService(BaseService, ISearchService):
    """Search service for the document store."""

    _client: AsyncOpenSearch

    async def query(self, query: SearchQuery) -> SearchResults:
        """Execute a search query."""
        logger.debug("search %s: %s", query.path(), query.body)
        async with translate_store_errors(index=query.index, category=query.category):
            response = await self._client.transport.perform_request(
                "POST", query.path(), params=query.params or None, body=query.body
            )
        return SearchResults(
            hits=response["hits"]["hits"],
            count=_total(response["hits"]),
            took=response.get("took"),
            timed_out=response.get("timed_out", False),
        )

    async def count(self, query: SearchQuery) -> int:
        """Count the documents matching a query."""
        body = {"query": query.body["query"]}
        logger.debug("count %s: %s", query.path("_count"), body)
        async with translate_store_errors(index=query.index, category=query.category):
            response = await self._client.transport.perform_request(
                "POST", query.path("_count"), params=query.params or None, body=body
            )
        return response["count"]
