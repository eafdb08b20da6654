"""Service classes for building and executing store requests."""

from entitydb.interfaces import SearchQuery
from entitydb.opensearch.services.base_service import BaseService
from entitydb.opensearch.services.bulk_payload_builder import (
    BulkDeleteOperation,
    BulkIndexOperation,
    BulkPayloadBuilder,
)
from entitydb.opensearch.services.search_query_builder import SearchQueryBuilder
from entitydb.opensearch.services.search_service import SearchService

__all__ = [
    "BaseService",
    "BulkDeleteOperation",
    "BulkIndexOperation",
    "BulkPayloadBuilder",
    "SearchQuery",
    "SearchQueryBuilder",
    "SearchService",
]
