"""Query builder for document store searches."""

from datetime import date
from typing import Any, Self

from entitydb.interfaces import SearchQuery


def to_store_value(value: Any) -> Any:
    """Convert dates to the ISO-8601 strings the store compares against."""
    if isinstance(value, date):
        return value.isoformat()
    return value


class SearchQueryBuilder:
    """Search query builder scoped to one index and, optionally, one category."""

    def __init__(self, index: str, category: str | None = None) -> None:
        """Initialize SearchQueryBuilder with an index name."""
        self._category = category
        self._exclude_fields: list[str] = []
        self._filters: list[dict[str, Any]] = []
        self._from: int | None = None
        self._include_fields: list[str] = []
        self._index = index
        self._query: dict[str, Any] = {"match_all": {}}
        self._size: int | None = None
        self._sort: list[dict[str, Any]] = []
        self._timeout_ms: int | None = None
        self._version: bool | None = None

    def add_filter(self, value: dict[str, Any]) -> Self:
        """Add a single filter to the query."""
        self.add_filters([value])
        return self

    def add_filters(self, values: list[dict[str, Any]]) -> Self:
        """Add multiple filters to the query."""
        self._filters.extend(values)
        return self

    def match_all(self) -> Self:
        """Match every document."""
        self._query = {"match_all": {}}
        return self

    def match(self, *, field: str, value: str) -> Self:
        """Full-text match a field."""
        self._query = {"match": {field: value}}
        return self

    def match_exactly(self, *, field: str, value: Any) -> Self:
        """Filter on documents whose field equals the value exactly."""
        return self.add_filter({"term": {field: to_store_value(value)}})

    def match_range(
        self,
        *,
        field: str,
        from_: Any = None,
        to: Any = None,
        include_lower: bool = True,
        include_upper: bool = True,
    ) -> Self:
        """Filter on documents whose field falls within the bounds.

        Missing bounds are unbounded. With neither bound the filter matches
        every document that has the field.
        """
        if from_ is None and to is None:
            return self.add_filter({"exists": {"field": field}})

        bounds: dict[str, Any] = {}
        if from_ is not None:
            bounds["gte" if include_lower else "gt"] = to_store_value(from_)
        if to is not None:
            bounds["lte" if include_upper else "lt"] = to_store_value(to)
        return self.add_filter({"range": {field: bounds}})

    def sort_by(self, field: str, *, descending: bool = True) -> Self:
        """Sort results on a field. Later calls break ties of earlier ones."""
        self._sort.append({field: {"order": "desc" if descending else "asc"}})
        return self

    def start_at(self, offset: int) -> Self:
        """Skip the first ``offset`` results."""
        self._from = offset
        return self

    def limit_results(self, size: int) -> Self:
        """Limit the number of results."""
        self._size = size
        return self

    def return_fields(self, fields: list[str]) -> Self:
        """Only return these source fields."""
        self._include_fields.extend(fields)
        return self

    def exclude_fields(self, fields: list[str]) -> Self:
        """Exclude fields from the query."""
        self._exclude_fields.extend(fields)
        return self

    def include_version(self, enabled: bool = True) -> Self:
        """Return each hit's document version."""
        self._version = enabled
        return self

    def timeout(self, milliseconds: int) -> Self:
        """Bound the time the store spends searching."""
        self._timeout_ms = milliseconds
        return self

    def _build_query(self) -> dict[str, Any]:
        if len(self._filters) > 0:
            return {
                "bool": {
                    "must": [self._query],
                    "filter": self._filters,
                }
            }
        return self._query

    def build(self) -> SearchQuery:
        """Build the query."""
        body: dict[str, Any] = {"query": self._build_query()}

        source: dict[str, list[str]] = {}
        if len(self._include_fields) > 0:
            source["includes"] = self._include_fields
        if len(self._exclude_fields) > 0:
            source["excludes"] = self._exclude_fields
        if source:
            body["_source"] = source

        if self._sort:
            body["sort"] = self._sort

        if self._from is not None:
            body["from"] = self._from

        if self._size is not None:
            body["size"] = self._size

        if self._version is not None:
            body["version"] = self._version

        if self._timeout_ms is not None:
            body["timeout"] = f"{self._timeout_ms}ms"

        return SearchQuery(index=self._index, category=self._category, body=body)

    def build_count(self) -> SearchQuery:
        """Build a count request; only the query part applies."""
        return SearchQuery(
            index=self._index,
            category=self._category,
            body={"query": self._build_query()},
        )
