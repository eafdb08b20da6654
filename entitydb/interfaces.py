"""Type definitions and interfaces for the entity database."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class SearchResults:
    """Search result."""

    hits: list[dict[str, Any]]
    count: int
    took: int | None = None
    timed_out: bool = False


@dataclass
class SearchQuery:
    """Search query."""

    index: str
    category: str | None
    body: dict[str, Any]
    params: dict[str, Any] = field(default_factory=dict)

    def path(self, endpoint: str = "_search") -> str:
        """URL of ``endpoint`` scoped to this query's index and category."""
        if self.category:
            return f"/{self.index}/{self.category}/{endpoint}"
        return f"/{self.index}/{endpoint}"


class ISearchService(ABC):
    """Search service interface."""

    @abstractmethod
    async def query(self, query: SearchQuery) -> SearchResults:
        """Search for entities matching the query."""

    @abstractmethod
    async def count(self, query: SearchQuery) -> int:
        """Count entities matching the query."""
