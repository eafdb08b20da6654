"""Typed views over store responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from entitydb.opensearch.entities.entity import Entity


class StoreResponse(BaseModel):
    """Base for store responses; unknown keys are kept as extras."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class WriteResult(StoreResponse):
    """Acknowledgment of a single-document write or delete."""

    index: str = Field(alias="_index")
    category: str | None = Field(default=None, alias="_type")
    id: str = Field(alias="_id")
    version: int | None = Field(default=None, alias="_version")
    result: str | None = None
    found: bool | None = None


class GetResult(StoreResponse):
    """A stored document, including its version and source."""

    index: str = Field(alias="_index")
    category: str | None = Field(default=None, alias="_type")
    id: str = Field(alias="_id")
    version: int | None = Field(default=None, alias="_version")
    found: bool = False
    source: dict[str, Any] | None = Field(default=None, alias="_source")

    def to_entity[T: Entity](self, entity_class: type[T]) -> T:
        """Rebuild the stored entity from its source."""
        if self.source is None:
            raise ValueError(f"Document {self.id} has no source")
        return entity_class.model_validate(self.source)


class MultiGetResult(StoreResponse):
    """Per-id results of a multi-get request."""

    docs: list[GetResult] = Field(default_factory=list)

    @property
    def found(self) -> list[GetResult]:
        """Documents that exist."""
        return [doc for doc in self.docs if doc.found]


class BulkItemResult(BaseModel):
    """Outcome of one operation within a bulk request."""

    action: str
    index: str | None = None
    category: str | None = None
    id: str | None = None
    status: int
    version: int | None = None
    result: str | None = None
    found: bool | None = None
    error: Any = None

    @property
    def ok(self) -> bool:
        """True when this item succeeded."""
        return self.error is None and 200 <= self.status < 300

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "BulkItemResult":
        """Parse a ``{"<action>": {...}}`` entry of a bulk response."""
        ((action, outcome),) = item.items()
        return cls(
            action=action,
            index=outcome.get("_index"),
            category=outcome.get("_type"),
            id=outcome.get("_id"),
            status=outcome["status"],
            version=outcome.get("_version"),
            result=outcome.get("result"),
            found=outcome.get("found"),
            error=outcome.get("error"),
        )


class BulkResult(BaseModel):
    """Aggregated outcome of a bulk request.

    A successful request does not mean every item succeeded; check ``errors``
    or ``failed_items``.
    """

    took: int | None = None
    errors: bool = False
    items: list[BulkItemResult] = Field(default_factory=list)

    @property
    def failed_items(self) -> list[BulkItemResult]:
        return [item for item in self.items if not item.ok]

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "BulkResult":
        return cls(
            took=response.get("took"),
            errors=bool(response.get("errors", False)),
            items=[BulkItemResult.from_item(item) for item in response.get("items", [])],
        )
