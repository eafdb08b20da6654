"""Bulk payload builder.

Serializes typed bulk operations into the store's newline-delimited bulk
framing. An index operation is two lines (action header, then the document
source); a delete operation is a single header line. Every line, including
the last, is terminated by a newline.
"""

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Self


@dataclass(frozen=True)
class BulkOperationBase:
    """Action header shared by every bulk operation."""

    action: ClassVar[str]

    index: str
    category: str | None
    id: str

    def header(self) -> dict[str, Any]:
        metadata = {"_index": self.index}
        if self.category:
            metadata["_type"] = self.category
        metadata["_id"] = self.id
        return {self.action: metadata}

    def lines(self) -> list[dict[str, Any]]:
        return [self.header()]


@dataclass(frozen=True)
class BulkDeleteOperation(BulkOperationBase):
    """Delete one document by id."""

    action: ClassVar[str] = "delete"


@dataclass(frozen=True)
class BulkIndexOperation(BulkOperationBase):
    """Write one document source under an id."""

    action: ClassVar[str] = "index"

    source: dict[str, Any]

    def lines(self) -> list[dict[str, Any]]:
        return [self.header(), self.source]


BulkOperation = BulkIndexOperation | BulkDeleteOperation


class BulkPayloadBuilder:
    """Builder for bulk request bodies."""

    def __init__(self) -> None:
        self._operations: list[BulkOperation] = []

    def __len__(self) -> int:
        return len(self._operations)

    def add(self, operation: BulkOperation) -> Self:
        """Append an operation."""
        self._operations.append(operation)
        return self

    def index(
        self, *, index: str, category: str | None, id: str, source: dict[str, Any]
    ) -> Self:
        """Append an index operation."""
        return self.add(BulkIndexOperation(index=index, category=category, id=id, source=source))

    def delete(self, *, index: str, category: str | None, id: str) -> Self:
        """Append a delete operation."""
        return self.add(BulkDeleteOperation(index=index, category=category, id=id))

    @property
    def operations(self) -> list[BulkOperation]:
        return list(self._operations)

    def build(self) -> str:
        """Serialize the operations to a newline-delimited JSON payload."""
        if not self._operations:
            raise ValueError("Cannot build an empty bulk payload")
        return "".join(
            json.dumps(line, separators=(",", ":")) + "\n"
            for operation in self._operations
            for line in operation.lines()
        )
