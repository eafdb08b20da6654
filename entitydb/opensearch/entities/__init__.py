"""
Entity database domain entities.

This module contains the entity base model, the index resource, and typed
views over store responses.
"""

from entitydb.opensearch.entities.base_entity import BaseEntity
from entitydb.opensearch.entities.entity import Entity
from entitydb.opensearch.entities.index import Index
from entitydb.opensearch.entities.results import (
    BulkItemResult,
    BulkResult,
    GetResult,
    MultiGetResult,
    WriteResult,
)

__all__ = [
    "BaseEntity",
    "BulkItemResult",
    "BulkResult",
    "Entity",
    "GetResult",
    "Index",
    "MultiGetResult",
    "WriteResult",
]
