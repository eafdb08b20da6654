"""
Document store repositories.

This module contains repository classes for entities and indexes.
Repositories handle persistence operations and return typed results.
"""

from entitydb.opensearch.repositories.base_repository import BaseRepository
from entitydb.opensearch.repositories.entity import EntityRepository
from entitydb.opensearch.repositories.index import IndexRepository

__all__ = [
    "BaseRepository",
    "EntityRepository",
    "IndexRepository",
]
