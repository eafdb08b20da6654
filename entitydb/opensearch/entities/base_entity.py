"""Base class for resources whose persistence is owned by a repository."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from entitydb.opensearch.repositories.base_repository import BaseRepository


class BaseEntity[T](ABC):
    """Abstract base class for store-managed resources.

    Resources such as indexes are pure domain objects that delegate all
    persistence operations to their repository.
    """

    _repository: BaseRepository[T]

    @abstractmethod
    async def delete(self) -> Any:
        """Delete this resource.

        This method should delegate to the repository's delete method,
        passing its own identifier.

        Returns:
            Deletion response
        """
