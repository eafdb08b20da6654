"""Index domain entity."""

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, PrivateAttr

from entitydb.opensearch.entities.base_entity import BaseEntity

if TYPE_CHECKING:
    from entitydb.opensearch.repositories.index import IndexRepository


class Index(BaseModel, BaseEntity["Index"]):
    """Domain model representing an index (collection) in the store."""

    name: str
    settings: dict[str, Any] = Field(default_factory=dict)
    mappings: dict[str, Any] = Field(default_factory=dict)
    _repository: "IndexRepository" = PrivateAttr()  # type: ignore[assignment]

    def __init__(self, **data: Any) -> None:
        """Initialize Index with repository support."""
        repository = data.pop("_repository", None)
        super().__init__(**data)
        if repository is not None:
            object.__setattr__(self, "_repository", repository)

    async def delete(self) -> Any:  # type: ignore[override]
        """Delete this index.

        Returns:
            Deletion response from the store
        """
        return await self._repository.delete(index=self.name)

    async def exists(self) -> bool:
        """Check if this index exists."""
        return await self._repository.exists(index=self.name)

    async def refresh(self) -> Any:
        """Make pending writes to this index visible to searches."""
        return await self._repository.refresh(index=self.name)
