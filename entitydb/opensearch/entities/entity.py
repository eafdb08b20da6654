"""Entity base model."""

import uuid
from datetime import UTC, datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator, model_validator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def new_id() -> str:
    return uuid.uuid4().hex


class Entity(BaseModel):
    """Base record stored by an entity database.

    Subclass it to add domain fields and validation rules. The database only
    relies on ``id``, ``createdOn``, ``updatedOn`` and ``entityType``; any other
    field is carried through as part of the document source.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: StrictStr = Field(default_factory=new_id, min_length=1, frozen=True)
    created_on: datetime = Field(default_factory=utc_now, alias="createdOn")
    updated_on: datetime = Field(default_factory=utc_now, alias="updatedOn")
    created_by: StrictStr | None = Field(default=None, alias="createdBy")
    updated_by: StrictStr | None = Field(default=None, alias="updatedBy")
    entity_type: StrictStr | None = Field(default=None, alias="entityType", min_length=1)

    @model_validator(mode="before")
    @classmethod
    def stamp_timestamps(cls, data: Any) -> Any:
        """New entities start with ``updatedOn`` equal to ``createdOn``."""
        if not isinstance(data, dict):
            return data
        keys = data.keys()
        if not keys & {"createdOn", "created_on"}:
            data = {**data, "createdOn": utc_now()}
        if not keys & {"updatedOn", "updated_on"}:
            data = {**data, "updatedOn": data.get("createdOn", data.get("created_on"))}
        return data

    @field_validator("created_on", "updated_on")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        """Naive datetimes are taken to be UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    def mark_updated(self, by: str | None = None) -> Self:
        """Stamp ``updatedOn`` with the current time and record who updated it."""
        self.updated_on = utc_now()
        if by is not None:
            self.updated_by = by
        return self

    def to_source(self) -> dict[str, Any]:
        """Serialize to the document source stored in the index."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
