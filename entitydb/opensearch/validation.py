"""Declarative parameter schemas.

Every public operation validates its arguments against one of these models
before a request is built, so malformed input never reaches the store.
"""

from collections.abc import Mapping
from datetime import date, datetime
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_validator,
    model_validator,
)
from pydantic import ValidationError as PydanticValidationError

from entitydb.logging import LogLevel
from entitydb.opensearch.entities.entity import Entity
from entitydb.opensearch.exceptions import ValidationError

NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]
RangeBound = StrictInt | StrictFloat | datetime | date | StrictStr


class ParamsModel(BaseModel):
    """Base for operation parameter schemas."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class IdsParams(ParamsModel):
    """An array of entity ids."""

    ids: list[NonEmptyStr] = Field(min_length=1)


class EntityIdParams(ParamsModel):
    """A single entity id."""

    id: NonEmptyStr


class RefreshParams(ParamsModel):
    """Whether a write is made visible to searches immediately."""

    refresh: StrictBool = False


class DeleteEntityParams(EntityIdParams, RefreshParams):
    """Parameters for deleting one entity."""


class UpdateEntityParams(ParamsModel):
    """Parameters for replacing an entity."""

    entity: Any
    version: Annotated[StrictInt, Field(gt=0)] | None = None
    updated_by: StrictStr | None = Field(default=None, alias="updatedBy")

    @field_validator("entity")
    @classmethod
    def validate_entity(cls, v: Any) -> Any:
        """Entity must be an object."""
        if not isinstance(v, Mapping | BaseModel):
            raise ValueError("entity is required and must be an object")
        return v


class SortParams(ParamsModel):
    """Sort order for search results."""

    field: NonEmptyStr = "updatedOn"
    descending: StrictBool = True


class RangeParams(ParamsModel):
    """Range filter bounds.

    Missing bounds are unbounded; present bounds are inclusive unless the
    matching flag says otherwise.
    """

    from_: RangeBound | None = Field(default=None, alias="from")
    to: RangeBound | None = None
    include_lower: StrictBool = Field(default=True, alias="includeLower")
    include_upper: StrictBool = Field(default=True, alias="includeUpper")


class SearchParams(ParamsModel):
    """Parameters shared by every search."""

    from_: Annotated[StrictInt, Field(ge=0)] = Field(default=0, alias="from")
    page_size: Annotated[StrictInt, Field(ge=1)] = Field(default=10, alias="pageSize")
    sort: SortParams | None = None
    return_fields: list[NonEmptyStr] | None = Field(default=None, alias="returnFields")
    timeout: Annotated[StrictInt, Field(ge=1)] | None = None
    version: StrictBool = False


class FieldSearchParams(SearchParams):
    """Parameters for searching one field by exact value or by range."""

    field: NonEmptyStr
    value: StrictBool | RangeBound | None = None
    range: RangeParams | None = None

    @model_validator(mode="after")
    def check_value_or_range(self) -> "FieldSearchParams":
        """``value`` and ``range`` are mutually exclusive."""
        if self.value is not None and self.range is not None:
            raise ValueError("value and range are mutually exclusive")
        return self


class EntityDatabaseConfig(BaseModel):
    """Options for an entity database handle."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    index: NonEmptyStr
    category: NonEmptyStr | None = None
    entity_class: type[Entity] = Entity
    log_level: LogLevel = LogLevel.WARNING

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_case_level(cls, v: Any) -> Any:
        """Level names are case-insensitive."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("index", "category")
    @classmethod
    def lower_case(cls, v: str | None) -> str | None:
        """Index and category names are addressed in lower case."""
        return v.lower() if v is not None else v


def validate[M: BaseModel](schema: type[M], params: Any) -> M:
    """Validate ``params`` against ``schema``.

    Args:
        schema: Parameter model to validate against
        params: Mapping of parameters, an instance of ``schema``, or None for defaults

    Returns:
        The parsed parameter model

    Raises:
        ValidationError: If the parameters do not conform to the schema
    """
    if isinstance(params, schema):
        return params
    if params is None:
        params = {}
    if not isinstance(params, Mapping):
        raise ValidationError(f"{schema.__name__} parameters must be an object")
    try:
        return schema.model_validate(params)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


def validate_ids(ids: Any) -> list[str]:
    """Validate an array of entity ids."""
    return validate(IdsParams, {"ids": ids}).ids


def require_mapping(value: Any, name: str) -> Mapping[str, Any]:
    """Require a non-null object argument."""
    if not isinstance(value, Mapping):
        raise ValidationError(f"{name} is required and must be an object")
    return value
