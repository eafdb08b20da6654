"""Entity repository.

Maps entity operations onto the document store: single-document CRUD with
optimistic concurrency, bulk create/get/delete, and parameterized searches.
Arguments are validated before any request is issued.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from entitydb.interfaces import SearchQuery, SearchResults
from entitydb.logging import LogLevel, get_logger, to_numeric_level
from entitydb.opensearch.entities.entity import Entity
from entitydb.opensearch.entities.results import (
    BulkResult,
    GetResult,
    MultiGetResult,
    WriteResult,
)
from entitydb.opensearch.exceptions import (
    ConflictError,
    EntityDatabaseError,
    NotFoundError,
    SchemaError,
    ValidationError,
    translate_store_errors,
)
from entitydb.opensearch.repositories.base_repository import BaseRepository
from entitydb.opensearch.repositories.index import IndexRepository
from entitydb.opensearch.services.bulk_payload_builder import BulkPayloadBuilder
from entitydb.opensearch.services.search_query_builder import SearchQueryBuilder
from entitydb.opensearch.services.search_service import SearchService
from entitydb.opensearch.validation import (
    DeleteEntityParams,
    EntityDatabaseConfig,
    EntityIdParams,
    FieldSearchParams,
    RangeParams,
    RefreshParams,
    SearchParams,
    UpdateEntityParams,
    require_mapping,
    validate,
    validate_ids,
)

if TYPE_CHECKING:
    from opensearchpy import AsyncOpenSearch

DEFAULT_SORT = {"field": "updatedOn", "descending": True}


def _as_params(params: Any) -> Any:
    """Turn a parameter model back into the mapping it was parsed from."""
    if isinstance(params, BaseModel):
        return params.model_dump(by_alias=True, exclude_unset=True)
    return params


class EntityRepository[T: Entity](BaseRepository[T]):
    """Entity database bound to one index and an optional default category.

    The handle holds no state besides its configuration, so one instance can
    serve any number of concurrent callers. Conflicting writes are arbitrated
    by the store's document versions; a caller that loses a conflict has to
    re-fetch the entity and retry.
    """

    def __init__(
        self,
        *,
        client: AsyncOpenSearch,
        index: str,
        category: str | None = None,
        entity_class: type[T] = Entity,  # type: ignore[assignment]
        log_level: str | LogLevel = LogLevel.WARNING,
    ) -> None:
        """Initialize the repository.

        Args:
            client: Async OpenSearch client
            index: Index the entities are stored in
            category: Default document category, required unless every entity sets ``entityType``
            entity_class: Entity model used to construct and validate entities
            log_level: Log level for this repository's logger

        Raises:
            ValidationError: If the options are invalid
        """
        if client is None:
            raise ValidationError("client is required")
        try:
            self._config = EntityDatabaseConfig(
                index=index,
                category=category,
                entity_class=entity_class,
                log_level=log_level,
            )
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

        super().__init__(client=client)
        self._indexes = IndexRepository(client=client)
        self._search = SearchService(client=client)
        # One logger per handle, so handles on the same index keep their own level
        self._logger = get_logger(f"{__name__}.{self._config.index}.{id(self):x}")
        self._logger.setLevel(to_numeric_level(self._config.log_level))
        self._logger.debug("Initialized with %s", self._config)

    @property
    def index(self) -> str:
        return self._config.index

    @property
    def category(self) -> str | None:
        return self._config.category

    @property
    def entity_class(self) -> type[T]:
        return self._config.entity_class  # type: ignore[return-value]

    # Helpers

    @asynccontextmanager
    async def _store_call(self, operation: str, **context: Any) -> AsyncIterator[None]:
        try:
            async with translate_store_errors(index=self.index, **context):
                yield
        except EntityDatabaseError as e:
            self._logger.warning("%s() failed: %s (code=%s)", operation, e.message, e.code)
            raise

    def construct(self, candidate: Any) -> T:
        """Build a canonical entity from a mapping or an entity instance.

        Raises:
            ValidationError: If the candidate is not an object
            SchemaError: If the candidate fails the entity model's validation
        """
        if isinstance(candidate, BaseModel):
            data = candidate.model_dump(by_alias=True)
        elif isinstance(candidate, Mapping):
            data = dict(candidate)
        else:
            raise ValidationError("entity is required and must be an object")

        try:
            return self.entity_class.model_validate(data)
        except PydanticValidationError as e:
            raise SchemaError.from_pydantic(e) from e

    def _resolve_category(self, entity: Entity | None = None, override: Any = None) -> str:
        if override is not None and not isinstance(override, str):
            raise ValidationError("category must be a String")
        category = override or (entity.entity_type if entity is not None else None) or self.category
        if not category:
            raise ValidationError(
                "category is required - configure a default category on the database "
                "or set entityType on the entity"
            )
        return category.lower()

    @staticmethod
    def _refresh_params(refresh: bool) -> dict[str, str]:
        return {"refresh": "true"} if refresh else {}

    async def _bulk(self, builder: BulkPayloadBuilder, *, refresh: bool, operation: str) -> BulkResult:
        payload = builder.build()
        self._logger.debug("%s(): bulk payload\n%s", operation, payload)
        async with self._store_call(operation):
            response = await self._client.bulk(body=payload, params=self._refresh_params(refresh))
        result = BulkResult.from_response(response)
        if result.errors:
            self._logger.info(
                "%s(): %d of %d items failed", operation, len(result.failed_items), len(result.items)
            )
        return result

    # Single-document operations

    async def create(self, entity: Any, *, refresh: bool = False) -> WriteResult:  # type: ignore[override]
        """Create an entity; fails if an entity with the same id exists.

        Args:
            entity: Entity instance or mapping of entity fields
            refresh: Make the new document visible to searches immediately

        Returns:
            The store's write acknowledgment (id and assigned version)

        Raises:
            ValidationError: If the entity is not an object or no category can be resolved
            SchemaError: If the entity fails validation
            ConflictError: If the id already exists
        """
        refresh = validate(RefreshParams, {"refresh": refresh}).refresh
        new_entity = self.construct(entity)
        category = self._resolve_category(new_entity)
        params = {"op_type": "create", **self._refresh_params(refresh)}

        self._logger.debug("create(): %s", new_entity)
        async with self._store_call("create", category=category, id=new_entity.id):
            response = await self._request(
                "PUT",
                self._path(self.index, category, new_entity.id),
                params=params,
                body=new_entity.to_source(),
            )
        self._logger.debug("create(): %s", response)
        return WriteResult.model_validate(response)

    async def get(self, id: Any, category: str | None = None) -> GetResult:  # type: ignore[override]
        """Fetch an entity by id.

        Args:
            id: Entity id
            category: Category override; defaults to the database category

        Raises:
            ValidationError: If the id is not a non-empty string
            NotFoundError: If no entity exists with this id
        """
        params = validate(EntityIdParams, {"id": id})
        category = self._resolve_category(override=category)

        async with self._store_call("get", category=category, id=params.id):
            response = await self._request("GET", self._path(self.index, category, params.id))
        self._logger.debug("get(): %s", response)

        if response.get("found") is False:
            raise NotFoundError(
                "Entity does not exist",
                info={"index": self.index, "category": category, "id": params.id, "response": response},
            )
        return GetResult.model_validate(response)

    async def _concurrency_params(self, category: str, id: str, version: int) -> dict[str, Any]:
        """Check ``version`` against the stored document and return its write precondition.

        Raises:
            ConflictError: If the document is missing or its version differs
        """
        info = {"index": self.index, "category": category, "id": id, "version": version}
        try:
            async with translate_store_errors(index=self.index, category=category, id=id):
                response = await self._request(
                    "GET", self._path(self.index, category, id), params={"_source": "false"}
                )
        except NotFoundError as e:
            raise ConflictError("Entity does not exist", code=409, info=info) from e

        current = response.get("_version")
        if response.get("found") is False or current != version:
            raise ConflictError(
                f"version conflict, current version [{current}] is different than the one provided [{version}]",
                code=409,
                info={**info, "response": response},
            )

        # The sequence number pins the write to the document we just read.
        # Stores that predate sequence numbers only accept the internal version.
        if "_seq_no" in response and "_primary_term" in response:
            return {"if_seq_no": response["_seq_no"], "if_primary_term": response["_primary_term"]}
        return {"version": version}

    async def set(
        self,
        entity: Any,
        *,
        version: int | None = None,
        updated_by: str | None = None,
    ) -> WriteResult:
        """Replace an entity, or create it if it does not exist.

        ``updatedOn`` is stamped with the current time. When ``version`` is
        given, the stored document is read first and must carry that version.
        The write is then conditioned on the sequence number of that read, so a
        concurrent writer in between also makes it fail with a conflict.

        Args:
            entity: Entity instance or mapping of entity fields
            version: Version the caller last read
            updated_by: Who made the update

        Raises:
            ValidationError: If the parameters are invalid
            SchemaError: If the entity fails validation
            ConflictError: If ``version`` does not match the stored version, or another
                write lands between the version check and this write
        """
        params = validate(
            UpdateEntityParams,
            {"entity": entity, "version": version, "updatedBy": updated_by},
        )
        new_entity = self.construct(params.entity)
        new_entity.mark_updated(params.updated_by)
        category = self._resolve_category(new_entity)

        self._logger.debug("set(): version=%s %s", params.version, new_entity)
        async with self._store_call("set", category=category, id=new_entity.id):
            query: dict[str, Any] = {}
            if params.version is not None:
                query = await self._concurrency_params(category, new_entity.id, params.version)
            response = await self._request(
                "PUT",
                self._path(self.index, category, new_entity.id),
                params=query,
                body=new_entity.to_source(),
            )
        self._logger.debug("set(): %s", response)
        return WriteResult.model_validate(response)

    async def delete(  # type: ignore[override]
        self, id: Any, *, refresh: bool = False, category: str | None = None
    ) -> WriteResult:
        """Delete an entity by id.

        Args:
            id: Entity id
            refresh: Make the deletion visible to searches immediately
            category: Category override; defaults to the database category

        Raises:
            ValidationError: If the id or refresh flag is invalid
            NotFoundError: If no entity exists with this id
        """
        params = validate(DeleteEntityParams, {"id": id, "refresh": refresh})
        category = self._resolve_category(override=category)

        async with self._store_call("delete", category=category, id=params.id):
            response = await self._request(
                "DELETE",
                self._path(self.index, category, params.id),
                params=self._refresh_params(params.refresh),
            )
        self._logger.debug("delete(): %s", response)
        return WriteResult.model_validate(response)

    # Bulk operations

    async def create_many(self, entities: Any, *, refresh: bool = False) -> BulkResult | None:
        """Index many entities in one bulk request.

        Every entity is constructed before the payload is sent, so one invalid
        entity fails the whole batch without a request. Item failures reported
        by the store do not raise; inspect the returned items.

        Returns:
            Per-item outcomes, or None when ``entities`` is empty
        """
        if isinstance(entities, list | tuple) and len(entities) == 0:
            return None
        if not isinstance(entities, list | tuple):
            raise ValidationError("entities is required and must be an array")
        refresh = validate(RefreshParams, {"refresh": refresh}).refresh

        builder = BulkPayloadBuilder()
        for candidate in entities:
            entity = self.construct(candidate)
            builder.index(
                index=self.index,
                category=self._resolve_category(entity),
                id=entity.id,
                source=entity.to_source(),
            )
        return await self._bulk(builder, refresh=refresh, operation="create_many")

    async def get_many(self, ids: Any) -> MultiGetResult:
        """Fetch many entities by id in one request.

        Returns:
            One result per id, each flagged found or not found
        """
        ids = validate_ids(ids)
        category = self._resolve_category()

        async with self._store_call("get_many", category=category):
            response = await self._request(
                "POST", self._path(self.index, category, "_mget"), body={"ids": ids}
            )
        self._logger.debug("get_many(): %s", response)
        return MultiGetResult.model_validate(response)

    async def delete_many(self, ids: Any, *, refresh: bool = False) -> BulkResult | None:
        """Delete many entities by id in one bulk request.

        Returns:
            Per-item outcomes, or None when ``ids`` is empty
        """
        if isinstance(ids, list | tuple) and len(ids) == 0:
            return None
        ids = validate_ids(ids)
        refresh = validate(RefreshParams, {"refresh": refresh}).refresh
        category = self._resolve_category()

        builder = BulkPayloadBuilder()
        for id in ids:
            builder.delete(index=self.index, category=category, id=id)
        return await self._bulk(builder, refresh=refresh, operation="delete_many")

    # Queries

    def _query_builder(self, params: SearchParams) -> SearchQueryBuilder:
        builder = (
            SearchQueryBuilder(index=self.index, category=self.category)
            .start_at(params.from_)
            .limit_results(params.page_size)
        )
        if params.sort is not None:
            builder.sort_by(params.sort.field, descending=params.sort.descending)
        if params.return_fields:
            builder.return_fields(params.return_fields)
        if params.version:
            builder.include_version()
        if params.timeout is not None:
            builder.timeout(params.timeout)
        return builder

    def build_search_request(
        self, params: Any = None, schema: type[SearchParams] = SearchParams
    ) -> SearchQuery:
        """Validate search parameters and build the matching search request.

        Args:
            params: Search parameters as a mapping or parameter model
            schema: ``SearchParams`` or ``FieldSearchParams``

        Raises:
            ValidationError: If the parameters do not conform to the schema
        """
        parsed = validate(schema, params)
        builder = self._query_builder(parsed)
        if isinstance(parsed, FieldSearchParams):
            self._apply_field_filter(builder, parsed)
        return builder.build()

    @staticmethod
    def _apply_field_filter(builder: SearchQueryBuilder, params: FieldSearchParams) -> None:
        if params.value is not None:
            builder.match_exactly(field=params.field, value=params.value)
            return
        bounds = params.range or RangeParams()
        builder.match_range(
            field=params.field,
            from_=bounds.from_,
            to=bounds.to,
            include_lower=bounds.include_lower,
            include_upper=bounds.include_upper,
        )

    async def find_all(self, params: Any = None) -> SearchResults:
        """Page through every entity, newest update first unless sorted otherwise."""
        params = _as_params(params)
        if params is not None and not isinstance(params, Mapping):
            raise ValidationError("SearchParams parameters must be an object")
        query = self.build_search_request({"sort": DEFAULT_SORT, **(params or {})}, SearchParams)
        return await self._search.query(query)

    async def find_by_field(self, params: Any) -> SearchResults:
        """Find entities whose field equals a value or falls within a range."""
        query = self.build_search_request(params, FieldSearchParams)
        return await self._search.query(query)

    async def find_by_created_on(self, range: Any = None, **params: Any) -> SearchResults:
        """Find entities created within a date range."""
        return await self.find_by_field({**params, "field": "createdOn", "range": _as_params(range)})

    async def find_by_updated_on(self, range: Any = None, **params: Any) -> SearchResults:
        """Find entities last updated within a date range."""
        return await self.find_by_field({**params, "field": "updatedOn", "range": _as_params(range)})

    async def count(self) -> int:
        """Count every entity in the index and category."""
        query = SearchQueryBuilder(index=self.index, category=self.category).match_all().build_count()
        return await self._search.count(query)

    # Index administration

    async def get_mapping(self) -> Any:
        return await self._indexes.get_mapping(index=self.index, category=self.category)

    async def set_mapping(self, mapping: Any) -> Any:
        return await self._indexes.put_mapping(
            index=self.index, category=self.category, mapping=require_mapping(mapping, "mapping")
        )

    async def create_index(self, settings: Any = None) -> Any:
        if settings is not None:
            require_mapping(settings, "settings")
        return await self._indexes.create(index=self.index, body=settings)

    async def delete_index(self) -> Any:
        return await self._indexes.delete(index=self.index)

    async def refresh_index(self) -> Any:
        """Make pending writes visible to searches now instead of on the next refresh cycle."""
        return await self._indexes.refresh(index=self.index)
