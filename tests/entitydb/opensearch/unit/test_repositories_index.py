"""Unit tests for IndexRepository."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from opensearchpy import exceptions as os_exceptions

from entitydb.opensearch.entities.index import Index
from entitydb.opensearch.exceptions import StoreError, ValidationError
from entitydb.opensearch.repositories.index import IndexRepository


@pytest.mark.unit
class TestIndexRepository:
    """Tests for IndexRepository."""

    @pytest.fixture
    def index_repo(self, mock_opensearch_client: MagicMock) -> IndexRepository:
        """Create an IndexRepository instance with mock client."""
        return IndexRepository(client=mock_opensearch_client)

    @pytest.mark.asyncio
    async def test_create_index(self, index_repo: IndexRepository, mock_opensearch_client: MagicMock) -> None:
        """Test creating an index returns the raw response."""
        body = {"settings": {"number_of_shards": 1}}
        mock_opensearch_client.indices.create.return_value = {"acknowledged": True, "index": "test-index"}

        result = await index_repo.create(index="test-index", body=body)

        assert result == {"acknowledged": True, "index": "test-index"}
        mock_opensearch_client.indices.create.assert_awaited_once_with(index="test-index", body=body)

    @pytest.mark.asyncio
    async def test_create_index_without_body(
        self, index_repo: IndexRepository, mock_opensearch_client: MagicMock
    ) -> None:
        await index_repo.create(index="test-index")

        mock_opensearch_client.indices.create.assert_awaited_once_with(index="test-index", body=None)

    @pytest.mark.asyncio
    async def test_create_index_with_invalid_body(
        self, index_repo: IndexRepository, mock_opensearch_client: MagicMock
    ) -> None:
        with pytest.raises(ValidationError):
            await index_repo.create(index="test-index", body=["shards"])  # type: ignore[arg-type]

        mock_opensearch_client.indices.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_existing_index(self, index_repo: IndexRepository, mock_opensearch_client: MagicMock) -> None:
        """Test that creating an existing index surfaces the store error."""
        mock_opensearch_client.indices.create.side_effect = os_exceptions.RequestError(
            400,
            "resource_already_exists_exception",
            {"error": {"type": "resource_already_exists_exception", "reason": "index already exists"}},
        )

        with pytest.raises(StoreError) as exc_info:
            await index_repo.create(index="test-index")

        assert exc_info.value.code == 400
        assert exc_info.value.message == "index already exists"

    @pytest.mark.asyncio
    async def test_get_index(self, index_repo: IndexRepository, mock_opensearch_client: MagicMock) -> None:
        """Test that get() resolves an alias to the concrete index."""
        mock_opensearch_client.indices.get.return_value = {
            "test-index-v2": {
                "aliases": {"test-index": {}},
                "mappings": {"doc": {"properties": {"name": {"type": "keyword"}}}},
                "settings": {"index": {"number_of_shards": "1"}},
            }
        }

        index = await index_repo.get(index="test-index")

        assert isinstance(index, Index)
        assert index.name == "test-index-v2"
        assert index.mappings == {"doc": {"properties": {"name": {"type": "keyword"}}}}
        assert index.settings == {"index": {"number_of_shards": "1"}}
        assert index._repository is index_repo

    @pytest.mark.asyncio
    async def test_delete_index(self, index_repo: IndexRepository, mock_opensearch_client: MagicMock) -> None:
        mock_opensearch_client.indices.delete.return_value = {"acknowledged": True}

        result = await index_repo.delete(index="test-index")

        assert result == {"acknowledged": True}
        mock_opensearch_client.indices.delete.assert_awaited_once_with(index="test-index")

    @pytest.mark.asyncio
    async def test_delete_missing_index(self, index_repo: IndexRepository, mock_opensearch_client: MagicMock) -> None:
        mock_opensearch_client.indices.delete.side_effect = os_exceptions.NotFoundError(
            404,
            "index_not_found_exception",
            {"error": {"type": "index_not_found_exception", "reason": "no such index"}, "status": 404},
        )

        with pytest.raises(StoreError) as exc_info:
            await index_repo.delete(index="test-index")

        assert exc_info.value.code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("exists", [True, False])
    async def test_exists(self, index_repo: IndexRepository, mock_opensearch_client: MagicMock, exists: bool) -> None:
        mock_opensearch_client.indices.exists.return_value = exists

        assert await index_repo.exists(index="test-index") is exists
        mock_opensearch_client.indices.exists.assert_awaited_once_with(index="test-index")

    @pytest.mark.asyncio
    async def test_refresh(self, index_repo: IndexRepository, mock_opensearch_client: MagicMock) -> None:
        await index_repo.refresh(index="test-index")

        mock_opensearch_client.indices.refresh.assert_awaited_once_with(index="test-index")

    @pytest.mark.asyncio
    async def test_get_mapping(self, index_repo: IndexRepository, perform_request: AsyncMock) -> None:
        perform_request.return_value = {"test-index": {"mappings": {}}}

        result = await index_repo.get_mapping(index="test-index")

        assert result == {"test-index": {"mappings": {}}}
        perform_request.assert_awaited_once_with("GET", "/test-index/_mapping", params=None, body=None)

    @pytest.mark.asyncio
    async def test_put_mapping_for_category(self, index_repo: IndexRepository, perform_request: AsyncMock) -> None:
        mapping = {"properties": {"name": {"type": "keyword"}}}
        perform_request.return_value = {"acknowledged": True}

        await index_repo.put_mapping(index="test-index", category="doc", mapping=mapping)

        perform_request.assert_awaited_once_with("PUT", "/test-index/_mapping/doc", params=None, body=mapping)

    @pytest.mark.asyncio
    async def test_put_mapping_invalid(self, index_repo: IndexRepository, perform_request: AsyncMock) -> None:
        with pytest.raises(ValidationError):
            await index_repo.put_mapping(index="test-index", mapping="keyword")  # type: ignore[arg-type]

        perform_request.assert_not_awaited()
