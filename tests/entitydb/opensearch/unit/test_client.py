"""Unit tests for OpenSearchClient."""

from unittest.mock import MagicMock, patch

import pytest
from opensearchpy import exceptions as os_exceptions

from entitydb.opensearch.client import OpenSearchClient
from entitydb.opensearch.entities.entity import Entity
from entitydb.opensearch.exceptions import TransportError
from entitydb.opensearch.repositories import EntityRepository, IndexRepository
from entitydb.opensearch.services import SearchService


@pytest.mark.unit
class TestOpenSearchClient:
    """Tests for OpenSearchClient."""

    def test_init_connects(self) -> None:
        """Test that the async client is built from the connection options."""
        with patch("entitydb.opensearch.client.AsyncOpenSearch") as mock_opensearch_class:
            client = OpenSearchClient(host="https://search.example.com", port=9243, use_ssl=True, timeout=10)

        mock_opensearch_class.assert_called_once_with(
            hosts=[{"host": "search.example.com", "port": 9243}],
            http_compress=True,
            use_ssl=True,
            verify_certs=False,
            ssl_assert_hostname=False,
            ssl_show_warn=False,
            timeout=10,
        )
        assert client._client is mock_opensearch_class.return_value

    def test_init_creates_repositories(self, opensearch_client: OpenSearchClient) -> None:
        assert isinstance(opensearch_client.indexes, IndexRepository)
        assert isinstance(opensearch_client.search, SearchService)

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENSEARCH_HOST", "localhost")
        monkeypatch.setenv("OPENSEARCH_PORT", "9201")
        monkeypatch.setenv("OPENSEARCH_USE_SSL", "true")

        with patch("entitydb.opensearch.client.AsyncOpenSearch"):
            client = OpenSearchClient.from_env(timeout=5)

        assert client._host == "localhost"
        assert client._port == 9201
        assert client._use_ssl is True
        assert client._timeout == 5

    def test_from_env_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENSEARCH_HOST", "localhost")
        monkeypatch.delenv("OPENSEARCH_PORT", raising=False)
        monkeypatch.delenv("OPENSEARCH_USE_SSL", raising=False)

        with patch("entitydb.opensearch.client.AsyncOpenSearch"):
            client = OpenSearchClient.from_env()

        assert client._port == 9200
        assert client._use_ssl is False

    def test_from_env_without_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OPENSEARCH_HOST", raising=False)

        with pytest.raises(ValueError, match="OPENSEARCH_HOST"):
            OpenSearchClient.from_env()

    def test_from_env_with_invalid_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENSEARCH_HOST", "localhost")
        monkeypatch.setenv("OPENSEARCH_PORT", "http")

        with pytest.raises(ValueError, match="OPENSEARCH_PORT"):
            OpenSearchClient.from_env()

    @pytest.mark.asyncio
    async def test_info(self, opensearch_client: OpenSearchClient, mock_opensearch_client: MagicMock) -> None:
        assert await opensearch_client.info() == {"cluster_name": "test-cluster"}
        mock_opensearch_client.info.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_info_unreachable(
        self, opensearch_client: OpenSearchClient, mock_opensearch_client: MagicMock
    ) -> None:
        mock_opensearch_client.info.side_effect = os_exceptions.ConnectionError(
            "N/A", "connection refused", Exception("refused")
        )

        with pytest.raises(TransportError):
            await opensearch_client.info()

    @pytest.mark.asyncio
    async def test_async_context_manager(
        self, opensearch_client: OpenSearchClient, mock_opensearch_client: MagicMock
    ) -> None:
        """Test that the context manager verifies the connection and closes it."""
        async with opensearch_client as client:
            assert client is opensearch_client
            mock_opensearch_client.info.assert_awaited_once()
            mock_opensearch_client.close.assert_not_awaited()

        mock_opensearch_client.close.assert_awaited_once()

    def test_entity_database(self, opensearch_client: OpenSearchClient, mock_opensearch_client: MagicMock) -> None:
        """Test that entity databases share the client's connection."""
        entity_db = opensearch_client.entity_database(index="People", category="Person")

        assert isinstance(entity_db, EntityRepository)
        assert entity_db.index == "people"
        assert entity_db.category == "person"
        assert entity_db.entity_class is Entity
        assert entity_db._client is mock_opensearch_client
