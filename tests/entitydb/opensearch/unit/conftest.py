"""Pytest fixtures for entity database unit tests."""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from entitydb.opensearch.client import OpenSearchClient


@pytest.fixture
def mock_opensearch_client() -> MagicMock:
    """Create a mock async OpenSearch client."""
    mock_client_instance = MagicMock()

    # Mock the info() call used to verify connectivity
    mock_client_instance.info = AsyncMock(return_value={"cluster_name": "test-cluster"})
    mock_client_instance.close = AsyncMock()

    # Raw requests go through the transport
    mock_client_instance.transport = MagicMock()
    mock_client_instance.transport.perform_request = AsyncMock()

    # Mock the bulk method
    mock_client_instance.bulk = AsyncMock()

    # Mock the indices attribute for index operations
    mock_client_instance.indices = MagicMock()
    for name in ("create", "delete", "exists", "get", "refresh"):
        setattr(mock_client_instance.indices, name, AsyncMock())

    return mock_client_instance


@pytest.fixture
def opensearch_client(mock_opensearch_client: MagicMock) -> Generator[OpenSearchClient, None, None]:
    """Create an OpenSearchClient instance with a mocked AsyncOpenSearch."""
    with patch("entitydb.opensearch.client.AsyncOpenSearch") as mock_opensearch_class:
        mock_opensearch_class.return_value = mock_opensearch_client

        client = OpenSearchClient(host="test-host.example.com", port=9200)

        yield client


@pytest.fixture
def perform_request(mock_opensearch_client: MagicMock) -> AsyncMock:
    """Shortcut to the mocked transport request method."""
    return mock_opensearch_client.transport.perform_request
