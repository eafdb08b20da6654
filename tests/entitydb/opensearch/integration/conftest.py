"""Pytest fixtures for entity database integration tests."""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio

from entitydb.opensearch.client import OpenSearchClient


@pytest.fixture(scope="session")
def opensearch_host() -> str:
    """Get OpenSearch host from environment."""
    host = os.getenv("OPENSEARCH_HOST")
    if not host:
        pytest.skip("OPENSEARCH_HOST environment variable is not set.")
    return host


@pytest.fixture(scope="session")
def opensearch_port() -> int:
    """Get OpenSearch port from environment."""
    port_str = os.getenv("OPENSEARCH_PORT", "9200")
    try:
        return int(port_str)
    except ValueError:
        raise ValueError(f"OPENSEARCH_PORT must be a valid integer, got: {port_str}") from None


@pytest_asyncio.fixture
async def opensearch(opensearch_host: str, opensearch_port: int) -> AsyncGenerator[OpenSearchClient, None]:
    """
    Create a real OpenSearchClient instance for integration tests.

    Entering the client fetches cluster info, so the fixture fails fast when
    the store is unreachable. It does NOT use mocks.
    """
    async with OpenSearchClient(host=opensearch_host, port=opensearch_port) as client:
        print(f"\n[Integration Test] Connected to OpenSearch instance at {opensearch_host}:{opensearch_port}")
        yield client
