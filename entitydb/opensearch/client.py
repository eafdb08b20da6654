import os
import re
from typing import Any, Self

from opensearchpy import AsyncOpenSearch

from entitydb.logging import LogLevel, get_logger
from entitydb.opensearch.entities.entity import Entity
from entitydb.opensearch.exceptions import translate_store_errors
from entitydb.opensearch.repositories import EntityRepository, IndexRepository
from entitydb.opensearch.services.search_service import SearchService

logger = get_logger(__name__)


class OpenSearchClient:
    def __init__(
        self,
        *,
        host: str,
        port: int = 9200,
        use_ssl: bool = False,
        verify_certs: bool = False,
        timeout: int = 60,
    ) -> None:
        """Initialize the document store client."""
        self._host = re.sub(r"^https?://", "", host)
        self._port = port
        self._use_ssl = use_ssl
        self._verify_certs = verify_certs
        self._timeout = timeout
        self._client = self._connect()

        # Initialize repository classes
        self.indexes = IndexRepository(client=self._client)

        # Initialize service classes
        self.search = SearchService(client=self._client)

    @classmethod
    def from_env(cls, **overrides: Any) -> Self:
        """Create a client from OPENSEARCH_HOST, OPENSEARCH_PORT and OPENSEARCH_USE_SSL.

        Raises:
            ValueError: If OPENSEARCH_HOST is not set or OPENSEARCH_PORT is not an integer
        """
        host = os.getenv("OPENSEARCH_HOST")
        if not host:
            raise ValueError("OPENSEARCH_HOST environment variable is not set.")

        port_str = os.getenv("OPENSEARCH_PORT", "9200")
        try:
            port = int(port_str)
        except ValueError:
            raise ValueError(f"OPENSEARCH_PORT must be a valid integer, got: {port_str}") from None

        use_ssl = os.getenv("OPENSEARCH_USE_SSL", "false").lower() in ("1", "true", "yes")
        return cls(**{"host": host, "port": port, "use_ssl": use_ssl, **overrides})

    def _connect(self) -> AsyncOpenSearch:
        # The async client opens connections lazily, on the first request
        return AsyncOpenSearch(
            hosts=[{"host": self._host, "port": self._port}],
            http_compress=True,
            use_ssl=self._use_ssl,
            verify_certs=self._verify_certs,
            ssl_assert_hostname=False,
            ssl_show_warn=False,
            timeout=self._timeout,
        )

    async def info(self) -> dict[str, Any]:
        """Fetch cluster info, verifying the store is reachable."""
        async with translate_store_errors():
            info = await self._client.info()
        logger.info("Connected to OpenSearch cluster: %s", info["cluster_name"])
        return info

    async def close(self) -> None:
        """Release the client's connections."""
        await self._client.close()

    async def __aenter__(self) -> Self:
        await self.info()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()

    def entity_database[T: Entity](
        self,
        *,
        index: str,
        category: str | None = None,
        entity_class: type[T] = Entity,  # type: ignore[assignment]
        log_level: str | LogLevel = LogLevel.WARNING,
    ) -> EntityRepository[T]:
        """Create an entity database bound to an index and default category."""
        return EntityRepository(
            client=self._client,
            index=index,
            category=category,
            entity_class=entity_class,
            log_level=log_level,
        )
