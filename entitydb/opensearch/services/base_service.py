from opensearchpy import AsyncOpenSearch


class BaseService:
    """Base service for the document store."""

    _client: AsyncOpenSearch

    def __init__(self, *, client: AsyncOpenSearch) -> None:
        self._client = client
