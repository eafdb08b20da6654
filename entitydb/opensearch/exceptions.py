"""Error taxonomy for entity database operations.

Store-level failures raised by ``opensearchpy`` are translated into these
exceptions so callers can tell validation problems, version conflicts and
missing documents apart from store or network faults.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from opensearchpy import exceptions as os_exceptions
from pydantic import ValidationError as PydanticValidationError

INVALID_ARGS = "INVALID_ARGS"
INVALID_OBJ_SCHEMA = "INVALID_OBJ_SCHEMA"
TRANSPORT_ERROR = "TRANSPORT_ERROR"


class EntityDatabaseError(Exception):
    """Base class for entity database errors.

    Every error carries a ``message`` and a ``code``. Store-reported errors use
    the store's HTTP status as the code.
    """

    code: int | str | None = None

    def __init__(
        self,
        message: str,
        *,
        code: int | str | None = None,
        info: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.info = info

    def to_dict(self) -> dict[str, Any]:
        """Normalized ``{message, code}`` shape."""
        return {"message": self.message, "code": self.code}


class ValidationError(EntityDatabaseError):
    """Raised when operation arguments are malformed."""

    code = INVALID_ARGS

    def __init__(self, message: str, *, violations: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.violations = violations or []

    @classmethod
    def from_pydantic(cls, error: PydanticValidationError) -> ValidationError:
        violations = _violations(error)
        return cls(_summarize(violations), violations=violations)


class SchemaError(EntityDatabaseError):
    """Raised when an entity fails its constructor's validation rules."""

    code = INVALID_OBJ_SCHEMA

    def __init__(self, message: str, *, violations: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.violations = violations or []

    @classmethod
    def from_pydantic(cls, error: PydanticValidationError) -> SchemaError:
        violations = _violations(error)
        return cls(_summarize(violations), violations=violations)


class ConflictError(EntityDatabaseError):
    """Raised on a version mismatch or a duplicate identifier."""

    code = 409


class NotFoundError(EntityDatabaseError):
    """Raised when a document does not exist."""

    code = 404


class StoreError(EntityDatabaseError):
    """Raised for any other failure reported by the store."""


class TransportError(EntityDatabaseError):
    """Raised when the store could not be reached."""

    code = TRANSPORT_ERROR


def _violations(error: PydanticValidationError) -> list[dict[str, Any]]:
    return [
        {
            "loc": ".".join(str(part) for part in item["loc"]),
            "msg": item["msg"],
            "type": item["type"],
        }
        for item in error.errors(include_url=False)
    ]


def _summarize(violations: list[dict[str, Any]]) -> str:
    parts = [f"{v['loc']}: {v['msg']}" if v["loc"] else v["msg"] for v in violations]
    return "; ".join(parts) or "validation failed"


def _error_message(error: os_exceptions.TransportError) -> str:
    info = error.info
    if isinstance(info, dict):
        reason = info.get("error")
        if isinstance(reason, dict):
            return str(reason.get("reason") or reason.get("type") or error.error)
        if reason:
            return str(reason)
    return str(error.error)


def _is_missing_document(info: Any) -> bool:
    # Document-level 404s report found=false; index-level ones carry an error body.
    return isinstance(info, dict) and info.get("found") is False


def classify_store_error(
    error: os_exceptions.OpenSearchException, **context: Any
) -> EntityDatabaseError:
    """Map an ``opensearchpy`` exception to the entity database taxonomy.

    Args:
        error: Exception raised by the OpenSearch client
        **context: Request details (index, category, id) attached to not-found errors

    Returns:
        The translated exception; the caller raises it
    """
    if isinstance(error, os_exceptions.ConnectionError):
        return TransportError(f"Failed to reach the document store: {error}")

    if not isinstance(error, os_exceptions.TransportError):
        return StoreError(str(error))

    status = error.status_code
    message = _error_message(error)

    if isinstance(error, os_exceptions.ConflictError) or status == 409:
        return ConflictError(message, code=409, info=error.info)

    if isinstance(error, os_exceptions.NotFoundError) and _is_missing_document(error.info):
        info = {**context, "response": error.info}
        return NotFoundError("Entity does not exist", code=404, info=info)

    return StoreError(message, code=status, info=error.info)


@asynccontextmanager
async def translate_store_errors(**context: Any) -> AsyncIterator[None]:
    """Re-raise store exceptions from the wrapped block as entity database errors."""
    try:
        yield
    except os_exceptions.OpenSearchException as e:
        raise classify_store_error(e, **context) from e
