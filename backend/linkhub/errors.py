"""Error taxonomy shared by the resource store and the upload orchestrator."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure categories callers can switch on."""

    VALIDATION = "validation"
    DUPLICATE_SLUG = "duplicate_slug"
    NOT_FOUND = "not_found"
    IMMUTABLE = "immutable"
    CONSISTENCY = "consistency"
    STORAGE_GATEWAY = "storage_gateway"
    TRANSACTION = "transaction"


class ResourceError(Exception):
    """Base error carrying a kind and, optionally, the underlying cause."""

    kind: ErrorKind = ErrorKind.TRANSACTION

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"


class ValidationError(ResourceError):
    """Raised when input is malformed; never reaches storage."""

    kind = ErrorKind.VALIDATION


class DuplicateSlugError(ResourceError):
    kind = ErrorKind.DUPLICATE_SLUG


class NotFoundError(ResourceError):
    kind = ErrorKind.NOT_FOUND


class ImmutabilityViolation(ResourceError):
    """Raised on attempts to change type, created_at or file content."""

    kind = ErrorKind.IMMUTABLE


class ConsistencyViolation(ResourceError):
    """Unexpected affected-row count or a missing sub-row: a defect, not user error."""

    kind = ErrorKind.CONSISTENCY


class StorageGatewayError(ResourceError):
    kind = ErrorKind.STORAGE_GATEWAY


class TransactionError(ResourceError):
    """A multi-statement write failed and was rolled back."""

    kind = ErrorKind.TRANSACTION


__all__ = [
    "ErrorKind",
    "ResourceError",
    "ValidationError",
    "DuplicateSlugError",
    "NotFoundError",
    "ImmutabilityViolation",
    "ConsistencyViolation",
    "StorageGatewayError",
    "TransactionError",
]
