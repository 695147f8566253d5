"""Error hierarchy for the shop graph.

Every error carries a code, a category and the HTTP status the dispatch layer
maps it to. A missing root entity is not an error: loaders return ``None``.
"""

from enum import Enum


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    INTEGRITY = "integrity"
    DATABASE = "database"
    INTERNAL = "internal"


class ShopGraphError(Exception):
    """Base exception for all shop graph errors."""

    def __init__(self, message: str, code: str, category: ErrorCategory, http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status

    @property
    def public_message(self) -> str:
        # Only validation messages are safe to echo back to callers
        if self.category == ErrorCategory.VALIDATION:
            return self.message
        return "The request could not be completed"

    def to_response(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.public_message,
                "category": self.category.value,
            }
        }


class QueryValidationError(ShopGraphError):
    """The requested selection names a field the entity does not have."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, "INVALID_QUERY", ErrorCategory.VALIDATION, 400)
        self.field = field


class ReferentialIntegrityError(ShopGraphError):
    """A required back-reference points at a row that does not exist."""

    def __init__(self, relation: str, missing_id: int | None, referenced_by: str | None = None):
        row = f"{relation} row {missing_id}" if missing_id is not None else f"a {relation} row"
        detail = f" (referenced by {referenced_by})" if referenced_by else ""
        super().__init__(
            f"{row} does not exist{detail}",
            "REFERENTIAL_INTEGRITY", ErrorCategory.INTEGRITY, 500,
        )
        self.relation = relation
        self.missing_id = missing_id


class StorageError(ShopGraphError):
    """The relational store failed to answer a lookup."""

    def __init__(self, message: str, operation: str):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.DATABASE, 503,
        )
        self.operation = operation
