"""
Error taxonomy for the catalog core.

Each error carries the HTTP status the gateway maps it to, so the Flask error
handlers do not need to know individual exception classes.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any


class CatalogError(Exception):
    """Base class for every controlled error raised by the catalog core."""

    kind = "internal_error"
    http_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(CatalogError):
    kind = "not_found"
    http_code = HTTPStatus.NOT_FOUND


class ValidationFailedError(CatalogError):
    kind = "validation_failed"
    http_code = HTTPStatus.UNPROCESSABLE_ENTITY


class ConflictError(CatalogError):
    kind = "conflict"
    http_code = HTTPStatus.CONFLICT


class BookingConflictError(ConflictError):
    pass


class DuplicateNameError(ConflictError):
    pass


class BookingStateError(ConflictError):
    """Raised when a booking status change is not an allowed transition."""

    def __init__(self, message: str, current_status: str, target_status: str):
        super().__init__(
            message, {"current_status": current_status, "target_status": target_status}
        )
        self.current_status = current_status
        self.target_status = target_status


class BusinessRuleError(CatalogError):
    kind = "business_rule_violation"
    http_code = HTTPStatus.UNPROCESSABLE_ENTITY


class ItemNotBookableError(BusinessRuleError):
    pass


class NoMatchingTierError(BusinessRuleError):
    pass


class OutsideWindowError(BusinessRuleError):
    pass


class InvalidPricingConfigError(BusinessRuleError):
    pass


class AddonMismatchError(BusinessRuleError):
    pass


class StorageError(CatalogError):
    kind = "storage_error"
    http_code = HTTPStatus.INTERNAL_SERVER_ERROR
