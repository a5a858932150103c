"""
Custom exceptions for the application.
Project: Catering Invoices

Domain exceptions handled centrally by the FastAPI exception handlers.

NOTE: BusinessValidationError is deliberately distinct from pydantic.ValidationError.
- pydantic.ValidationError: malformed request payloads (mapped to 400 by the request handler)
- BusinessValidationError: data that is well-formed but unusable (mapped to 400 by our handler)
"""

from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "NotFoundError",
    "DuplicateError",
    "BusinessValidationError",
    "ValidationError",       # alias of BusinessValidationError
    "InternalError",
]


class AppException(Exception):
    """
    Base exception for the application.

    Attributes:
        status_code: HTTP status code returned to the client
        error_code: Stable identifier of the error for the frontend
        detail: Human readable message
        extra: Additional data for the frontend
    """

    # Default values - overridden in subclasses
    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.detail = detail
        self.error_code = error_code if error_code is not None else self.error_code
        self.extra = extra
        self.status_code = self.__class__.status_code
        super().__init__(detail)


class NotFoundError(AppException):
    """
    Raised when a resource does not exist.

    Used for unknown invoice ids, invoice numbers and customer ids.
    """

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        detail: str = "Resource not found",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class DuplicateError(AppException):
    """
    Raised when creating a resource would break a uniqueness rule.

    Used for invoice numbers, which must be globally unique.
    """

    status_code: int = 409
    error_code: str = "DUPLICATE_RESOURCE"

    def __init__(
        self,
        detail: str = "Resource already exists",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class BusinessValidationError(ValueError, AppException):
    """
    Raised when input data cannot be used.

    Inherits from ValueError so it can be raised inside Pydantic validators.

    Field-level detail goes in ``extra["errors"]`` as a list of
    ``{"loc": [...], "msg": "..."}`` entries, mirroring the shape of
    request validation errors.

    Examples:
        - "customerName is required when no customerId is given"
        - "Line item quantity must be at least 1"
    """

    status_code: int = 400
    error_code: str = "VALIDATION_ERROR"

    def __init__(
        self,
        detail: str = "Data validation failed",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Call AppException.__init__ directly to skip ValueError
        AppException.__init__(self, detail, error_code, extra)


# Compatibility alias
ValidationError = BusinessValidationError


class InternalError(AppException):
    """
    Raised for unexpected failures.

    The detail is logged server-side and never returned to the client.
    """

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        detail: str = "Internal server error",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)
