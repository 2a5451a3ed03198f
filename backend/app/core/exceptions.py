"""
Custom exception hierarchy for structured error handling.

WHY: Custom exceptions provide:
1. Consistent error handling across the API
2. HTTP status code mapping for FastAPI
3. Structured error responses with contextual data
4. A single place to look up what each failure means for the caller

IMPORTANT: NEVER raise the base Exception class. Always use custom exceptions.
"""

from typing import Any, Dict, Optional


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    WHY: Centralizing exception handling in a base class ensures consistent
    error responses and HTTP status code mapping.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            status_code: HTTP status code (overrides class default)
            **context: Additional context for debugging (filtered in to_dict)
        """
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize exception to dictionary for JSON response.

        Returns:
            Dictionary with error details (sensitive fields filtered out)
        """
        sensitive_fields = {"password", "token", "secret", "key", "api_key"}
        filtered_context = {
            k: v for k, v in self.context.items() if k.lower() not in sensitive_fields
        }

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": filtered_context if filtered_context else None,
        }


# ============================================================================
# Validation & Input Exceptions
# ============================================================================


class ValidationError(AppException):
    """
    Raised when input validation fails.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Validation failed"


# ============================================================================
# Resource Exceptions
# ============================================================================


class ResourceNotFoundError(AppException):
    """
    Raised when a requested resource doesn't exist.

    WHY: Including resource type and ID in context helps debugging.

    HTTP Status: 404 Not Found
    """

    status_code = 404
    default_message = "Resource not found"


class ResourceAlreadyExistsError(AppException):
    """
    Raised when attempting to create a resource that already exists.

    HTTP Status: 409 Conflict
    """

    status_code = 409
    default_message = "Resource already exists"


class CustomerNotFoundError(ResourceNotFoundError):
    """Raised when a customer doesn't exist."""

    default_message = "Customer not found"


class DealNotFoundError(ResourceNotFoundError):
    """Raised when a deal doesn't exist."""

    default_message = "Deal not found"


class DealStageNotFoundError(ResourceNotFoundError):
    """Raised when a deal stage doesn't exist."""

    default_message = "Deal stage not found"


class ProposalNotFoundError(ResourceNotFoundError):
    """Raised when a proposal doesn't exist."""

    default_message = "Proposal not found"


class InvoiceNotFoundError(ResourceNotFoundError):
    """Raised when an invoice doesn't exist."""

    default_message = "Invoice not found"


class ActivityNotFoundError(ResourceNotFoundError):
    """Raised when an activity doesn't exist."""

    default_message = "Activity not found"


class ContactNotFoundError(ResourceNotFoundError):
    """Raised when a contact doesn't exist."""

    default_message = "Contact not found"


class ProductNotFoundError(ResourceNotFoundError):
    """Raised when a product doesn't exist."""

    default_message = "Product not found"


# ============================================================================
# Business Logic Exceptions
# ============================================================================


class BusinessRuleViolation(AppException):
    """
    Raised when a business rule is violated.

    WHY: Business rules (e.g., "deal value is derived once proposals exist")
    are different from validation errors. 422 Unprocessable Entity indicates
    the request was well-formed but semantically incorrect.

    HTTP Status: 422 Unprocessable Entity
    """

    status_code = 422
    default_message = "Business rule violation"


class InvalidStateTransitionError(BusinessRuleViolation):
    """
    Raised when an invalid state transition is attempted.

    WHY: Proposal and invoice statuses form small state machines.
    Attempting an invalid transition (e.g., sending an accepted proposal)
    should fail with a clear error message.

    HTTP Status: 400 Bad Request
    """

    status_code = 400
    default_message = "Invalid state transition"


# ============================================================================
# Deal Valuation Exceptions
# ============================================================================


class AggregationReadError(AppException):
    """
    Raised when a deal's proposals cannot be read for recalculation.

    WHY: The deal's value fields are derived from its proposals. If the
    read fails we must not write anything, otherwise the deal would be
    zeroed out. The caller is expected to retry the operation explicitly.

    HTTP Status: 503 Service Unavailable
    """

    status_code = 503
    default_message = "Could not read proposals to recalculate deal value"


# ============================================================================
# CSV Import Exceptions
# ============================================================================


class CsvImportError(AppException):
    """Base class for CSV import failures."""

    status_code = 400
    default_message = "Import failed"


class StructuralImportError(CsvImportError):
    """
    Raised when the CSV file as a whole cannot be imported.

    WHY: An empty file or a header missing required columns makes every
    row meaningless, so the import stops before any row is processed.

    HTTP Status: 400 Bad Request
    """

    default_message = "CSV file is invalid"


class RowValidationError(CsvImportError):
    """
    Raised for a single CSV row that fails validation or FK resolution.

    WHY: Row errors are collected into the import result and never abort
    the batch. The message already carries the row number.
    """

    default_message = "Row is invalid"

    def __init__(self, row_number: int, reason: str, **context: Any):
        self.row_number = row_number
        self.reason = reason
        super().__init__(message=f"Row {row_number}: {reason}", row=row_number, **context)


class DuplicateError(RowValidationError, ResourceAlreadyExistsError):
    """
    Raised when a row's natural key collides with an existing record.

    HTTP Status: 409 Conflict
    """

    status_code = 409
    default_message = "Record already exists"
