"""
PartsCatalogue Exception Hierarchy

All domain exceptions raised by repositories, services and routers live here so
that error handling and HTTP status mapping stay in one place.

Architecture:
- Base exception classes for common error types
- Remote store faults (document store / blob store) raised on primary writes
- Best-effort faults that are only ever logged, never surfaced
- Logging and HTTP status helpers used by the exception handlers
"""

import logging
from typing import Any, Dict, Optional, List

logger = logging.getLogger(__name__)


# =============================================================================
# Base Exception Classes
# =============================================================================


class PartsCatalogueException(Exception):
    """Base exception for all PartsCatalogue-related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {"error_code": self.error_code, "message": self.message, "details": self.details}


class ValidationError(PartsCatalogueException):
    """Raised when input validation fails before a mutating operation."""

    def __init__(
        self, message: str, field_errors: Optional[Dict[str, str]] = None, missing_fields: Optional[List[str]] = None
    ):
        super().__init__(message, error_code="VALIDATION_ERROR")
        self.field_errors = field_errors or {}
        self.missing_fields = missing_fields or []

        if field_errors or missing_fields:
            self.details.update({"field_errors": self.field_errors, "missing_fields": self.missing_fields})


class ResourceNotFoundError(PartsCatalogueException):
    """Raised when a requested resource is not found."""

    def __init__(self, message: str, resource_type: Optional[str] = None, resource_id: Optional[str] = None):
        super().__init__(message, error_code="RESOURCE_NOT_FOUND")
        self.resource_type = resource_type
        self.resource_id = resource_id

        if resource_type or resource_id:
            self.details.update({"resource_type": resource_type, "resource_id": resource_id})


class ConfigurationError(PartsCatalogueException):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_field: Optional[str] = None, config_value: Optional[str] = None):
        super().__init__(message, error_code="CONFIGURATION_ERROR")
        self.config_field = config_field
        self.config_value = config_value

        if config_field or config_value:
            self.details.update({"config_field": config_field, "config_value": config_value})


class RemoteStoreError(PartsCatalogueException):
    """Raised when a call to a hosted store fails on a primary write path."""

    def __init__(
        self,
        message: str,
        store: Optional[str] = None,
        path: Optional[str] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message, error_code=error_code or "REMOTE_STORE_ERROR")
        self.store = store
        self.path = path

        if store or path:
            self.details.update({"store": store, "path": path})


# =============================================================================
# Domain-Specific Exception Classes
# =============================================================================


class DocumentStoreError(RemoteStoreError):
    """Raised when a document store write fails."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, store="document", path=path, error_code="DOCUMENT_STORE_ERROR")


class BlobStoreError(RemoteStoreError):
    """Raised when a blob store upload, download or URL lookup fails."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, store="blob", path=path, error_code="BLOB_STORE_ERROR")


class PartNotFoundError(ResourceNotFoundError):
    """Raised when a part is not found."""

    def __init__(self, message: str, material: Optional[str] = None):
        super().__init__(message, resource_type="part", resource_id=material)


class ApplicationNotFoundError(ResourceNotFoundError):
    """Raised when a part application is not found."""

    def __init__(self, message: str, application_id: Optional[str] = None):
        super().__init__(message, resource_type="part_application", resource_id=application_id)


class InvalidStatusTransitionError(PartsCatalogueException):
    """Raised when an application status change is not pending->approved or pending->rejected."""

    def __init__(self, message: str, application_id: Optional[str] = None,
                 current_status: Optional[str] = None, requested_status: Optional[str] = None):
        super().__init__(message, error_code="INVALID_STATUS_TRANSITION")
        self.application_id = application_id
        self.current_status = current_status
        self.requested_status = requested_status

        self.details.update({
            "application_id": application_id,
            "current_status": current_status,
            "requested_status": requested_status,
        })


class ImageRehomingError(PartsCatalogueException):
    """
    Raised inside the image re-homing step.

    Never propagated past ImageRehomingService; it only exists so the failure
    can be logged with a consistent error code.
    """

    def __init__(self, message: str, source_key: Optional[str] = None, destination_key: Optional[str] = None):
        super().__init__(message, error_code="IMAGE_REHOMING_ERROR")
        self.source_key = source_key
        self.destination_key = destination_key

        if source_key or destination_key:
            self.details.update({"source_key": source_key, "destination_key": destination_key})


# =============================================================================
# Exception Logging Helpers
# =============================================================================


def log_exception(exception: Exception, context: str = None, extra_info: Optional[Dict[str, Any]] = None):
    """
    Centralized exception logging with consistent format.

    Args:
        exception: The exception to log
        context: Additional context about where the exception occurred
        extra_info: Additional information to include in the log
    """
    if isinstance(exception, PartsCatalogueException):
        log_data = {
            "error_code": exception.error_code,
            "error_message": exception.message,  # LogRecord already owns "message"
            "details": exception.details,
            "context": context,
        }

        if extra_info:
            log_data.update(extra_info)

        logger.error(f"PartsCatalogue Error: {exception.message}", extra=log_data)
    else:
        log_data = {
            "exception_type": type(exception).__name__,
            "error_message": str(exception),
            "context": context,
        }

        if extra_info:
            log_data.update(extra_info)

        logger.error(f"Unexpected Error: {str(exception)}", extra=log_data)


def get_http_status_code(exception: Exception) -> int:
    """
    Get appropriate HTTP status code for an exception.
    """
    if isinstance(exception, ValidationError):
        return 422  # Unprocessable Entity
    elif isinstance(exception, ResourceNotFoundError):
        return 404  # Not Found
    elif isinstance(exception, InvalidStatusTransitionError):
        return 409  # Conflict
    elif isinstance(exception, ConfigurationError):
        return 500  # Internal Server Error
    elif isinstance(exception, RemoteStoreError):
        return 503  # Service Unavailable
    elif isinstance(exception, PartsCatalogueException):
        return 400  # Bad Request (default for application errors)
    else:
        return 500
