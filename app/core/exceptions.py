"""
Custom Exception Classes for the Application
Provides a unified error handling system with proper HTTP status codes and messages.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class AppException(HTTPException):
    """
    Base exception class for all application exceptions.
    Provides consistent error response format.
    """

    def __init__(
        self,
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(
            status_code=status_code,
            detail={
                "error_code": error_code,
                "message": message,
                "details": self.details,
            },
            headers=headers,
        )


# ==================== Authentication Exceptions ====================


class AuthenticationException(AppException):
    """Base class for authentication-related exceptions."""

    def __init__(
        self,
        error_code: str = "authentication_failed",
        message: str = "Authentication failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=error_code,
            message=message,
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidCredentialsException(AuthenticationException):
    """Raised when user provides invalid credentials."""

    def __init__(self):
        super().__init__(
            error_code="invalid_credentials",
            message="Invalid email or password",
        )


class InvalidTokenException(AuthenticationException):
    """Raised when the bearer token is missing, malformed or expired."""

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(
            error_code="invalid_token",
            message=message,
        )


# ==================== Authorization Exceptions ====================


class PermissionDeniedException(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(
        self, message: str = "You don't have permission to perform this action"
    ):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="permission_denied",
            message=message,
        )


class OwnershipRequiredException(PermissionDeniedException):
    """Raised when action requires resource ownership."""

    def __init__(self, resource: str):
        super().__init__(
            message=f"You must be the owner of this {resource} to perform this action"
        )


# ==================== Resource Exceptions ====================


class ResourceNotFoundException(AppException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Optional[Any] = None):
        details = {}
        if identifier is not None:
            details["identifier"] = str(identifier)

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="resource_not_found",
            message=f"{resource} not found",
            details=details,
        )


class ResourceAlreadyExistsException(AppException):
    """Raised when trying to create a resource that already exists."""

    def __init__(self, resource: str, field: Optional[str] = None):
        details = {}
        if field:
            details["field"] = field

        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error_code="resource_already_exists",
            message=f"{resource} already exists",
            details=details,
        )


# ==================== Validation Exceptions ====================


class ValidationException(AppException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {}
        if field:
            details["field"] = field

        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="validation_error",
            message=message,
            details=details,
        )


# ==================== Business Logic Exceptions ====================


class BusinessLogicException(AppException):
    """Base class for business logic exceptions."""

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        super().__init__(
            status_code=status_code,
            error_code=error_code,
            message=message,
            details=details,
        )


class DuplicateEnrollmentException(BusinessLogicException):
    """Raised when a user tries to enroll twice in the same course."""

    def __init__(self, course_id: Any):
        super().__init__(
            error_code="duplicate_enrollment",
            message="You are already enrolled in this course",
            details={"course_id": str(course_id)},
            status_code=status.HTTP_409_CONFLICT,
        )


class InvalidPaymentTypeException(BusinessLogicException):
    """Raised when an approval names a payment kind the gate does not handle."""

    def __init__(self, payment_type: Any):
        super().__init__(
            error_code="invalid_payment_type",
            message="Invalid payment type",
            details={"type": str(payment_type)},
        )


class DatabaseException(AppException):
    """Raised when database operation fails."""

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="database_error",
            message=message,
        )


# ==================== Helper Functions ====================


def raise_not_found(resource: str, identifier: Optional[Any] = None):
    """Helper function to raise ResourceNotFoundException."""
    raise ResourceNotFoundException(resource, identifier)


def raise_validation_error(message: str, field: Optional[str] = None):
    """Helper function to raise ValidationException."""
    raise ValidationException(message, field)
