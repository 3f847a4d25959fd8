# backend/service_booking/core/exceptions.py
"""
Domain-specific exceptions for the service booking platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
Each carries a stable ``code`` naming the error kind so the presentation
layer never has to parse messages.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException using the class status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code or "NotFound", details=details)


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    """Raised when the caller is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when the caller lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific booking exceptions


class InsufficientLeadTimeException(BusinessRuleException):
    """Raised when a booking doesn't meet the minimum advance notice."""

    def __init__(self, required_hours: int, provided_hours: float):
        super().__init__(
            message=f"Bookings must be made at least {required_hours} hours in advance",
            code="InsufficientLeadTime",
            details={
                "required_hours": required_hours,
                "provided_hours": round(provided_hours, 2),
            },
        )


class SlotConflictException(ConflictException):
    """Raised when the provider already has a booking at that instant."""

    def __init__(self, provider_id: str, scheduled_at: datetime):
        super().__init__(
            message="The provider already has a booking at this time",
            code="SlotConflict",
            details={
                "provider_id": provider_id,
                "scheduled_at": scheduled_at.isoformat(),
            },
        )


class RoleMismatchException(BusinessRuleException):
    """Raised when a booking participant lacks the role it is booked under."""

    def __init__(self, user_id: str, required_role: str):
        super().__init__(
            message=f"User {user_id} does not hold the {required_role} role",
            code="RoleMismatch",
            details={"user_id": user_id, "required_role": required_role},
        )


class ServiceNotOfferedException(BusinessRuleException):
    """Raised when a provider does not offer the requested service."""

    def __init__(self, provider_id: str, service_id: str):
        super().__init__(
            message="The provider does not offer this service",
            code="ServiceNotOffered",
            details={"provider_id": provider_id, "service_id": service_id},
        )


class CancellationWindowExpiredException(BusinessRuleException):
    """Raised when a cancellation arrives too close to the appointment."""

    def __init__(self, required_hours: int, remaining_hours: float):
        super().__init__(
            message=f"Bookings can only be cancelled up to {required_hours} hours in advance",
            code="CancellationWindowExpired",
            details={
                "required_hours": required_hours,
                "remaining_hours": round(remaining_hours, 2),
            },
        )


class MissingCancellationReasonException(ValidationException):
    """Raised when a cancellation is requested without a reason."""

    def __init__(self) -> None:
        super().__init__(
            message="A cancellation reason is required",
            code="MissingCancellationReason",
        )


class IllegalTransitionException(BusinessRuleException):
    """Raised when a status change is not reachable from the current status."""

    def __init__(self, current: str, requested: str):
        super().__init__(
            message=f"Cannot change booking status from {current} to {requested}",
            code="IllegalTransition",
            details={"current_status": current, "requested_status": requested},
        )


class AccessDeniedException(ForbiddenException):
    """Raised when the acting actor may not touch the booking."""

    def __init__(self, message: str = "You don't have permission to access this booking"):
        super().__init__(message=message, code="AccessDenied")


class InvalidStatusException(ValidationException):
    """Raised when a status code or label does not name a booking status."""

    def __init__(self, value: Any):
        super().__init__(
            message=f"Invalid booking status: {value!r}",
            code="InvalidStatus",
            details={"value": value},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
