# backend/drivigo/core/exceptions.py
"""
Domain-specific exceptions for the Drivigo platform.

Services raise these with messages that are safe to show to end users;
routes convert them to HTTP errors with ``to_http_exception()``.
"""

from typing import Any, Dict, NoReturn, Optional

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


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"WWW-Authenticate": "Bearer"}
        return exc


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def __init__(
        self,
        message: str = "An error occurred processing your request",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code, details)


# Specific business exceptions


class InvalidPaymentSignatureException(ValidationException):
    """Raised when a gateway callback signature does not match."""

    def __init__(self, order_id: Optional[str] = None):
        super().__init__(
            message="Invalid signature sent!",
            code="INVALID_PAYMENT_SIGNATURE",
            details={"order_id": order_id} if order_id else {},
        )


class PaymentGatewayException(ServiceException):
    """Raised when the payment gateway cannot be reached or rejects a call."""


class TemplateNotFoundException(NotFoundException):
    """Raised when no active notification template exists for a type."""

    def __init__(self, template_name: str):
        super().__init__(
            message=f"Template not found for type: {template_name}",
            code="TEMPLATE_NOT_FOUND",
            details={"template_name": template_name},
        )


class NotificationDeliveryException(ServiceException):
    """Raised by a single delivery channel; callers record it per channel."""


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Wraps SQLAlchemy failures such as connection issues, query errors, or
    constraint violations.
    """


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()
