"""
Custom exception classes for the application.

Each family maps onto one HTTP status in `bidproxy.main`:
NotFoundError -> 404, ForbiddenError -> 403, ValidationError -> 400,
AuthenticationError -> 401, PaymentGatewayError -> 500.
"""

from typing import Any


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


# Authentication errors
class AuthenticationError(AppError):
    """Raised when the caller cannot be authenticated."""

    def __init__(
        self,
        message: str = "Authentication failed",
        code: str = "AUTH_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class InvalidTokenError(AuthenticationError):
    """Raised when a token is invalid."""

    def __init__(
        self,
        message: str = "Invalid token",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, "INVALID_TOKEN", details)


class TokenExpiredError(AuthenticationError):
    """Raised when a token has expired."""

    def __init__(
        self,
        message: str = "Token has expired",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, "TOKEN_EXPIRED", details)


# Authorization errors
class ForbiddenError(AppError):
    """Raised when the caller may not perform the operation."""

    def __init__(
        self,
        message: str = "Forbidden",
        code: str = "FORBIDDEN",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class AccountDeactivatedError(ForbiddenError):
    """Raised when a deactivated account tries to use the service."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            "Account is deactivated",
            "ACCOUNT_DEACTIVATED",
            {"user_id": user_id},
        )


class BidOwnershipError(ForbiddenError):
    """Raised when a customer touches a bid owned by someone else."""

    def __init__(self, bid_id: str) -> None:
        super().__init__("Forbidden", "BID_NOT_OWNED", {"bid_id": bid_id})


# Lookup errors
class NotFoundError(AppError):
    """Raised when a requested entity does not exist."""

    def __init__(
        self,
        message: str = "Not found",
        code: str = "NOT_FOUND",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class UserNotFoundError(NotFoundError):
    """Raised when a user is not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__("User not found", "USER_NOT_FOUND", {"user_id": user_id})


class EmployeeNotFoundError(NotFoundError):
    """Raised when an employee account is not found."""

    def __init__(self, employee_id: str) -> None:
        super().__init__(
            "Employee not found",
            "EMPLOYEE_NOT_FOUND",
            {"employee_id": employee_id},
        )


class BidNotFoundError(NotFoundError):
    """Raised when a bid is not found."""

    def __init__(self, bid_id: str) -> None:
        self.bid_id = bid_id
        super().__init__("Bid not found", "BID_NOT_FOUND", {"bid_id": bid_id})


# Validation errors
class ValidationError(AppError):
    """Raised when business validation fails (distinct from pydantic ValidationError)."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        code: str = "VALIDATION_ERROR",
    ) -> None:
        super().__init__(message, code, details)


class BidStateError(ValidationError):
    """Raised when an operation is not allowed in the bid's current state."""

    def __init__(
        self,
        message: str,
        bid_id: str,
        current_status: str,
        **details: Any,
    ) -> None:
        self.bid_id = bid_id
        self.current_status = current_status
        super().__init__(
            message,
            {"bid_id": bid_id, "current_status": current_status, **details},
            code="INVALID_BID_STATE",
        )


# External service errors
class PaymentGatewayError(AppError):
    """Raised when the payment processor is unreachable or rejects a call.

    The message is logged; clients only ever see a generic failure.
    """

    def __init__(
        self,
        message: str = "Payment gateway error",
        provider_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, "PAYMENT_GATEWAY_ERROR", details)
        self.provider_code = provider_code
