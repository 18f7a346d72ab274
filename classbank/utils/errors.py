"""Custom exception hierarchy for the ClassBank API."""

from __future__ import annotations

from decimal import Decimal


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize the error in the API standard shape."""
        return {"error": self.message, "code": self.code}


class InsufficientBalanceError(AppError):
    """Raised when a debit would drive an account balance below zero."""

    def __init__(self, required: Decimal, available: Decimal) -> None:
        self.required = required
        self.available = available
        super().__init__(
            message=f"Insufficient balance: need {required:.2f}, have {available:.2f}",
            code="INSUFFICIENT_BALANCE",
        )


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str) -> None:
        super().__init__(message=f"{resource} not found", code="NOT_FOUND", status_code=404)


class ForbiddenError(AppError):
    """Raised when the user lacks permission for the action."""

    def __init__(self, reason: str = "You don't have permission") -> None:
        super().__init__(message=reason, code="FORBIDDEN", status_code=403)


class ConflictError(AppError):
    """Raised on duplicate/conflicting operations."""

    def __init__(self, reason: str, code: str = "CONFLICT") -> None:
        super().__init__(message=reason, code=code, status_code=409)


class AlreadyResolvedError(ConflictError):
    """Raised when a withdrawal request is no longer pending."""

    def __init__(self, reason: str = "Withdrawal request already resolved") -> None:
        super().__init__(reason, code="ALREADY_RESOLVED")


class UnauthenticatedError(AppError):
    """Raised when the caller is not authenticated."""

    def __init__(self, reason: str = "Unauthenticated") -> None:
        super().__init__(message=reason, code="UNAUTHENTICATED", status_code=401)


class InvalidInputError(AppError):
    """Raised for request payload or parameter validation issues."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="INVALID_INPUT", status_code=422)
