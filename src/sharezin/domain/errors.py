"""Domain exceptions used across API and services."""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any


def compose_error_message(*, cause: str, action: str) -> str:
    """Build a user-facing error message with cause and corrective action."""

    return f"Cause: {cause} Action: {action}"


@dataclass(slots=True)
class DomainError(Exception):
    """Base exception for predictable domain failures."""

    code: str
    message: str
    status_code: int
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


class InvalidRequestError(DomainError):
    """Raised when user sends semantically invalid input."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="INVALID_REQUEST",
            message=message
            or compose_error_message(
                cause="Request data violates business rules.",
                action="Adjust the input fields and try again.",
            ),
            status_code=HTTPStatus.BAD_REQUEST,
            details=details or {},
        )


class ForbiddenError(DomainError):
    """Raised when the acting user lacks rights for an operation."""

    def __init__(
        self,
        code: str = "FORBIDDEN",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message or "you are not allowed to perform this action",
            status_code=HTTPStatus.FORBIDDEN,
            details=details or {},
        )


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist in the receipt."""

    def __init__(
        self,
        code: str = "NOT_FOUND",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message or "resource not found",
            status_code=HTTPStatus.NOT_FOUND,
            details=details or {},
        )


class ConflictError(DomainError):
    """Raised when a transition is not valid from the current state."""

    def __init__(
        self,
        code: str = "CONFLICT",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message or "operation conflicts with the current state",
            status_code=HTTPStatus.CONFLICT,
            details=details or {},
        )


class ReceiptNotFoundError(NotFoundError):
    """Raised when a receipt id or invite code cannot be resolved."""

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="RECEIPT_NOT_FOUND",
            message="receipt not found",
            details=details,
        )


class DomainInvariantError(DomainError):
    """Raised when fixed domain assumptions are violated."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="DOMAIN_INVARIANT_VIOLATION",
            message=message
            or compose_error_message(
                cause="A required domain invariant is not satisfied.",
                action="Verify base data setup and retry the operation.",
            ),
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            details=details or {},
        )


class AuthenticationRequiredError(DomainError):
    """Raised when a request does not identify the acting user."""

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="AUTHENTICATION_REQUIRED",
            message=compose_error_message(
                cause="The acting user is not identified.",
                action="Send the X-User-Id header and retry.",
            ),
            status_code=HTTPStatus.UNAUTHORIZED,
            details=details or {},
        )
