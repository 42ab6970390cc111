"""
Failure classification for API responses.

Every user-visible failure is raised as a KnownError subclass and
rendered by a single exception handler in opcc.main. The payload always
carries a fixed, user-appropriate message and a stable machine code.

INVARIANT: No raw store or driver error text reaches the caller.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Identity failures
    UNAUTHENTICATED = "unauthenticated"

    # Resource failures
    NOT_FOUND = "not_found"

    # Constraint violations
    CONSTRAINT_VIOLATION = "constraint_violation"

    # Internal errors
    INTERNAL_ERROR = "internal_error"


class ErrorResponse(BaseModel):
    """JSON body returned for every failed request."""

    error: str = Field(..., description="User-appropriate explanation")
    message: str = Field(..., description="Same as error, kept for older clients")
    code: str = Field(..., description="Stable machine-readable code")
    kind: FailureKind


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    `detail` is for server-side logs only and is never sent to the caller.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        code: str,
        detail: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.code = code
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        """Convert to the JSON body sent to the caller."""
        return ErrorResponse(
            error=self.message,
            message=self.message,
            code=self.code,
            kind=self.kind,
        ).model_dump(mode="json")


class ValidationError(KnownError):
    """Request input failed validation."""

    def __init__(self, message: str, code: str):
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            code=code,
            status_code=400,
        )


class AuthenticationError(KnownError):
    """Caller identity is missing or cannot be trusted."""

    def __init__(self, message: str, code: str):
        super().__init__(
            kind=FailureKind.UNAUTHENTICATED,
            message=message,
            code=code,
            status_code=401,
        )


class CountLimitError(KnownError):
    """
    Raised when a collection update would leave a card count outside [0, 99].

    The count is left untouched; the transaction is rolled back by the caller.
    """

    def __init__(self, card_id: str, current: int, message: str, code: str):
        self.card_id = card_id
        self.current = current
        super().__init__(
            kind=FailureKind.CONSTRAINT_VIOLATION,
            message=message,
            code=code,
            detail=f"card_id={card_id} current={current}",
            status_code=400,
        )


class SearchFailedError(KnownError):
    """
    Raised when the catalog store cannot answer a search.

    Always a generic 500. The underlying driver error is logged, not returned.
    """

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INTERNAL_ERROR,
            message="Internal server error during search",
            code="SEARCH_FAILED",
            detail=detail,
            status_code=500,
        )
