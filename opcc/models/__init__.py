from opcc.models.card import (
    CardCounts,
    CardSearchResult,
    base_card_id,
    card_variant,
    is_parallel,
    is_reprint,
    split_multi_value,
)
from opcc.models.failure import (
    AuthenticationError,
    CountLimitError,
    ErrorResponse,
    FailureKind,
    KnownError,
    SearchFailedError,
    ValidationError,
)

__all__ = [
    "AuthenticationError",
    "CardCounts",
    "CardSearchResult",
    "CountLimitError",
    "ErrorResponse",
    "FailureKind",
    "KnownError",
    "SearchFailedError",
    "ValidationError",
    "base_card_id",
    "card_variant",
    "is_parallel",
    "is_reprint",
    "split_multi_value",
]
