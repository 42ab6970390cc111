"""
Search request validation.

Runs before parsing so the parser and compiler can assume well-formed
input: a trimmed, non-empty, length-bounded keyword with balanced quoting
around facet values.
"""

import re
from dataclasses import dataclass

from opcc.config import settings
from opcc.models.failure import ValidationError
from opcc.search.query import FACET_KEYS

_KEYS = "|".join(sorted(FACET_KEYS))
UNTERMINATED_FACET = re.compile(rf'(?<!\S)(?:{_KEYS}):"[^"]*$', re.IGNORECASE)
EMPTY_EXACT = re.compile(r'(?<!\S)exact:(?:""|(?=\s|$))', re.IGNORECASE)

_BOOLEAN_VALUES = ("true", "false")


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """A validated search request."""

    keyword: str
    owned_only: bool = False
    show_proxies: bool = False

    @property
    def browses_collection(self) -> bool:
        """True when an ownership flag is set, which allows an empty keyword."""
        return self.owned_only or self.show_proxies


def _parse_flag(value: str | None, name: str, code: str) -> bool:
    if value is None or value == "":
        return False
    if value not in _BOOLEAN_VALUES:
        raise ValidationError(f"{name} must be 'true' or 'false'.", code)
    return value == "true"


def validate_search_request(
    keyword: str | None,
    owned_only: str | None = None,
    show_proxies: str | None = None,
) -> SearchRequest:
    """
    Validate raw query parameters.

    Raises:
        ValidationError: With a stable code for each rejected shape
    """
    if keyword is None:
        raise ValidationError(
            "Search keyword is required and must be a string.", "INVALID_KEYWORD"
        )

    owned = _parse_flag(owned_only, "ownedOnly", "INVALID_OWNED_ONLY")
    proxies = _parse_flag(show_proxies, "showProxies", "INVALID_SHOW_PROXIES")

    sanitized = keyword.strip()
    if not sanitized and not (owned or proxies):
        raise ValidationError("Search keyword cannot be empty.", "EMPTY_KEYWORD")

    if len(sanitized) > settings.keyword_max_length:
        raise ValidationError("Search keyword is too long.", "KEYWORD_TOO_LONG")

    if UNTERMINATED_FACET.search(sanitized):
        raise ValidationError(
            "Unclosed quotes in search syntax. Please close all quotes.",
            "MALFORMED_FACET_SYNTAX",
        )

    if EMPTY_EXACT.search(sanitized):
        raise ValidationError(
            "Empty exact: search terms are not allowed.", "EMPTY_EXACT_TERM"
        )

    return SearchRequest(keyword=sanitized, owned_only=owned, show_proxies=proxies)
