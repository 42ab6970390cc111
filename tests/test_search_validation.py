"""Tests for search request validation."""

import pytest

from opcc.config import settings
from opcc.models.failure import FailureKind, ValidationError
from opcc.search.validation import SearchRequest, validate_search_request


def _code(excinfo: pytest.ExceptionInfo[ValidationError]) -> str:
    return excinfo.value.code


class TestValidateSearchRequest:
    def test_trims_keyword(self) -> None:
        """Surrounding whitespace is removed."""
        request = validate_search_request("  zoro  ")

        assert request == SearchRequest(keyword="zoro")

    def test_missing_keyword(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            validate_search_request(None)

        assert _code(excinfo) == "INVALID_KEYWORD"
        assert excinfo.value.status_code == 400
        assert excinfo.value.kind == FailureKind.INVALID_INPUT

    def test_blank_keyword(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            validate_search_request("   ")

        assert _code(excinfo) == "EMPTY_KEYWORD"

    def test_blank_keyword_allowed_when_browsing_collection(self) -> None:
        """An ownership flag turns an empty keyword into a collection browse."""
        request = validate_search_request("", owned_only="true")

        assert request.keyword == ""
        assert request.owned_only is True
        assert request.browses_collection

    def test_keyword_too_long(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            validate_search_request("a" * (settings.keyword_max_length + 1))

        assert _code(excinfo) == "KEYWORD_TOO_LONG"

    def test_keyword_at_max_length(self) -> None:
        request = validate_search_request("a" * settings.keyword_max_length)

        assert len(request.keyword) == settings.keyword_max_length

    @pytest.mark.parametrize(
        "keyword",
        ['exact:"rush', 'zoro pack:"OP 01', 'id:"ST01 color:red', 'COLOR:"red'],
    )
    def test_unterminated_facet_quote(self, keyword: str) -> None:
        with pytest.raises(ValidationError) as excinfo:
            validate_search_request(keyword)

        assert _code(excinfo) == "MALFORMED_FACET_SYNTAX"

    def test_balanced_quotes_accepted(self) -> None:
        request = validate_search_request('exact:"rush" pack:"OP 01"')

        assert request.keyword == 'exact:"rush" pack:"OP 01"'

    @pytest.mark.parametrize("keyword", ['exact:""', "exact:", "zoro exact: color:red"])
    def test_empty_exact_term(self, keyword: str) -> None:
        with pytest.raises(ValidationError) as excinfo:
            validate_search_request(keyword)

        assert _code(excinfo) == "EMPTY_EXACT_TERM"

    def test_invalid_owned_only(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            validate_search_request("zoro", owned_only="yes")

        assert _code(excinfo) == "INVALID_OWNED_ONLY"

    def test_invalid_show_proxies(self) -> None:
        with pytest.raises(ValidationError) as excinfo:
            validate_search_request("zoro", show_proxies="1")

        assert _code(excinfo) == "INVALID_SHOW_PROXIES"

    def test_flags_parsed(self) -> None:
        request = validate_search_request("zoro", owned_only="false", show_proxies="true")

        assert request.owned_only is False
        assert request.show_proxies is True
