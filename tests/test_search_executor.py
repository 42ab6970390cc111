"""Tests for search execution and row mapping."""

import logging
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from opcc.config import settings
from opcc.models.failure import SearchFailedError
from opcc.search.compiler import compile_search
from opcc.search.executor import execute_search, row_to_result
from opcc.search.query import parse_search


def _row(**overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": "ST01-013",
        "card_code": "ST01-013",
        "name": "Roronoa Zoro",
        "rarity": "SR",
        "category": "Character",
        "color": "Red",
        "cost": 3,
        "power": 5000,
        "counter": 1000,
        "effect": "[DON!! x1] This Character gains +1000 power.",
        "trigger_effect": None,
        "img_url": None,
        "attributes": ["Slash"],
        "types": ["Supernovas", "Straw Hat Crew"],
        "block": 1,
        "owned_count": 2,
        "proxy_count": 1,
        "packs": "OP01, ST01",
    }
    row.update(overrides)
    return row


def _session_returning(rows: list[dict[str, Any]]) -> AsyncMock:
    result = MagicMock()
    result.mappings.return_value.all.return_value = rows
    session = AsyncMock()
    session.execute.return_value = result
    return session


class TestRowToResult:
    def test_maps_every_field(self) -> None:
        result = row_to_result(_row())

        assert result.id == "ST01-013"
        assert result.name == "Roronoa Zoro"
        assert result.power == 5000
        assert result.types == ["Supernovas", "Straw Hat Crew"]
        assert result.owned_count == 2
        assert result.proxy_count == 1
        assert result.packs == "OP01, ST01"

    def test_null_counts_become_zero(self) -> None:
        """Cards the caller has never owned report 0, not None."""
        result = row_to_result(_row(owned_count=None, proxy_count=None))

        assert result.owned_count == 0
        assert result.proxy_count == 0

    def test_slash_delimited_strings_are_split(self) -> None:
        result = row_to_result(_row(types="Straw Hat Crew / Supernovas", attributes=None))

        assert result.types == ["Straw Hat Crew", "Supernovas"]
        assert result.attributes == []

    def test_card_without_packs(self) -> None:
        assert row_to_result(_row(packs=None)).packs is None


class TestExecuteSearch:
    async def test_single_query(self) -> None:
        """One statement per search, results in row order."""
        session = _session_returning([_row(), _row(id="ST01-013_p1")])
        compiled = compile_search(parse_search("zoro"), user_id=1)

        results = await execute_search(session, compiled)

        session.execute.assert_awaited_once_with(compiled.statement)
        assert [r.id for r in results] == ["ST01-013", "ST01-013_p1"]

    async def test_no_match_is_empty_list(self) -> None:
        session = _session_returning([])

        results = await execute_search(session, compile_search(parse_search("zzz"), user_id=1))

        assert results == []

    async def test_store_failure_is_generic(self, caplog: pytest.LogCaptureFixture) -> None:
        """Driver errors become SearchFailedError and stay in the logs."""
        session = AsyncMock()
        session.execute.side_effect = OperationalError(
            "SELECT 1", {}, Exception("connection refused for password=hunter2")
        )
        compiled = compile_search(parse_search("zoro"), user_id=1)

        with caplog.at_level(logging.ERROR), pytest.raises(SearchFailedError) as excinfo:
            await execute_search(session, compiled)

        error = excinfo.value
        assert error.status_code == 500
        assert error.code == "SEARCH_FAILED"
        assert "hunter2" not in str(error.to_payload())
        assert "Search query failed for user 1" in caplog.text

    async def test_unreachable_store_is_generic(self, caplog: pytest.LogCaptureFixture) -> None:
        """Connect-time socket errors are wrapped like any other store failure."""
        session = AsyncMock()
        session.execute.side_effect = ConnectionRefusedError(
            111, "Connect call failed ('127.0.0.1', 5432)"
        )

        with caplog.at_level(logging.ERROR), pytest.raises(SearchFailedError) as excinfo:
            await execute_search(session, compile_search(parse_search("zoro"), user_id=3))

        assert excinfo.value.code == "SEARCH_FAILED"
        assert excinfo.value.detail == "ConnectionRefusedError"
        assert "127.0.0.1" not in str(excinfo.value.to_payload())
        assert "Search query failed for user 3" in caplog.text
        assert "query: SELECT" in caplog.text

    async def test_pool_timeout_is_generic(self) -> None:
        session = AsyncMock()
        session.execute.side_effect = TimeoutError()

        with pytest.raises(SearchFailedError) as excinfo:
            await execute_search(session, compile_search(parse_search("zoro"), user_id=1))

        assert excinfo.value.detail == "TimeoutError"

    async def test_slow_query_warning(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setattr(settings, "slow_query_ms", -1)
        session = _session_returning([])

        with caplog.at_level(logging.WARNING):
            await execute_search(session, compile_search(parse_search("zoro"), user_id=1))

        assert "Slow search query" in caplog.text
