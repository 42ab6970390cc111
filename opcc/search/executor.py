"""
Search execution.

Runs one compiled search statement and maps rows to CardSearchResult.
Pure read: no writes, no retries. A store failure becomes a generic
SearchFailedError; the driver's message is logged server-side only.
"""

import logging
import time
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from opcc.config import settings
from opcc.models.card import CardSearchResult, split_multi_value
from opcc.models.failure import SearchFailedError
from opcc.search.compiler import CompiledSearch

logger = logging.getLogger(__name__)

# Statement text is truncated to this many characters in logs
LOGGED_QUERY_LENGTH = 100


def _statement_preview(compiled: CompiledSearch) -> str:
    return " ".join(str(compiled.statement).split())[:LOGGED_QUERY_LENGTH]


def row_to_result(row: Mapping[str, Any]) -> CardSearchResult:
    """Convert one result row mapping to a CardSearchResult."""
    return CardSearchResult(
        id=row["id"],
        card_code=row["card_code"],
        name=row["name"],
        rarity=row["rarity"],
        category=row["category"],
        color=row["color"],
        cost=row["cost"],
        power=row["power"],
        counter=row["counter"],
        effect=row["effect"],
        trigger_effect=row["trigger_effect"],
        img_url=row["img_url"],
        attributes=split_multi_value(row["attributes"]),
        types=split_multi_value(row["types"]),
        block=row["block"],
        owned_count=int(row["owned_count"] or 0),
        proxy_count=int(row["proxy_count"] or 0),
        packs=row["packs"],
    )


async def execute_search(session: AsyncSession, compiled: CompiledSearch) -> list[CardSearchResult]:
    """
    Execute a compiled search as a single read query.

    Raises:
        SearchFailedError: If the store is unreachable, the pool times out,
            or the query fails. No partial results are returned.
    """
    start = time.perf_counter()
    try:
        result = await session.execute(compiled.statement)
        rows = result.mappings().all()
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        logger.error(
            "Search query failed for user %s: %s: %s | query: %s",
            compiled.user_id,
            type(e).__name__,
            str(getattr(e, "orig", None) or e)[:200],
            _statement_preview(compiled),
        )
        raise SearchFailedError(detail=type(e).__name__) from e

    elapsed_ms = (time.perf_counter() - start) * 1000
    if elapsed_ms > settings.slow_query_ms:
        logger.warning(
            "Slow search query: %.0fms - %s...", elapsed_ms, _statement_preview(compiled)
        )

    results = [row_to_result(row) for row in rows]
    logger.debug(
        "Search for user %s returned %d rows (%s)",
        compiled.user_id,
        len(results),
        ", ".join(compiled.predicate_names) or "no predicates",
    )
    return results
