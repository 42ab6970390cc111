"""
Card search service.

Parse -> compile -> execute for one validated request and one user.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from opcc.models.card import CardSearchResult
from opcc.models.failure import ValidationError
from opcc.search.compiler import SearchOptions, compile_search
from opcc.search.executor import execute_search
from opcc.search.query import parse_search
from opcc.search.validation import SearchRequest

logger = logging.getLogger(__name__)


async def search_cards(
    session: AsyncSession,
    user_id: int,
    request: SearchRequest,
) -> list[CardSearchResult]:
    """
    Run a card search for the given user.

    A keyword that parses to nothing (e.g. only `id:""`) is rejected unless
    an ownership flag turns the request into a collection browse.

    Raises:
        ValidationError: If nothing is left to search on
        SearchFailedError: If the store cannot answer
    """
    parsed = parse_search(request.keyword)
    if parsed.is_empty and not request.browses_collection:
        raise ValidationError("Search keyword cannot be empty.", "EMPTY_KEYWORD")

    compiled = compile_search(
        parsed,
        user_id,
        SearchOptions(owned_only=request.owned_only, show_proxies=request.show_proxies),
    )
    logger.info(
        "Card search by user %s: fuzzy=%r facets=%s",
        user_id,
        parsed.fuzzy_text,
        compiled.predicate_names,
    )
    return await execute_search(session, compiled)
