"""
Card search API endpoint.

GET /api/cards/search?keyword=...&ownedOnly=...&showProxies=...

Keyword syntax:
- Free text is matched fuzzily (trigram similarity) against id, code,
  name, effect, category, trigger effect, attributes and types.
- id:ST01-001      id or card code starts with the value
- pack:OP01        card appears in a pack whose code starts with the value
- color:red        card color equals the value (case-insensitive)
- exact:"rush"     name, effects, attributes or types contain the value
- Values with spaces use quotes: pack:"OP 01"
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from opcc.auth import CurrentUser
from opcc.db.database import get_session
from opcc.models.card import CardSearchResult, base_card_id, card_variant
from opcc.models.failure import ErrorResponse
from opcc.search.service import search_cards
from opcc.search.validation import validate_search_request

router = APIRouter(prefix="/api/cards", tags=["cards"])


class CardResultResponse(BaseModel):
    """One ranked search hit."""

    id: str
    card_code: str | None = None
    name: str
    rarity: str | None = None
    category: str | None = None
    color: str | None = None
    cost: int | None = None
    power: int | None = None
    counter: int | None = None
    effect: str | None = None
    trigger_effect: str | None = None
    img_url: str | None = None
    attributes: list[str] = Field(default_factory=list)
    types: list[str] = Field(default_factory=list)
    block: int | None = None
    owned_count: int = Field(default=0, description="Non-proxy copies the caller owns")
    proxy_count: int = Field(default=0, description="Proxy copies the caller owns")
    packs: str | None = Field(default=None, description="Comma-separated pack codes")
    base_id: str = Field(..., description="Card id with any reprint suffix removed")
    variant: Literal["reprint", "parallel"] | None = Field(
        default=None,
        description="reprint for _rN ids, parallel (alternate art) for _pN ids",
    )

    @classmethod
    def from_result(cls, result: CardSearchResult) -> "CardResultResponse":
        return cls(
            id=result.id,
            card_code=result.card_code,
            name=result.name,
            rarity=result.rarity,
            category=result.category,
            color=result.color,
            cost=result.cost,
            power=result.power,
            counter=result.counter,
            effect=result.effect,
            trigger_effect=result.trigger_effect,
            img_url=result.img_url,
            attributes=result.attributes,
            types=result.types,
            block=result.block,
            owned_count=result.owned_count,
            proxy_count=result.proxy_count,
            packs=result.packs,
            base_id=base_card_id(result.id),
            variant=card_variant(result.id),
        )


@router.get(
    "/search",
    response_model=list[CardResultResponse],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def search(
    identity: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
    keyword: Annotated[str | None, Query(description="Search text with optional facets")] = None,
    owned_only: Annotated[str | None, Query(alias="ownedOnly")] = None,
    show_proxies: Annotated[str | None, Query(alias="showProxies")] = None,
) -> list[CardResultResponse]:
    """
    Search the catalog.

    Returns at most 50 cards, ranked, each with the caller's own owned and
    proxy counts. No match is an empty list, not an error.
    """
    request = validate_search_request(keyword, owned_only, show_proxies)
    results = await search_cards(session, identity.id, request)
    return [CardResultResponse.from_result(r) for r in results]
