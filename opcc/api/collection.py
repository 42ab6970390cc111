"""
Collection API endpoints.

Per-card owned/proxy count updates and whole-collection deletion for the
authenticated caller.
"""

from typing import Annotated, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from opcc.auth import CurrentUser
from opcc.db import delete_user_collection, update_card_count
from opcc.db.database import get_session
from opcc.models.failure import ErrorResponse

router = APIRouter(prefix="/api", tags=["collection"])

MAX_CARD_ID_LENGTH = 255


class CollectionUpdateRequest(BaseModel):
    """Request model for adding or removing one copy of a card."""

    card_id: str = Field(
        ...,
        min_length=1,
        max_length=MAX_CARD_ID_LENGTH,
        examples=["ST01-001"],
    )
    type: Literal["owned", "proxy"] = Field(
        ...,
        description="Which count to change",
    )
    action: Literal["increment", "decrement"]


class CardCountsResponse(BaseModel):
    """Counts for one card after an update."""

    owned_count: int
    proxy_count: int


class DeletedCards(BaseModel):
    owned: int
    proxy: int
    total: int


class CollectionDeleteResponse(BaseModel):
    """Response model for deleting a whole collection."""

    message: str
    deletedCards: DeletedCards  # noqa: N815 - wire name kept for the web client


@router.post(
    "/collection/update",
    response_model=CardCountsResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_collection(
    request: CollectionUpdateRequest,
    identity: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardCountsResponse:
    """
    Add or remove one owned or proxy copy of a card.

    Counts stay within [0, 99]; a request that would cross either bound is
    rejected with 400 and nothing changes.
    """
    counts = await update_card_count(
        session,
        identity.id,
        request.card_id,
        is_proxy=request.type == "proxy",
        action=request.action,
    )
    return CardCountsResponse(owned_count=counts.owned_count, proxy_count=counts.proxy_count)


@router.delete("/users/me/collection", response_model=CollectionDeleteResponse)
async def delete_my_collection(
    identity: CurrentUser,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionDeleteResponse:
    """
    Delete every owned and proxy copy the caller has.

    Irreversible. The catalog itself is untouched.
    """
    removed = await delete_user_collection(session, identity.id)
    return CollectionDeleteResponse(
        message="Collection deleted successfully.",
        deletedCards=DeletedCards(
            owned=removed.owned_count,
            proxy=removed.proxy_count,
            total=removed.total,
        ),
    )
