"""
Database operations for a user's owned and proxy copies.

Every function runs inside the caller's transaction and only flushes;
committing or rolling back is the session owner's job (see get_session).
"""

from typing import Literal

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from opcc.config import MAX_CARD_COPIES
from opcc.models.card import CardCounts
from opcc.models.db import CardDB, OwnedCardDB, UserDB
from opcc.models.failure import CountLimitError, FailureKind, KnownError

CountAction = Literal["increment", "decrement"]


async def _lock_user(session: AsyncSession, user_id: int) -> None:
    """
    Lock the user's row so count updates for that user serialize.

    FOR UPDATE is a no-op on SQLite, which serializes writers anyway.
    """
    locked = await session.scalar(
        select(UserDB.id).where(UserDB.id == user_id).with_for_update()
    )
    if locked is None:
        raise KnownError(
            kind=FailureKind.NOT_FOUND,
            message="User not found.",
            code="USER_NOT_FOUND",
            status_code=404,
        )


async def _count_instances(
    session: AsyncSession, user_id: int, card_id: str, is_proxy: bool
) -> int:
    count = await session.scalar(
        select(func.count())
        .select_from(OwnedCardDB)
        .where(
            OwnedCardDB.user_id == user_id,
            OwnedCardDB.card_id == card_id,
            OwnedCardDB.is_proxy.is_(is_proxy),
        )
    )
    return int(count or 0)


async def get_card_counts(session: AsyncSession, user_id: int, card_id: str) -> CardCounts:
    """Owned and proxy copies of one card for one user. Zeros if none."""
    result = await session.execute(
        select(
            func.count().filter(OwnedCardDB.is_proxy.is_(False)),
            func.count().filter(OwnedCardDB.is_proxy.is_(True)),
        ).where(OwnedCardDB.user_id == user_id, OwnedCardDB.card_id == card_id)
    )
    owned, proxy = result.one()
    return CardCounts(owned_count=int(owned or 0), proxy_count=int(proxy or 0))


async def update_card_count(
    session: AsyncSession,
    user_id: int,
    card_id: str,
    is_proxy: bool,
    action: CountAction,
) -> CardCounts:
    """
    Add or remove one copy of a card.

    Copies are fungible: decrement deletes an arbitrary instance.

    Returns:
        The card's counts after the change

    Raises:
        KnownError: If the user or card does not exist (404)
        CountLimitError: If the count would leave [0, MAX_CARD_COPIES]
    """
    await _lock_user(session, user_id)

    card_exists = await session.scalar(select(CardDB.id).where(CardDB.id == card_id))
    if card_exists is None:
        raise KnownError(
            kind=FailureKind.NOT_FOUND,
            message="Card not found.",
            code="CARD_NOT_FOUND",
            detail=f"card_id={card_id}",
            status_code=404,
        )

    current = await _count_instances(session, user_id, card_id, is_proxy)

    if action == "increment":
        if current >= MAX_CARD_COPIES:
            raise CountLimitError(
                card_id,
                current,
                f"Cannot own more than {MAX_CARD_COPIES} copies.",
                "COUNT_LIMIT_EXCEEDED",
            )
        session.add(OwnedCardDB(user_id=user_id, card_id=card_id, is_proxy=is_proxy))
    elif action == "decrement":
        if current <= 0:
            raise CountLimitError(
                card_id, current, "Count cannot be less than zero.", "COUNT_BELOW_ZERO"
            )
        instance_id = await session.scalar(
            select(OwnedCardDB.instance_id)
            .where(
                OwnedCardDB.user_id == user_id,
                OwnedCardDB.card_id == card_id,
                OwnedCardDB.is_proxy.is_(is_proxy),
            )
            .limit(1)
        )
        await session.execute(delete(OwnedCardDB).where(OwnedCardDB.instance_id == instance_id))
    else:
        msg = f"Unknown count action '{action}', expected 'increment' or 'decrement'"
        raise ValueError(msg)

    await session.flush()
    return await get_card_counts(session, user_id, card_id)


async def delete_user_collection(session: AsyncSession, user_id: int) -> CardCounts:
    """
    Delete every owned and proxy copy a user has.

    Returns the counts that were removed.
    """
    result = await session.execute(
        select(
            func.count().filter(OwnedCardDB.is_proxy.is_(False)),
            func.count().filter(OwnedCardDB.is_proxy.is_(True)),
        ).where(OwnedCardDB.user_id == user_id)
    )
    owned, proxy = result.one()

    await session.execute(delete(OwnedCardDB).where(OwnedCardDB.user_id == user_id))
    await session.flush()
    return CardCounts(owned_count=int(owned or 0), proxy_count=int(proxy or 0))
