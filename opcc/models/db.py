"""
SQLAlchemy ORM models for persistent storage.

Catalog tables (cards, packs, card_pack_appearances) are written only by
the catalog import job and are read-only to the search core. Ownership
rows (owned_cards) are one row per physical or proxy copy.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# TEXT[] on PostgreSQL; JSON elsewhere so the schema also builds on SQLite
StringList = ARRAY(Text).with_variant(JSON(), "sqlite")


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserDB(Base):
    """An account that can own cards."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    name: Mapped[str] = mapped_column(String(255), unique=True)
    role: Mapped[str] = mapped_column(String(50), default="Normal User")
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    owned_cards: Mapped[list["OwnedCardDB"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<UserDB(id={self.id}, name={self.name})>"


class CardDB(Base):
    """
    A catalog card.

    The id is stable and may carry a variant suffix: `_r<N>` for a reprint
    of the base card, `_p<N>` for an alternate-art parallel.
    """

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    card_code: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    name: Mapped[str] = mapped_column(String(255), index=True)
    rarity: Mapped[str | None] = mapped_column(String(32), nullable=True)
    category: Mapped[str | None] = mapped_column(String(64), nullable=True)
    color: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    cost: Mapped[int | None] = mapped_column(Integer, nullable=True)
    power: Mapped[int | None] = mapped_column(Integer, nullable=True)
    counter: Mapped[int | None] = mapped_column(Integer, nullable=True)
    effect: Mapped[str | None] = mapped_column(Text, nullable=True)
    trigger_effect: Mapped[str | None] = mapped_column(Text, nullable=True)
    img_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    attributes: Mapped[list[str] | None] = mapped_column(StringList, nullable=True)
    types: Mapped[list[str] | None] = mapped_column(StringList, nullable=True)
    block: Mapped[int | None] = mapped_column(Integer, nullable=True)

    appearances: Mapped[list["CardPackAppearanceDB"]] = relationship(back_populates="card")

    def __repr__(self) -> str:
        return f"<CardDB(id={self.id}, name={self.name})>"


class PackDB(Base):
    """A released pack (booster, starter deck, promo set)."""

    __tablename__ = "packs"

    code: Mapped[str] = mapped_column(String(32), primary_key=True)
    series_id: Mapped[str] = mapped_column(String(32), unique=True)
    name: Mapped[str] = mapped_column(String(255))

    def __repr__(self) -> str:
        return f"<PackDB(code={self.code})>"


class CardPackAppearanceDB(Base):
    """Many-to-many link: a card may appear in several packs."""

    __tablename__ = "card_pack_appearances"

    card_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("cards.id", ondelete="CASCADE"), primary_key=True
    )
    pack_code: Mapped[str] = mapped_column(
        String(32), ForeignKey("packs.code", ondelete="CASCADE"), primary_key=True, index=True
    )

    card: Mapped["CardDB"] = relationship(back_populates="appearances")


class OwnedCardDB(Base):
    """
    One owned or proxy copy of a card.

    Copies are fungible. Count per (user_id, card_id, is_proxy) stays in [0, 99].
    """

    __tablename__ = "owned_cards"

    instance_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("cards.id", ondelete="CASCADE"), index=True
    )
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_proxy: Mapped[bool] = mapped_column(Boolean, default=False)

    user: Mapped["UserDB"] = relationship(back_populates="owned_cards")

    def __repr__(self) -> str:
        return (
            f"<OwnedCardDB(user={self.user_id}, card={self.card_id}, proxy={self.is_proxy})>"
        )
