import re
from dataclasses import dataclass

_REPRINT_SUFFIX = re.compile(r"_r\d+$")
_PARALLEL_SUFFIX = re.compile(r"_p\d+$")


@dataclass(frozen=True, slots=True)
class CardSearchResult:
    """
    A card matching a search, enriched with the caller's ownership.

    Attributes:
        id: Stable card id, possibly with a `_r<N>` or `_p<N>` suffix
        card_code: Display code (e.g., "ST01-001")
        owned_count: Non-proxy copies the requesting user owns (0 if none)
        proxy_count: Proxy copies the requesting user owns (0 if none)
        packs: Comma-space joined pack codes the card appears in
    """

    id: str
    card_code: str | None
    name: str
    rarity: str | None
    category: str | None
    color: str | None
    cost: int | None
    power: int | None
    counter: int | None
    effect: str | None
    trigger_effect: str | None
    img_url: str | None
    attributes: list[str]
    types: list[str]
    block: int | None
    owned_count: int = 0
    proxy_count: int = 0
    packs: str | None = None


@dataclass(frozen=True, slots=True)
class CardCounts:
    """Owned and proxy copies of one card for one user."""

    owned_count: int = 0
    proxy_count: int = 0

    @property
    def total(self) -> int:
        return self.owned_count + self.proxy_count


def is_reprint(card_id: str | None) -> bool:
    """True for `_r<N>` ids. Parallels (`_p<N>`) are not reprints."""
    if not card_id:
        return False
    return bool(_REPRINT_SUFFIX.search(card_id))


def is_parallel(card_id: str | None) -> bool:
    """True for alternate-art `_p<N>` ids."""
    if not card_id:
        return False
    return bool(_PARALLEL_SUFFIX.search(card_id))


def base_card_id(card_id: str) -> str:
    """Strip a trailing reprint suffix. Parallel suffixes are kept."""
    return _REPRINT_SUFFIX.sub("", card_id)


def card_variant(card_id: str) -> str | None:
    """Classify an id as "reprint", "parallel", or None for a base card."""
    if is_reprint(card_id):
        return "reprint"
    if is_parallel(card_id):
        return "parallel"
    return None


def split_multi_value(value: str | list[str] | None) -> list[str]:
    """
    Normalize a `/`-delimited catalog field into a clean list.

    "Straw Hat Crew/Supernovas" -> ["Straw Hat Crew", "Supernovas"]
    Lists are trimmed and empties dropped; None becomes [].
    """
    if value is None:
        return []
    parts = value.split("/") if isinstance(value, str) else value
    return [p.strip() for p in parts if p and p.strip()]
