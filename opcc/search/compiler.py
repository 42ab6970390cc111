"""
Search query compiler.

Turns a ParsedQuery into one parameterized SELECT over the catalog:

    cards
      LEFT JOIN (per-card owned/proxy counts for ONE user) AS oc
      LEFT JOIN card_pack_appearances AS cpa
    WHERE <predicates ANDed in a fixed order>
    GROUP BY card, oc.owned_count, oc.proxy_count
    ORDER BY <facet tie-breaks>, <similarity DESC>, name, id
    LIMIT 50

Predicates are collected as (name, clause) pairs before being ANDed. Every
user-supplied value is a named bind parameter (fuzzy_text, id_prefix,
pack_prefix, color, exact_pattern), so the same parameter is shared between
a predicate and its ordering tie-break and nothing is string-interpolated.

Requires PostgreSQL with pg_trgm for similarity().
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import (
    Float,
    Select,
    String,
    and_,
    bindparam,
    case,
    exists,
    func,
    literal_column,
    or_,
    select,
)
from sqlalchemy.orm import aliased
from sqlalchemy.sql.elements import BindParameter, ColumnElement

from opcc.config import MAX_SEARCH_RESULTS, settings
from opcc.models.db import CardDB, CardPackAppearanceDB, OwnedCardDB
from opcc.search.query import ParsedQuery

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"

# Card columns returned by a search, in output order
RESULT_COLUMNS = (
    CardDB.id,
    CardDB.name,
    CardDB.card_code,
    CardDB.category,
    CardDB.color,
    CardDB.power,
    CardDB.counter,
    CardDB.effect,
    CardDB.trigger_effect,
    CardDB.img_url,
    CardDB.attributes,
    CardDB.types,
    CardDB.block,
    CardDB.rarity,
    CardDB.cost,
)


@dataclass(frozen=True, slots=True)
class SearchOptions:
    """Ownership filters from the request's ownedOnly/showProxies flags."""

    owned_only: bool = False
    show_proxies: bool = False


@dataclass(frozen=True, slots=True)
class Predicate:
    """One WHERE condition, named for logging and tests."""

    name: str
    clause: ColumnElement[bool]


@dataclass(frozen=True, slots=True)
class Ordering:
    """One ORDER BY key, named for logging and tests."""

    name: str
    clause: ColumnElement[Any]


@dataclass(frozen=True)
class CompiledSearch:
    """A ready-to-execute search statement plus its building blocks."""

    statement: Select[Any]
    user_id: int
    predicates: list[Predicate] = field(default_factory=list)
    orderings: list[Ordering] = field(default_factory=list)

    @property
    def predicate_names(self) -> list[str]:
        return [p.name for p in self.predicates]

    @property
    def ordering_names(self) -> list[str]:
        return [o.name for o in self.orderings]


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _joined(column: Any) -> ColumnElement[str]:
    """Space-join a TEXT[] column, '' for NULL."""
    return func.coalesce(func.array_to_string(column, " "), "")


def _text(column: Any) -> ColumnElement[str]:
    return func.coalesce(column, "")


def ownership_subquery(user_id: int) -> Any:
    """
    Per-card owned/proxy counts for exactly one user.

    Filtering by user_id inside the subquery is what keeps other users'
    counts out of the result.
    """
    return (
        select(
            OwnedCardDB.card_id.label("card_id"),
            func.count().filter(OwnedCardDB.is_proxy.is_(False)).label("owned_count"),
            func.count().filter(OwnedCardDB.is_proxy.is_(True)).label("proxy_count"),
        )
        .where(OwnedCardDB.user_id == bindparam("user_id", user_id))
        .group_by(OwnedCardDB.card_id)
        .subquery("oc")
    )


def fuzzy_predicate(fuzzy: BindParameter[str], threshold: float) -> ColumnElement[bool]:
    """Any searchable field's trigram similarity clears the threshold."""
    scores = [
        func.similarity(_text(CardDB.id), fuzzy),
        func.similarity(_text(CardDB.card_code), fuzzy),
        func.similarity(_text(CardDB.name), fuzzy),
        func.similarity(_text(CardDB.effect), fuzzy),
        func.similarity(_text(CardDB.category), fuzzy),
        func.similarity(_text(CardDB.trigger_effect), fuzzy),
        func.similarity(_joined(CardDB.attributes), fuzzy),
        func.similarity(_joined(CardDB.types), fuzzy),
    ]
    return func.greatest(*scores, type_=Float) > bindparam(
        "similarity_threshold", threshold, type_=Float
    )


def fuzzy_ordering(fuzzy: BindParameter[str]) -> ColumnElement[Any]:
    """Best of name/id/card_code similarity, highest first."""
    return func.greatest(
        func.similarity(_text(CardDB.name), fuzzy),
        func.similarity(_text(CardDB.id), fuzzy),
        func.similarity(_text(CardDB.card_code), fuzzy),
        type_=Float,
    ).desc()


def compile_search(
    parsed: ParsedQuery,
    user_id: int,
    options: SearchOptions | None = None,
    threshold: float | None = None,
    limit: int | None = None,
) -> CompiledSearch:
    """
    Compile a parsed search into a single SELECT for one user.

    No predicates means no WHERE clause; callers are expected to reject
    fully empty searches before this point.
    """
    options = options or SearchOptions()
    if threshold is None:
        threshold = settings.similarity_threshold
    if limit is None:
        limit = settings.search_result_limit
    limit = max(1, min(limit, MAX_SEARCH_RESULTS))

    facets = parsed.facets
    oc = ownership_subquery(user_id)
    cpa = aliased(CardPackAppearanceDB, name="cpa")
    owned_count = func.coalesce(oc.c.owned_count, 0)
    proxy_count = func.coalesce(oc.c.proxy_count, 0)

    predicates: list[Predicate] = []
    orderings: list[Ordering] = []

    fuzzy = bindparam("fuzzy_text", parsed.fuzzy_text, type_=String)
    if parsed.has_fuzzy_text:
        predicates.append(Predicate("fuzzy", fuzzy_predicate(fuzzy, threshold)))

    id_ordering: Ordering | None = None
    if facets.id:
        id_prefix = bindparam("id_prefix", escape_like(facets.id) + "%", type_=String)
        predicates.append(
            Predicate(
                "id",
                or_(
                    CardDB.id.ilike(id_prefix, escape=LIKE_ESCAPE),
                    CardDB.card_code.ilike(id_prefix, escape=LIKE_ESCAPE),
                ),
            )
        )
        # Verbatim (case-sensitive) prefix beats a case-folded one
        id_ordering = Ordering(
            "id_prefix",
            case(
                (
                    or_(
                        CardDB.id.like(id_prefix, escape=LIKE_ESCAPE),
                        CardDB.card_code.like(id_prefix, escape=LIKE_ESCAPE),
                    ),
                    0,
                ),
                else_=1,
            ),
        )

    if facets.pack:
        pack_prefix = bindparam("pack_prefix", escape_like(facets.pack) + "%", type_=String)
        cpa_filter = aliased(CardPackAppearanceDB, name="cpa_filter")
        predicates.append(
            Predicate(
                "pack",
                exists().where(
                    cpa_filter.card_id == CardDB.id,
                    cpa_filter.pack_code.ilike(pack_prefix, escape=LIKE_ESCAPE),
                ),
            )
        )

    if facets.color:
        color = bindparam("color", facets.color, type_=String)
        predicates.append(Predicate("color", func.lower(CardDB.color) == func.lower(color)))
        orderings.append(Ordering("color_exact", case((CardDB.color == color, 0), else_=1)))

    if id_ordering is not None:
        orderings.append(id_ordering)

    if facets.exact:
        exact = bindparam("exact_pattern", "%" + escape_like(facets.exact) + "%", type_=String)
        predicates.append(
            Predicate(
                "exact",
                or_(
                    CardDB.name.ilike(exact, escape=LIKE_ESCAPE),
                    CardDB.effect.ilike(exact, escape=LIKE_ESCAPE),
                    CardDB.trigger_effect.ilike(exact, escape=LIKE_ESCAPE),
                    _joined(CardDB.attributes).ilike(exact, escape=LIKE_ESCAPE),
                    _joined(CardDB.types).ilike(exact, escape=LIKE_ESCAPE),
                ),
            )
        )
        orderings.append(
            Ordering(
                "exact_name",
                case((CardDB.name.ilike(exact, escape=LIKE_ESCAPE), 0), else_=1),
            )
        )

    if options.owned_only and options.show_proxies:
        predicates.append(Predicate("ownership", or_(owned_count > 0, proxy_count > 0)))
    elif options.owned_only:
        predicates.append(Predicate("ownership", owned_count > 0))
    elif options.show_proxies:
        predicates.append(Predicate("ownership", proxy_count > 0))

    if parsed.has_fuzzy_text:
        orderings.append(Ordering("similarity", fuzzy_ordering(fuzzy)))
    orderings.append(Ordering("name", CardDB.name.asc()))
    orderings.append(Ordering("id", CardDB.id.asc()))

    statement = (
        select(
            *RESULT_COLUMNS,
            owned_count.label("owned_count"),
            proxy_count.label("proxy_count"),
            func.string_agg(cpa.pack_code.distinct(), literal_column("', '")).label("packs"),
        )
        .select_from(CardDB)
        .outerjoin(oc, CardDB.id == oc.c.card_id)
        .outerjoin(cpa, CardDB.id == cpa.card_id)
        .group_by(CardDB.id, oc.c.owned_count, oc.c.proxy_count)
        .order_by(*(o.clause for o in orderings))
        .limit(limit)
    )
    if predicates:
        statement = statement.where(and_(*(p.clause for p in predicates)))

    logger.debug(
        "Compiled search for user %s: predicates=%s order=%s",
        user_id,
        [p.name for p in predicates],
        [o.name for o in orderings],
    )
    return CompiledSearch(
        statement=statement,
        user_id=user_id,
        predicates=predicates,
        orderings=orderings,
    )
