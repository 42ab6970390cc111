"""
Search string parsing.

Splits a raw keyword string into structured facet filters and a residual
fuzzy-text term:

    'zoro color:red id:ST01-'     -> fuzzy 'zoro', color='red', id='ST01-'
    'pack:"OP01" exact:"rush"'    -> fuzzy '',     pack='OP01', exact='rush'
    'luffy foo:bar'               -> fuzzy 'luffy foo:bar' (unknown key kept)

Facet tokens are `key:value` or `key:"quoted value"` at a token boundary.
Quoted values end at the next double quote; there is no escaping.

Repeated keys are folded last-write-wins in scan order. 'color:red
color:blue' filters on blue.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field, replace

FACET_KEYS = frozenset({"id", "pack", "color", "exact"})

# key:"quoted" or key:bare, only at the start of a whitespace-delimited token
FACET_PATTERN = re.compile(r'(?<!\S)(\w+):(?:"([^"]*)"|(\S+))')


@dataclass(frozen=True, slots=True)
class FacetToken:
    """One recognized `key:value` token, in scan order."""

    key: str
    value: str
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class Facets:
    """Structured filters extracted from a search string. None means absent."""

    id: str | None = None
    pack: str | None = None
    color: str | None = None
    exact: str | None = None

    def any(self) -> bool:
        return any(v is not None for v in (self.id, self.pack, self.color, self.exact))


@dataclass(frozen=True, slots=True)
class ParsedQuery:
    """A search string split into fuzzy text and facets."""

    fuzzy_text: str = ""
    facets: Facets = field(default_factory=Facets)

    @property
    def has_fuzzy_text(self) -> bool:
        return bool(self.fuzzy_text)

    @property
    def is_empty(self) -> bool:
        return not self.fuzzy_text and not self.facets.any()


def tokenize(keyword: str) -> Iterator[FacetToken]:
    """
    Yield every recognized facet token in scan order.

    Unrecognized keys are skipped (they stay part of the fuzzy text).
    Values are trimmed; an empty value is still yielded so the caller can
    strip the token.
    """
    for match in FACET_PATTERN.finditer(keyword):
        key = match.group(1).lower()
        if key not in FACET_KEYS:
            continue
        quoted, bare = match.group(2), match.group(3)
        value = quoted if quoted is not None else bare
        yield FacetToken(key=key, value=value.strip(), start=match.start(), end=match.end())


def fold_facets(tokens: list[FacetToken]) -> Facets:
    """Fold tokens into a Facets record. Later keys overwrite earlier ones."""
    facets = Facets()
    for token in tokens:
        if not token.value:
            # Empty value: the facet is absent, but an earlier value survives
            continue
        facets = replace(facets, **{token.key: token.value})
    return facets


def parse_search(keyword: str) -> ParsedQuery:
    """
    Parse a trimmed, length-bounded search string.

    Every recognized facet token is removed exactly once; the remaining
    text, whitespace-collapsed, becomes the fuzzy term.
    """
    tokens = list(tokenize(keyword))

    pieces: list[str] = []
    cursor = 0
    for token in tokens:
        pieces.append(keyword[cursor : token.start])
        cursor = token.end
    pieces.append(keyword[cursor:])
    fuzzy_text = " ".join("".join(pieces).split())

    return ParsedQuery(fuzzy_text=fuzzy_text, facets=fold_facets(tokens))
