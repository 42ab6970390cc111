from opcc.search.compiler import CompiledSearch, SearchOptions, compile_search
from opcc.search.executor import execute_search
from opcc.search.query import Facets, FacetToken, ParsedQuery, parse_search, tokenize
from opcc.search.service import search_cards
from opcc.search.validation import SearchRequest, validate_search_request

__all__ = [
    "CompiledSearch",
    "FacetToken",
    "Facets",
    "ParsedQuery",
    "SearchOptions",
    "SearchRequest",
    "compile_search",
    "execute_search",
    "parse_search",
    "search_cards",
    "tokenize",
    "validate_search_request",
]
