"""
Product Search Engine

In-memory product search and autocomplete for a storefront catalog. Product
records are tokenized into an index, queries are scored token-by-token
(with synonyms and optional popularity/newness/rating boosts), filtered,
sorted, faceted and paginated. A character trie serves word-prefix
autocomplete.

The package is split by concern:
- Text normalization (tokenizer, stopwords)
- Index structures (product index, suggestion trie)
- Scoring, filtering/sorting, facets, pagination
- Orchestration (Engine) and catalog loading

Example Usage:
    from product_search import Engine, SearchQuery

    eng = Engine()
    eng.build(["catalog/products.json"])

    result = eng.search(SearchQuery(query="difusor aromático"))
    for p in result.products:
        print(f"{p.relevance_score:>6.1f}  {p.name}")

    for s in eng.get_suggestions("arom"):
        print(s.text, s.type)

Version: 1.0.0
"""

# src/product_search/__init__.py
from .engine import Engine
from .models import (
    AutocompleteQuery,
    Pagination,
    PriceRange,
    ProductRecord,
    SearchBoost,
    SearchFilters,
    SearchQuery,
    SearchResult,
    SearchSort,
    Suggestion,
)
from .normalize import tokenize

__version__ = "1.0.0"
__all__ = [
    "Engine",
    "AutocompleteQuery",
    "Pagination",
    "PriceRange",
    "ProductRecord",
    "SearchBoost",
    "SearchFilters",
    "SearchQuery",
    "SearchResult",
    "SearchSort",
    "Suggestion",
    "tokenize",
]
