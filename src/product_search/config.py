from __future__ import annotations
import os

# Pagination defaults
DEFAULT_PAGE: int = 1
DEFAULT_LIMIT: int = int(os.environ.get("PRODUCT_SEARCH_DEFAULT_LIMIT", "20"))

# Autocomplete
SUGGESTION_LIMIT: int = 10
SUGGESTION_TYPES = ("product", "category", "brand", "query")

# How many autocomplete texts are attached to a SearchResult
SEARCH_SUGGESTION_LIMIT: int = 5

# Tokens of this length or shorter are never indexed
MIN_TOKEN_LENGTH: int = 3

# Storefront is Brazilian Portuguese; English words show up in imported feeds.
STOPWORDS = frozenset({
    "o", "a", "de", "da", "do", "para", "com",
    "os", "as", "das", "dos", "um", "uma", "uns", "umas", "em", "no", "na",
    "nos", "nas", "por", "pelo", "pela", "que", "sem", "seu", "sua", "seus",
    "suas", "the", "and", "for", "with",
})

# /* ~~~ pairwise token scoring weights ~~~ */
SUBSTRING_MATCH_SCORE: int = 10
EXACT_MATCH_SCORE: int = 20
SYNONYM_MATCH_SCORE: int = 5

# /* ~~~ boosts ~~~ */
POPULARITY_FACTOR: float = 0.01
NEWNESS_WINDOW_DAYS: int = 30

# Facets
BRAND_FACET_LIMIT: int = 10
CATEGORY_FACET_LABEL: str = "Categoria"
BRAND_FACET_LABEL: str = "Marca"
PRICE_FACET_LABEL: str = "Preço"

# (min, max, label); max=None means unbounded
PRICE_BUCKETS = (
    (0, 50, "Até R$ 50"),
    (50, 100, "R$ 50 - R$ 100"),
    (100, 200, "R$ 100 - R$ 200"),
    (200, None, "Acima de R$ 200"),
)

# Catalog feed files picked up by the loader
CATALOG_EXTENSIONS = (".json", ".jsonl")

# Progress logging (set PRODUCT_SEARCH_VERBOSE=1 to enable)
VERBOSE: bool = os.environ.get("PRODUCT_SEARCH_VERBOSE") == "1"
