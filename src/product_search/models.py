# src/product_search/models.py
"""
Data models for the product search engine.

Three groups of small, focused containers:

- Catalog side: ProductRecord (what the feed gives us) and IndexEntry (what
  the index keeps for scoring/filtering/sorting).
- Query side: SearchQuery and its parts (filters, sort, pagination, boost),
  plus AutocompleteQuery.
- Result side: SearchResult, ProductSearchResult, SearchFacet, FacetValue,
  Suggestion.

These classes do not contain search logic. They validate caller input at
construction time and convert to/from the JSON shape the HTTP layer speaks
(camelCase keys) via from_dict()/to_dict().
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from . import config as CFG


# ---------------------------------------------------------------- helpers

def _number(value: Any, name: str, default: float = 0.0) -> float:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _optional_number(value: Any, name: str) -> Optional[float]:
    return None if value is None else _number(value, name)


def _string_tuple(value: Any) -> Optional[Tuple[str, ...]]:
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken as UTC; aware ones are left alone."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _optional_flag(value: Any, name: str) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    raise ValueError(f"{name} must be true or false, got {value!r}")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Accepts a datetime, an ISO-8601 string or epoch milliseconds.
    Naive datetimes are taken as UTC so everything compares cleanly.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        dt = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"createdAt is not an ISO-8601 timestamp: {value!r}") from None
    else:
        raise ValueError(f"createdAt has unsupported type {type(value).__name__}")
    return as_utc(dt)


# ---------------------------------------------------------------- catalog

@dataclass(frozen=True)
class ProductRecord:
    """
    One product as delivered by the catalog feed.

    Only id/name/description/category/brand/price/rating/review_count/stock/
    sales/created_at take part in search; the remaining fields are carried
    through to result rows.
    """
    id: str
    name: str
    description: str = ""
    category: Optional[str] = None
    brand: Optional[str] = None
    price: float = 0.0
    rating: float = 0.0
    review_count: int = 0
    stock: int = 0
    sales: float = 0.0
    created_at: Optional[datetime] = None
    compare_at_price: Optional[float] = None
    images: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.created_at is not None:
            object.__setattr__(self, "created_at", parse_timestamp(self.created_at))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductRecord":
        if not isinstance(data, dict):
            raise ValueError(f"product record must be an object, got {type(data).__name__}")
        pid = data.get("id")
        if pid is None or str(pid) == "":
            raise ValueError("product record is missing 'id'")
        return cls(
            id=str(pid),
            name=str(data.get("name") or ""),
            description=str(data.get("description") or ""),
            category=data.get("category"),
            brand=data.get("brand"),
            price=_number(data.get("price"), "price"),
            rating=_number(data.get("rating"), "rating"),
            review_count=int(_number(data.get("reviewCount"), "reviewCount")),
            stock=int(_number(data.get("stock"), "stock")),
            sales=_number(data.get("sales"), "sales"),
            created_at=parse_timestamp(data.get("createdAt")),
            compare_at_price=_optional_number(data.get("compareAtPrice"), "compareAtPrice"),
            images=_string_tuple(data.get("images")) or (),
            tags=_string_tuple(data.get("tags")) or (),
        )


@dataclass(frozen=True)
class IndexEntry:
    """Searchable view of a product. Replaced wholesale on reindex."""
    id: str
    tokens: Tuple[str, ...]
    category: Optional[str]
    brand: Optional[str]
    price: float
    rating: float
    review_count: int
    in_stock: bool
    popularity: float
    created_at: datetime


# ---------------------------------------------------------------- query

@dataclass(frozen=True)
class PriceRange:
    min: float = 0.0
    max: float = math.inf

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriceRange":
        lo = _optional_number(data.get("min"), "priceRange.min")
        hi = _optional_number(data.get("max"), "priceRange.max")
        return cls(min=0.0 if lo is None else lo, max=math.inf if hi is None else hi)


@dataclass(frozen=True)
class SearchFilters:
    category: Optional[Tuple[str, ...]] = None
    price_range: Optional[PriceRange] = None
    rating: Optional[float] = None          # minimum rating
    in_stock: Optional[bool] = None
    brand: Optional[Tuple[str, ...]] = None
    tags: Optional[Tuple[str, ...]] = None  # any-of
    on_sale: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchFilters":
        pr = data.get("priceRange")
        return cls(
            category=_string_tuple(data.get("category")),
            price_range=PriceRange.from_dict(pr) if pr else None,
            rating=_optional_number(data.get("rating"), "rating"),
            in_stock=_optional_flag(data.get("inStock"), "inStock"),
            brand=_string_tuple(data.get("brand")),
            tags=_string_tuple(data.get("tags")),
            on_sale=_optional_flag(data.get("onSale"), "onSale"),
        )


@dataclass(frozen=True)
class SearchSort:
    field: str
    order: str = "desc"

    def __post_init__(self) -> None:
        if self.order not in ("asc", "desc"):
            raise ValueError(f"sort order must be 'asc' or 'desc', got {self.order!r}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchSort":
        return cls(field=str(data.get("field", "")), order=str(data.get("order") or "desc"))


@dataclass(frozen=True)
class SearchBoost:
    """Closed set of additive boosts. A None/0 weight disables that boost."""
    popular_products: Optional[float] = None
    new_products: Optional[float] = None
    high_rated: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchBoost":
        return cls(
            popular_products=_optional_number(data.get("popularProducts"), "boost.popularProducts"),
            new_products=_optional_number(data.get("newProducts"), "boost.newProducts"),
            high_rated=_optional_number(data.get("highRated"), "boost.highRated"),
        )


@dataclass(frozen=True)
class Pagination:
    page: int = CFG.DEFAULT_PAGE
    limit: int = CFG.DEFAULT_LIMIT

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pagination":
        page = data.get("page")
        limit = data.get("limit")
        return cls(
            page=CFG.DEFAULT_PAGE if page is None else int(_number(page, "page")),
            limit=CFG.DEFAULT_LIMIT if limit is None else int(_number(limit, "limit")),
        )


@dataclass(frozen=True)
class SearchQuery:
    query: str = ""
    filters: Optional[SearchFilters] = None
    sort: Optional[SearchSort] = None
    pagination: Optional[Pagination] = None
    boost: Optional[SearchBoost] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchQuery":
        if not isinstance(data, dict):
            raise ValueError("search query must be an object")
        filters = data.get("filters")
        sort = data.get("sort")
        pagination = data.get("pagination")
        boost = data.get("boost")
        return cls(
            query=str(data.get("query") or ""),
            filters=SearchFilters.from_dict(filters) if filters else None,
            sort=SearchSort.from_dict(sort) if sort else None,
            pagination=Pagination.from_dict(pagination) if pagination else None,
            boost=SearchBoost.from_dict(boost) if boost else None,
        )


@dataclass(frozen=True)
class AutocompleteQuery:
    query: str
    limit: int = CFG.SUGGESTION_LIMIT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AutocompleteQuery":
        limit = data.get("limit")
        return cls(
            query=str(data.get("query") or ""),
            limit=CFG.SUGGESTION_LIMIT if not limit else int(_number(limit, "limit")),
        )


@dataclass(frozen=True)
class Candidate:
    product_id: str
    score: float


# ---------------------------------------------------------------- results

@dataclass(frozen=True)
class ProductSearchResult:
    id: str
    name: str
    description: str
    price: float
    images: List[str]
    rating: float
    review_count: int
    in_stock: bool
    category: Optional[str]
    brand: Optional[str]
    tags: List[str]
    relevance_score: float
    compare_at_price: Optional[float] = None
    highlights: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "images": list(self.images),
            "rating": self.rating,
            "reviewCount": self.review_count,
            "inStock": self.in_stock,
            "category": self.category,
            "brand": self.brand,
            "tags": list(self.tags),
            "relevanceScore": self.relevance_score,
        }
        if self.compare_at_price is not None:
            out["compareAtPrice"] = self.compare_at_price
        if self.highlights is not None:
            out["highlights"] = list(self.highlights)
        return out


@dataclass(frozen=True)
class FacetValue:
    value: str
    label: str
    count: int
    selected: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "label": self.label, "count": self.count, "selected": self.selected}


@dataclass(frozen=True)
class SearchFacet:
    field: str
    label: str
    values: List[FacetValue]

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "label": self.label, "values": [v.to_dict() for v in self.values]}


@dataclass(frozen=True)
class PageInfo:
    page: int
    limit: int
    total_pages: int

    def to_dict(self) -> Dict[str, Any]:
        return {"page": self.page, "limit": self.limit, "totalPages": self.total_pages}


@dataclass(frozen=True)
class SearchResult:
    products: List[ProductSearchResult]
    facets: List[SearchFacet]
    suggestions: List[str]
    total_results: int
    search_time: float  # ms
    pagination: PageInfo
    did_you_mean: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "products": [p.to_dict() for p in self.products],
            "facets": [f.to_dict() for f in self.facets],
            "suggestions": list(self.suggestions),
            "totalResults": self.total_results,
            "searchTime": self.search_time,
            "pagination": self.pagination.to_dict(),
        }
        if self.did_you_mean is not None:
            out["didYouMean"] = self.did_you_mean
        return out


@dataclass(frozen=True)
class Suggestion:
    """
    An autocomplete entry. `seq` is assigned by the trie on insert and only
    serves as the stable tie-breaker between equal popularities.
    """
    text: str
    type: str
    popularity: float = 0.0
    metadata: Optional[Dict[str, Any]] = field(default=None, compare=False)
    seq: int = field(default=0, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"text": self.text, "type": self.type, "popularity": self.popularity}
        if self.metadata is not None:
            out["metadata"] = dict(self.metadata)
        return out
