from __future__ import annotations
from collections import Counter
from typing import Iterable, List, Mapping, Optional, Sequence

from . import config as CFG
from .models import Candidate, FacetValue, IndexEntry, SearchFacet, SearchFilters


def _bucket_value(lo: float, hi: Optional[float]) -> str:
    return f"{lo:g}-{hi:g}" if hi is not None else f"{lo:g}+"


def _count_facet(
    field: str,
    label: str,
    values: Iterable[Optional[str]],
    selected: Optional[Sequence[str]],
    limit: Optional[int] = None,
) -> SearchFacet:
    # Counter keeps first-seen order; sorted() is stable, so equal counts
    # stay in the order the candidates produced them.
    counts = Counter(v for v in values if v is not None)
    chosen = set(selected or ())
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    if limit is not None:
        ranked = ranked[:limit]
    return SearchFacet(
        field=field,
        label=label,
        values=[FacetValue(value=v, label=v, count=n, selected=v in chosen) for v, n in ranked],
    )


def price_facet(prices: Iterable[float]) -> SearchFacet:
    buckets = [[lo, hi, label, 0] for lo, hi, label in CFG.PRICE_BUCKETS]
    for price in prices:
        for b in buckets:
            lo, hi = b[0], b[1]
            if price >= lo and (hi is None or price < hi):
                b[3] += 1
    return SearchFacet(
        field="price",
        label=CFG.PRICE_FACET_LABEL,
        values=[
            FacetValue(value=_bucket_value(lo, hi), label=label, count=n, selected=False)
            for lo, hi, label, n in buckets
        ],
    )


def build_facets(
    candidates: List[Candidate],
    entries: Mapping[str, IndexEntry],
    filters: Optional[SearchFilters] = None,
) -> List[SearchFacet]:
    """
    Category, brand (top N) and price facets over the *filtered* candidates,
    so the counts describe refinements still available to the user.
    """
    rows = [entries[c.product_id] for c in candidates if c.product_id in entries]
    return [
        _count_facet(
            "category", CFG.CATEGORY_FACET_LABEL,
            (e.category for e in rows),
            filters.category if filters else None,
        ),
        _count_facet(
            "brand", CFG.BRAND_FACET_LABEL,
            (e.brand for e in rows),
            filters.brand if filters else None,
            limit=CFG.BRAND_FACET_LIMIT,
        ),
        price_facet(e.price for e in rows),
    ]
