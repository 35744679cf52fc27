from __future__ import annotations
import logging
from typing import Callable, Dict, List, Mapping, Optional

from .models import Candidate, IndexEntry, ProductRecord, SearchFilters, SearchSort

log = logging.getLogger(__name__)

# Sortable fields -> key on the backing entry
_SORT_KEYS: Dict[str, Callable[[IndexEntry], object]] = {
    "price": lambda e: e.price,
    "rating": lambda e: e.rating,
    "popularity": lambda e: e.popularity,
    "newest": lambda e: e.created_at,
}


def _passes(
    entry: IndexEntry,
    record: Optional[ProductRecord],
    filters: SearchFilters,
) -> bool:
    if filters.category and entry.category not in filters.category:
        return False
    if filters.price_range is not None:
        if entry.price < filters.price_range.min or entry.price > filters.price_range.max:
            return False
    if filters.rating is not None and entry.rating < filters.rating:
        return False
    if filters.in_stock is not None and entry.in_stock != filters.in_stock:
        return False
    if filters.brand and entry.brand not in filters.brand:
        return False
    if filters.tags:
        tags = record.tags if record is not None else ()
        if not any(t in tags for t in filters.tags):
            return False
    if filters.on_sale is not None:
        cap = record.compare_at_price if record is not None else None
        on_sale = cap is not None and cap > entry.price
        if on_sale != filters.on_sale:
            return False
    return True


def apply_filters(
    candidates: List[Candidate],
    filters: Optional[SearchFilters],
    entries: Mapping[str, IndexEntry],
    records: Optional[Mapping[str, ProductRecord]] = None,
) -> List[Candidate]:
    """
    Keep candidates that satisfy every given constraint (AND). Candidates
    whose entry is gone are dropped; that means the candidate list and the
    index went out of sync, so it is logged.
    """
    records = records or {}
    out: List[Candidate] = []
    for c in candidates:
        entry = entries.get(c.product_id)
        if entry is None:
            log.warning("candidate %s has no index entry; dropped", c.product_id)
            continue
        if filters is None or _passes(entry, records.get(c.product_id), filters):
            out.append(c)
    return out


def sort_candidates(
    candidates: List[Candidate],
    sort: Optional[SearchSort],
    entries: Mapping[str, IndexEntry],
) -> List[Candidate]:
    """
    Default and unknown fields: score descending. Known fields: the entry
    value, ascending for order="asc", descending otherwise. Python's sort is
    stable (also with reverse=True), so ties keep candidate order.
    """
    key_fn = _SORT_KEYS.get(sort.field) if sort is not None else None
    if key_fn is None:
        if sort is not None:
            log.debug("unknown sort field %r, ordering by relevance", sort.field)
        return sorted(candidates, key=lambda c: c.score, reverse=True)
    return sorted(
        candidates,
        key=lambda c: key_fn(entries[c.product_id]),
        reverse=sort.order != "asc",
    )
