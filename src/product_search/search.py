from __future__ import annotations
import logging
import math
import time
from datetime import datetime
from typing import List, Mapping, Optional, Sequence, Tuple, TypeVar

from . import config as CFG
from .facets import build_facets
from .filters import apply_filters, sort_candidates
from .models import (
    Candidate,
    IndexEntry,
    PageInfo,
    Pagination,
    ProductRecord,
    ProductSearchResult,
    SearchQuery,
    SearchResult,
)
from .normalize import tokenize
from .scoring import matched_tokens, score_candidates
from .spelling import Speller, SuggestionProvider

log = logging.getLogger(__name__)

T = TypeVar("T")


def paginate(items: Sequence[T], pagination: Optional[Pagination]) -> Tuple[List[T], PageInfo]:
    """
    1-based pages. A page past the end is an empty slice, never an error;
    total_pages is ceil(len(items) / limit), so 0 for no items.
    """
    page = pagination.page if pagination else CFG.DEFAULT_PAGE
    limit = pagination.limit if pagination else CFG.DEFAULT_LIMIT
    start = (page - 1) * limit
    return list(items[start:start + limit]), PageInfo(
        page=page,
        limit=limit,
        total_pages=math.ceil(len(items) / limit),
    )


def render_row(
    record: ProductRecord,
    entry: IndexEntry,
    score: float,
    highlights: Optional[List[str]] = None,
) -> ProductSearchResult:
    return ProductSearchResult(
        id=record.id,
        name=record.name,
        description=record.description,
        price=record.price,
        compare_at_price=record.compare_at_price,
        images=list(record.images),
        rating=entry.rating,
        review_count=entry.review_count,
        in_stock=entry.in_stock,
        category=entry.category,
        brand=entry.brand,
        tags=list(record.tags),
        relevance_score=score,
        highlights=highlights,
    )


def run_search(
    query: SearchQuery,
    *,
    entries: Mapping[str, IndexEntry],
    records: Mapping[str, ProductRecord],
    synonyms: Mapping[str, Sequence[str]],
    now: datetime,
    suggest: Optional[SuggestionProvider] = None,
    speller: Optional[Speller] = None,
) -> SearchResult:
    """
    tokenize -> score -> filter -> sort -> paginate -> facets -> assemble.

    Operates on snapshots handed in by the caller; nothing here takes a lock.
    """
    t0 = time.perf_counter()

    q_tokens = tokenize(query.query)
    candidates: List[Candidate] = score_candidates(q_tokens, entries, synonyms, query.boost, now)
    candidates = apply_filters(candidates, query.filters, entries, records)
    candidates = sort_candidates(candidates, query.sort, entries)
    page, page_info = paginate(candidates, query.pagination)

    products: List[ProductSearchResult] = []
    for c in page:
        entry = entries[c.product_id]
        record = records.get(c.product_id)
        if record is None:
            log.warning("candidate %s has no catalog record; dropped from page", c.product_id)
            continue
        hl = matched_tokens(q_tokens, entry.tokens, synonyms)
        products.append(render_row(record, entry, c.score, hl or None))

    facets = build_facets(candidates, entries, query.filters)
    suggestions = suggest(query.query) if (suggest and query.query.strip()) else []
    did_you_mean = speller(query.query) if (speller and not candidates) else None

    elapsed_ms = (time.perf_counter() - t0) * 1000.0
    log.debug("search %r tokens=%s hits=%d in %.2fms", query.query, q_tokens, len(candidates), elapsed_ms)
    return SearchResult(
        products=products,
        facets=facets,
        suggestions=suggestions,
        did_you_mean=did_you_mean,
        total_results=len(candidates),
        search_time=elapsed_ms,
        pagination=page_info,
    )
