import logging
from datetime import datetime, timedelta, timezone

import pytest

from product_search.filters import apply_filters, sort_candidates
from product_search.models import (
    Candidate,
    IndexEntry,
    PriceRange,
    ProductRecord,
    SearchFilters,
    SearchSort,
)

NOW = datetime(2026, 10, 1, tzinfo=timezone.utc)


def _entry(pid, **kw) -> IndexEntry:
    base = dict(
        id=pid, tokens=("difusor",), category="Difusores", brand="ZenLife",
        price=100.0, rating=4.0, review_count=10, in_stock=True,
        popularity=10.0, created_at=NOW,
    )
    base.update(kw)
    return IndexEntry(**base)


ENTRIES = {
    "cheap": _entry("cheap", price=39.9, rating=3.5, category="Óleos", brand="Aroma Brasil",
                    popularity=500, created_at=NOW - timedelta(days=90)),
    "mid": _entry("mid", price=129.9, rating=4.5, in_stock=False, popularity=300,
                  created_at=NOW - timedelta(days=10)),
    "edge": _entry("edge", price=200.0, rating=4.8, category="Kits", popularity=60,
                   created_at=NOW - timedelta(days=30)),
    "top": _entry("top", price=300.0, rating=5.0, category="Kits", brand="Casa Zen", popularity=300,
                  created_at=NOW - timedelta(days=1)),
}
CANDS = [Candidate("cheap", 10), Candidate("mid", 60), Candidate("edge", 30), Candidate("top", 60)]


def _ids(cands):
    return [c.product_id for c in cands]


# ---- filters ----

def test_no_filters_keeps_everything():
    assert _ids(apply_filters(CANDS, None, ENTRIES)) == ["cheap", "mid", "edge", "top"]
    assert _ids(apply_filters(CANDS, SearchFilters(), ENTRIES)) == ["cheap", "mid", "edge", "top"]


def test_category_membership():
    f = SearchFilters(category=("Kits", "Óleos"))
    assert _ids(apply_filters(CANDS, f, ENTRIES)) == ["cheap", "edge", "top"]


def test_price_range_is_inclusive_on_both_sides():
    f = SearchFilters(price_range=PriceRange(min=200, max=300))
    assert _ids(apply_filters(CANDS, f, ENTRIES)) == ["edge", "top"]
    f = SearchFilters(price_range=PriceRange(min=200.01, max=299.99))
    assert _ids(apply_filters(CANDS, f, ENTRIES)) == []


def test_minimum_rating():
    f = SearchFilters(rating=4.5)
    assert _ids(apply_filters(CANDS, f, ENTRIES)) == ["mid", "edge", "top"]


def test_in_stock_is_exact_equality():
    assert _ids(apply_filters(CANDS, SearchFilters(in_stock=False), ENTRIES)) == ["mid"]
    assert _ids(apply_filters(CANDS, SearchFilters(in_stock=True), ENTRIES)) == ["cheap", "edge", "top"]


def test_filters_are_conjunctive():
    f = SearchFilters(category=("Kits",), rating=4.9, in_stock=True)
    assert _ids(apply_filters(CANDS, f, ENTRIES)) == ["top"]


def test_brand_tags_and_on_sale_use_records():
    records = {
        "cheap": ProductRecord(id="cheap", name="x", price=39.9, tags=("lavanda",), compare_at_price=49.9),
        "top": ProductRecord(id="top", name="y", price=300.0, tags=("kit", "presente")),
    }
    assert _ids(apply_filters(CANDS, SearchFilters(brand=("Casa Zen",)), ENTRIES, records)) == ["top"]
    assert _ids(apply_filters(CANDS, SearchFilters(tags=("presente", "lavanda")), ENTRIES, records)) == ["cheap", "top"]
    assert _ids(apply_filters(CANDS, SearchFilters(on_sale=True), ENTRIES, records)) == ["cheap"]


def test_flag_filters_from_json_must_be_booleans():
    assert SearchFilters.from_dict({"inStock": False, "onSale": True}) == SearchFilters(in_stock=False, on_sale=True)
    for bad in ({"inStock": "false"}, {"onSale": "true"}, {"inStock": 0}):
        with pytest.raises(ValueError):
            SearchFilters.from_dict(bad)


def test_missing_entry_is_dropped_and_logged(caplog):
    cands = CANDS + [Candidate("ghost", 99)]
    with caplog.at_level(logging.WARNING, logger="product_search.filters"):
        out = apply_filters(cands, None, ENTRIES)
    assert "ghost" not in _ids(out)
    assert any("ghost" in r.getMessage() for r in caplog.records)


# ---- sort ----

def test_default_is_score_descending_and_stable():
    assert _ids(sort_candidates(CANDS, None, ENTRIES)) == ["mid", "top", "edge", "cheap"]


def test_sort_by_price():
    assert _ids(sort_candidates(CANDS, SearchSort("price", "asc"), ENTRIES)) == ["cheap", "mid", "edge", "top"]
    assert _ids(sort_candidates(CANDS, SearchSort("price", "desc"), ENTRIES)) == ["top", "edge", "mid", "cheap"]


def test_sort_by_rating_defaults_to_descending():
    assert _ids(sort_candidates(CANDS, SearchSort("rating"), ENTRIES)) == ["top", "edge", "mid", "cheap"]


def test_sort_ties_keep_candidate_order_both_ways():
    # mid and top share popularity 300
    assert _ids(sort_candidates(CANDS, SearchSort("popularity", "desc"), ENTRIES)) == ["cheap", "mid", "top", "edge"]
    assert _ids(sort_candidates(CANDS, SearchSort("popularity", "asc"), ENTRIES)) == ["edge", "mid", "top", "cheap"]


def test_newest():
    assert _ids(sort_candidates(CANDS, SearchSort("newest", "desc"), ENTRIES)) == ["top", "mid", "edge", "cheap"]
    assert _ids(sort_candidates(CANDS, SearchSort("newest", "asc"), ENTRIES)) == ["cheap", "edge", "mid", "top"]


def test_unknown_field_falls_back_to_score_descending():
    for order in ("asc", "desc"):
        assert _ids(sort_candidates(CANDS, SearchSort("bogus", order), ENTRIES)) == ["mid", "top", "edge", "cheap"]
