from datetime import datetime, timedelta, timezone

import pytest

from product_search import Engine, ProductRecord, SearchBoost, SearchQuery, SearchSort

NOW = datetime(2026, 10, 1, 12, tzinfo=timezone.utc)

CATALOG = [
    {"id": "p1", "name": "Difusor Aromático", "description": "Difusor ultrassônico com LED",
     "category": "Difusores", "brand": "ZenLife", "price": 129.9, "stock": 5,
     "rating": 4.5, "reviewCount": 285, "sales": 300, "images": ["/products/difusor.jpg"],
     "tags": ["aromaterapia"], "createdAt": "2026-09-25T00:00:00Z"},
    {"id": "p2", "name": "Óleo Essencial Lavanda", "description": "Óleo essencial puro de lavanda",
     "category": "Óleos", "brand": "Aroma Brasil", "price": 39.9, "compareAtPrice": 49.9,
     "stock": 0, "rating": 4.8, "sales": 500, "createdAt": "2026-01-10T00:00:00Z"},
    {"id": "p3", "name": "Difusor de Varetas", "description": "Difusor de ambiente com varetas de bambu",
     "category": "Difusores", "brand": "Casa Zen", "price": 59.9, "stock": 12,
     "rating": 4.1, "sales": 120, "createdAt": "2026-06-01T00:00:00Z"},
    {"id": "p4", "name": "Vela Aromática", "description": "Vela aromática de soja",
     "category": "Velas", "brand": "ZenLife", "price": 45.0, "stock": 3, "rating": 3.9, "sales": 80},
    {"id": "p5", "name": "Kit Aromaterapia", "description": "Kit com difusor e três óleos essenciais",
     "category": "Kits", "brand": "Aroma Brasil", "price": 249.9, "stock": 2, "rating": 4.7, "sales": 60},
]


def _engine() -> Engine:
    eng = Engine(clock=lambda: NOW)
    eng.load_catalog(CATALOG)
    return eng


def _ids(result):
    return [p.id for p in result.products]


def _facet(result, field):
    return next(f for f in result.facets if f.field == field)


@pytest.mark.e2e
def test_single_product_is_found():
    eng = Engine()
    eng.index_product({"id": "p1", "name": "Difusor Aromático", "description": "Difusor ultrassônico com LED",
                       "category": "Difusores", "brand": "ZenLife", "price": 129.9, "stock": 5})
    res = eng.search({"query": "difusor"})
    assert res.total_results == 1
    assert _ids(res) == ["p1"]
    assert res.products[0].relevance_score > 0
    assert res.products[0].in_stock is True


@pytest.mark.e2e
def test_price_filter_can_exclude_everything():
    eng = Engine()
    eng.index_product({"id": "p1", "name": "Difusor Aromático", "description": "Difusor ultrassônico com LED",
                       "category": "Difusores", "brand": "ZenLife", "price": 129.9, "stock": 5})
    res = eng.search({"query": "difusor", "filters": {"priceRange": {"min": 200, "max": 300}}})
    assert res.total_results == 0
    assert res.products == []


@pytest.mark.e2e
def test_higher_score_comes_first_without_sort():
    eng = Engine()
    eng.index_product({"id": "low", "name": "Difusores", "description": "Kit madeira", "price": 10, "stock": 1})
    eng.index_product({"id": "high", "name": "Difusor", "description": "Bambu natural", "price": 10, "stock": 1})
    res = eng.search(SearchQuery(query="difusor"))
    assert [(p.id, p.relevance_score) for p in res.products] == [("high", 30), ("low", 10)]


@pytest.mark.e2e
def test_empty_query_yields_no_results():
    res = _engine().search({"query": "", "pagination": {"page": 1, "limit": 20}})
    assert res.total_results == 0
    assert res.pagination.total_pages == 0
    assert res.suggestions == []
    assert res.did_you_mean is None


@pytest.mark.e2e
def test_full_result_shape_and_ordering():
    res = _engine().search({"query": "difusor"})
    # p1 and p3 both score 60, p5 scores 30; ties keep index order
    assert [(p.id, p.relevance_score) for p in res.products] == [("p1", 60), ("p3", 60), ("p5", 30)]
    first = res.to_dict()["products"][0]
    assert first["name"] == "Difusor Aromático"
    assert first["images"] == ["/products/difusor.jpg"]
    assert first["reviewCount"] == 285
    assert first["highlights"] == ["difusor"]
    assert "compareAtPrice" not in first
    assert res.to_dict()["pagination"] == {"page": 1, "limit": 20, "totalPages": 1}
    assert res.search_time >= 0


@pytest.mark.e2e
def test_facets_follow_filtered_set():
    res = _engine().search({"query": "difusor", "filters": {"category": ["Difusores"]}})
    assert _ids(res) == ["p1", "p3"]
    cat = _facet(res, "category")
    assert [(v.value, v.count, v.selected) for v in cat.values] == [("Difusores", 2, True)]
    price = _facet(res, "price")
    assert [v.count for v in price.values] == [0, 1, 1, 0]


@pytest.mark.e2e
@pytest.mark.parametrize("filters", [
    None,
    {"inStock": True},
    {"category": ["Difusores", "Kits"]},
    {"priceRange": {"min": 50, "max": 250}},
    {"rating": 4.5},
])
def test_facet_counts_match_filtered_total(filters):
    q = {"query": "difusor aromático óleo vela kit"}
    if filters:
        q["filters"] = filters
    res = _engine().search(q)
    for field in ("category", "price"):
        assert sum(v.count for v in _facet(res, field).values) == res.total_results


@pytest.mark.e2e
def test_sort_by_price_and_pagination():
    eng = _engine()
    q = {"query": "difusor aromático óleo vela kit", "sort": {"field": "price", "order": "asc"},
         "pagination": {"page": 1, "limit": 2}}
    res = eng.search(q)
    assert res.total_results == 5
    assert _ids(res) == ["p2", "p4"]
    assert res.pagination.total_pages == 3
    q["pagination"]["page"] = 3
    assert _ids(eng.search(q)) == ["p5"]
    q["pagination"]["page"] = 4
    assert _ids(eng.search(q)) == []


@pytest.mark.e2e
def test_newness_boost_reorders_ties():
    eng = _engine()
    res = eng.search({"query": "difusor", "boost": {"newProducts": 10}})
    # p1 is 6.5 days old, p3 is months old
    assert _ids(res)[0] == "p1"
    assert res.products[0].relevance_score == pytest.approx(60 + 10 * (1 - 6.5 / 30))


@pytest.mark.e2e
def test_synonyms_are_replaced_not_merged():
    eng = _engine()
    eng.add_synonyms("perfume", ["vela"])
    assert _ids(eng.search({"query": "perfume"})) == ["p4"]
    eng.add_synonyms("perfume", ["bambu"])
    assert _ids(eng.search({"query": "perfume"})) == ["p3"]
    assert eng.synonyms.get("perfume") == ("bambu",)


@pytest.mark.e2e
def test_reindex_is_idempotent_and_replaces():
    eng = _engine()
    before = eng.index.get("p4")
    res_before = eng.search({"query": "vela"}).to_dict()
    eng.index_product(CATALOG[3])
    assert eng.index.get("p4") == before
    res_after = eng.search({"query": "vela"}).to_dict()
    res_before.pop("searchTime"); res_after.pop("searchTime")
    assert res_before == res_after

    eng.index_product({**CATALOG[3], "name": "Castiçal", "description": "Metal dourado"})
    assert eng.search({"query": "vela"}).total_results == 0
    assert eng.index.get("p4").tokens == ("castiçal", "metal", "dourado")


@pytest.mark.e2e
def test_remove_product():
    eng = _engine()
    assert eng.remove_product("p1") is True
    assert eng.remove_product("p1") is False
    assert "p1" not in eng.index and "p3" in eng.index
    assert _ids(eng.search({"query": "difusor"})) == ["p3", "p5"]


@pytest.mark.e2e
def test_search_suggestions_and_did_you_mean():
    eng = _engine()
    res = eng.search({"query": "arom"})
    assert "Difusor Aromático" in res.suggestions
    assert len(res.suggestions) <= 5

    miss = eng.search({"query": "difusr"})
    assert miss.total_results == 0
    assert miss.did_you_mean == "difusor"
    assert "didYouMean" in miss.to_dict()


@pytest.mark.e2e
def test_collaborators_are_swappable():
    eng = Engine(suggestion_provider=lambda q: [q.upper()], speller=lambda q: None)
    eng.load_catalog(CATALOG)
    res = eng.search({"query": "zzz"})
    assert res.suggestions == ["ZZZ"]
    assert res.did_you_mean is None


@pytest.mark.e2e
def test_seeded_autocomplete():
    eng = _engine()
    rows = eng.get_suggestions({"query": "zen"})
    assert [(s.text, s.type, s.popularity) for s in rows][:2] == [("ZenLife", "brand", 2), ("Casa Zen", "brand", 1)]
    product = eng.get_suggestions("lavanda")[0]
    assert product.metadata == {"productId": "p2"}
    assert eng.get_suggestions("zen", limit=0) == []
    assert len(eng.get_suggestions("zen", limit=1)) == 1


@pytest.mark.e2e
def test_invalid_query_input_raises_value_error():
    eng = _engine()
    with pytest.raises(ValueError):
        eng.search({"query": "difusor", "pagination": {"page": 0, "limit": 10}})
    with pytest.raises(ValueError):
        eng.search({"query": "difusor", "sort": {"field": "price", "order": "up"}})
    with pytest.raises(ValueError):
        eng.index_product({"name": "sem id", "price": 1})
    with pytest.raises(ValueError):
        eng.index_product({"id": "x", "name": "preço ruim", "price": "caro"})


@pytest.mark.e2e
def test_naive_and_aware_timestamps_mix():
    eng = Engine(clock=lambda: datetime(2026, 10, 1, 12))  # naive clock
    eng.index_product(ProductRecord(id="a", name="Vela de Soja", created_at=datetime(2026, 9, 1)))
    eng.index_product({"id": "b", "name": "Vela de Cera", "createdAt": "2026-09-02T00:00:00Z"})
    eng.index_product({"id": "c", "name": "Vela Rústica"})
    assert eng.index.get("a").created_at == datetime(2026, 9, 1, tzinfo=timezone.utc)
    assert eng.index.get("c").created_at == datetime(2026, 10, 1, 12, tzinfo=timezone.utc)

    newest = eng.search(SearchQuery(query="vela", sort=SearchSort("newest", "desc")))
    assert _ids(newest) == ["c", "b", "a"]

    boosted = eng.search(SearchQuery(query="vela", boost=SearchBoost(new_products=10)))
    assert _ids(boosted) == ["c", "b", "a"]
    assert boosted.products[0].relevance_score == pytest.approx(40.0)
    assert boosted.products[2].relevance_score == pytest.approx(30.0)
