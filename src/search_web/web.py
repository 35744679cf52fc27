from __future__ import annotations
import argparse
import logging
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request

from product_search import Engine, SearchQuery
from product_search.config import SUGGESTION_LIMIT
from product_search.models import (
    AutocompleteQuery,
    Pagination,
    PriceRange,
    SearchFilters,
    SearchSort,
)

log = logging.getLogger(__name__)

app = Flask(__name__)
_engine: Engine | None = None

_TRUE = {"1", "true", "yes"}
_FALSE = {"0", "false", "no"}


def attach_engine(engine: Engine) -> None:
    global _engine
    _engine = engine


def _require_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call attach_engine() first.")
    return _engine


# ---------- request parsing ----------

def _flag(name: str) -> Optional[bool]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    raw = raw.lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"{name} must be true or false, got {raw!r}")


def _float(name: str) -> Optional[float]:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def _query_from_args() -> SearchQuery:
    """GET /api/search?q=...&category=a&category=b&minPrice=..&sort=price&order=asc"""
    args = request.args
    lo, hi = _float("minPrice"), _float("maxPrice")
    filters = SearchFilters(
        category=tuple(args.getlist("category")) or None,
        brand=tuple(args.getlist("brand")) or None,
        tags=tuple(args.getlist("tag")) or None,
        price_range=PriceRange.from_dict({"min": lo, "max": hi}) if (lo is not None or hi is not None) else None,
        rating=_float("rating"),
        in_stock=_flag("inStock"),
        on_sale=_flag("onSale"),
    )
    sort_field = args.get("sort")
    return SearchQuery(
        query=args.get("q", "", type=str),
        filters=filters if filters != SearchFilters() else None,
        sort=SearchSort(sort_field, args.get("order", "desc")) if sort_field else None,
        pagination=Pagination.from_dict({"page": args.get("page"), "limit": args.get("limit")}),
    )


def _json_body() -> Any:
    data = request.get_json(silent=True)
    if data is None:
        raise ValueError("request body must be JSON")
    return data


# ---------- errors ----------

@app.errorhandler(ValueError)
def _bad_request(e: ValueError):
    return jsonify({"error": str(e)}), 400


@app.errorhandler(RuntimeError)
def _unavailable(e: RuntimeError):
    log.error("request failed: %s", e)
    return jsonify({"error": str(e)}), 503


# ---------- API ----------

@app.get("/api/health")
def api_health():
    eng = _require_engine()
    return jsonify({"ok": True, **eng.stats()})


@app.route("/api/search", methods=["GET", "POST"])
def api_search():
    eng = _require_engine()
    query = SearchQuery.from_dict(_json_body()) if request.method == "POST" else _query_from_args()
    return jsonify(eng.search(query).to_dict())


@app.get("/api/autocomplete")
def api_autocomplete():
    eng = _require_engine()
    q = request.args.get("q", "", type=str)
    k = request.args.get("limit", SUGGESTION_LIMIT, type=int)
    if not q:
        return jsonify([])
    rows = eng.get_suggestions(AutocompleteQuery(query=q, limit=k))
    return jsonify([s.to_dict() for s in rows])


@app.post("/api/products")
def api_index_products():
    eng = _require_engine()
    data = _json_body()
    rows = data if isinstance(data, list) else [data]
    for row in rows:
        eng.index_product(row)
    return jsonify({"indexed": len(rows)}), 201


@app.delete("/api/products/<product_id>")
def api_remove_product(product_id: str):
    eng = _require_engine()
    if not eng.remove_product(product_id):
        return jsonify({"error": f"unknown product {product_id!r}"}), 404
    return Response(status=204)


@app.post("/api/synonyms")
def api_add_synonyms():
    eng = _require_engine()
    data: Dict[str, Any] = _json_body()
    word = data.get("word")
    synonyms = data.get("synonyms")
    if not word or not isinstance(synonyms, list):
        raise ValueError("expected {'word': str, 'synonyms': [str, ...]}")
    eng.add_synonyms(str(word), [str(s) for s in synonyms])
    return Response(status=204)


@app.post("/api/suggestions")
def api_add_suggestion():
    eng = _require_engine()
    data: Dict[str, Any] = _json_body()
    text = data.get("text")
    if not text:
        raise ValueError("expected {'text': str, 'type': str, 'popularity'?: number}")
    s = eng.add_suggestion(str(text), str(data.get("type", "")), data.get("popularity") or 0, data.get("metadata"))
    return jsonify(s.to_dict()), 201


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Run the product search JSON API on top of Engine")
    ap.add_argument("--catalog", nargs="+", default=[], help="Catalog feed files or folders")
    ap.add_argument("--host", default="127.0.0.1")
    ap.add_argument("--port", type=int, default=8000)
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    eng = Engine()
    if args.catalog:
        eng.build(args.catalog, verbose=args.verbose)
    attach_engine(eng)

    # threaded: reads run concurrently, the engine's locks serialize writes
    app.run(host=args.host, port=args.port, debug=args.verbose, threaded=True)
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
