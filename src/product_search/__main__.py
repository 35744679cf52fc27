from __future__ import annotations
import argparse, json
from product_search import Engine, Pagination, SearchQuery, SearchSort
from product_search.config import DEFAULT_LIMIT, SUGGESTION_LIMIT

def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Product search CLI (Engine-backed)")
    p.add_argument("--catalog", nargs="+", required=True, help="Catalog feed files or folders (.json/.jsonl)")
    p.add_argument("--q", default=None, help="Single search to run once")
    p.add_argument("--suggest", default=None, help="Autocomplete a prefix once")
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--limit", type=int, default=DEFAULT_LIMIT)
    p.add_argument("--sort", default=None, help="price | rating | popularity | newest")
    p.add_argument("--order", choices=["asc", "desc"], default="desc")
    p.add_argument("-k", type=int, default=SUGGESTION_LIMIT, help="Max autocomplete suggestions")
    p.add_argument("--repl", action="store_true", help="Interactive search loop after load")
    p.add_argument("--json", action="store_true", help="Emit JSON")
    p.add_argument("--verbose", action="store_true")

    args = p.parse_args(argv)
    if args.page < 1 or args.limit < 1:
        p.error("--page and --limit must be >= 1")

    eng = Engine()
    try:
        eng.build(args.catalog, verbose=args.verbose)
    except (FileNotFoundError, ValueError) as e:
        p.error(f"cannot load catalog: {e}")

    def run_search(q: str):
        res = eng.search(SearchQuery(
            query=q,
            sort=SearchSort(args.sort, args.order) if args.sort else None,
            pagination=Pagination(page=args.page, limit=args.limit),
        ))
        if args.json:
            print(json.dumps(res.to_dict(), ensure_ascii=False, indent=2))
            return
        if not res.products:
            print("(no matches)")
            if res.did_you_mean:
                print(f"did you mean: {res.did_you_mean}?")
            return
        print(f"{res.total_results} results • page {res.pagination.page}/{res.pagination.total_pages} • {res.search_time:.1f} ms")
        print("#  Score    Price     Id          Name")
        for i, r in enumerate(res.products, 1):
            print(f"{i:<2} {r.relevance_score:<8.1f} {r.price:<9.2f} {r.id:<11} {r.name}")

    def run_suggest(q: str):
        rows = eng.get_suggestions(q, limit=args.k)
        if args.json:
            print(json.dumps([s.to_dict() for s in rows], ensure_ascii=False, indent=2))
            return
        if not rows:
            print("(no suggestions)"); return
        for s in rows:
            print(f"{s.popularity:<8g} {s.type:<9} {s.text}")

    if args.q is not None:
        run_search(args.q)
    if args.suggest is not None:
        run_suggest(args.suggest)

    if args.repl:
        print("Type a query (empty line to exit, '?prefix' to autocomplete).")
        while True:
            try:
                q = input("> ").strip()
            except (EOFError, KeyboardInterrupt):
                break
            if not q:
                break
            if q.startswith("?"):
                run_suggest(q[1:])
            else:
                run_search(q)

    return 0

if __name__ == "__main__":
    raise SystemExit(main())
