# product_search/engine.py
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from . import config as CFG
from .autocomplete import AutocompleteEngine
from .index.product_index import ProductIndex
from .loader import load_catalog
from .models import (
    AutocompleteQuery,
    IndexEntry,
    ProductRecord,
    SearchQuery,
    SearchResult,
    Suggestion,
    as_utc,
)
from .search import run_search
from .spelling import AutocompleteSuggestions, LexiconSpeller, Speller, SuggestionProvider
from .synonyms import SynonymTable

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Engine:
    """
    Thin orchestration layer that owns and glues together:
      - the product index (ProductIndex),
      - the synonym table (SynonymTable),
      - the autocomplete trie (AutocompleteEngine),
      - the search pipeline (search.run_search),
      - two swappable collaborators: a suggestion provider (related queries
        for a search) and a speller ("did you mean").

    Public API (used by CLI/Flask):
      * build(roots):             read catalog feeds -> index -> seed autocomplete
      * load_catalog(records):    same, from records already in memory
      * index_product / remove_product
      * search(query)             -> SearchResult
      * add_synonyms(word, list)  (replaces, never merges)
      * add_suggestion / get_suggestions

    Each structure has its own readers-writer lock, so one Engine can serve
    concurrent request threads.
    """

    # ------------- lifecycle -------------

    def __init__(
        self,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        suggestion_provider: Optional[SuggestionProvider] = None,
        speller: Optional[Speller] = None,
    ) -> None:
        self._clock = clock or _utcnow
        self.index = ProductIndex(clock=self._clock)
        self.synonyms = SynonymTable()
        self.autocomplete = AutocompleteEngine()
        self.suggestion_provider: SuggestionProvider = suggestion_provider or AutocompleteSuggestions(self.autocomplete)
        self.speller: Speller = speller or LexiconSpeller(self.index.lexicon, self.index.term_frequencies)

    # /* ~~~ Read catalog feeds from files/folders and index them ~~~ */
    def build(self, roots: Iterable[str], *, seed_suggestions: bool = True, verbose: bool = False) -> int:
        if verbose or CFG.VERBOSE:
            logging.basicConfig(level=logging.INFO)

        roots = list(roots)
        if not roots:
            raise ValueError("build(): at least one catalog path is required")

        log.info("Loading catalog from %s", roots)
        records = load_catalog(roots)
        n = self.load_catalog(records, seed_suggestions=seed_suggestions)
        log.info("Engine build() complete: products=%d suggestions=%d", len(self.index), len(self.autocomplete))
        return n

    # /* ~~~ Index records and (optionally) seed autocomplete from them ~~~ */
    def load_catalog(self, records: Iterable[Union[ProductRecord, Dict[str, Any]]], *, seed_suggestions: bool = True) -> int:
        indexed: Dict[str, ProductRecord] = {}
        for raw in records:
            rec = raw if isinstance(raw, ProductRecord) else ProductRecord.from_dict(raw)
            self.index.index_product(rec)
            indexed[rec.id] = rec  # later duplicates win, same as the index
        if seed_suggestions:
            self._seed_suggestions(indexed.values())
        return len(indexed)

    # ------------- writes -------------

    def index_product(self, record: Union[ProductRecord, Dict[str, Any]]) -> IndexEntry:
        rec = record if isinstance(record, ProductRecord) else ProductRecord.from_dict(record)
        return self.index.index_product(rec)

    def remove_product(self, product_id: str) -> bool:
        return self.index.remove_product(product_id)

    def add_synonyms(self, word: str, synonyms: Iterable[str]) -> None:
        self.synonyms.set(word, synonyms)

    def add_suggestion(
        self,
        text: str,
        type: str,
        popularity: float = 0,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Suggestion:
        return self.autocomplete.add_suggestion(text, type, popularity, metadata)

    # ------------- queries -------------

    # /* ~~~ Full-text search with filters, sort, facets and pagination ~~~ */
    def search(self, query: Union[SearchQuery, Dict[str, Any]]) -> SearchResult:
        q = query if isinstance(query, SearchQuery) else SearchQuery.from_dict(query)
        entries, records = self.index.snapshot()
        return run_search(
            q,
            entries=entries,
            records=records,
            synonyms=self.synonyms.snapshot(),
            now=as_utc(self._clock()),
            suggest=self.suggestion_provider,
            speller=self.speller,
        )

    def get_suggestions(
        self,
        query: Union[AutocompleteQuery, Dict[str, Any], str],
        limit: Optional[int] = None,
    ) -> List[Suggestion]:
        if isinstance(query, str):
            q = AutocompleteQuery(query=query, limit=CFG.SUGGESTION_LIMIT if limit is None else limit)
        elif isinstance(query, AutocompleteQuery):
            q = query
        else:
            q = AutocompleteQuery.from_dict(query)
        return self.autocomplete.get_suggestions(q)

    def stats(self) -> Dict[str, int]:
        return {
            "products": len(self.index),
            "synonyms": len(self.synonyms),
            "suggestions": len(self.autocomplete),
        }

    # ------------- internals -------------

    def _seed_suggestions(self, records: Iterable[ProductRecord]) -> None:
        """Product names by sales; categories and brands by product count."""
        categories: Counter = Counter()
        brands: Counter = Counter()
        for rec in records:
            if rec.name:
                self.autocomplete.add_suggestion(rec.name, "product", rec.sales, {"productId": rec.id})
            if rec.category:
                categories[rec.category] += 1
            if rec.brand:
                brands[rec.brand] += 1
        for name, n in categories.items():
            self.autocomplete.add_suggestion(name, "category", n)
        for name, n in brands.items():
            self.autocomplete.add_suggestion(name, "brand", n)
        log.info("Seeded autocomplete: categories=%d brands=%d", len(categories), len(brands))
