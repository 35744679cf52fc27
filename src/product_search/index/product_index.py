from __future__ import annotations
import logging
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Set, Tuple

from ..locks import ReadWriteLock
from ..models import IndexEntry, ProductRecord, as_utc
from ..normalize import tokenize

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductIndex:
    """
    In-memory product index.

    Keeps three views keyed by product id, all updated together under one
    write lock:
      - IndexEntry (tokens + the fields scoring/filtering/sorting read)
      - ProductRecord (what result rows are rendered from)
      - term postings (token -> ids), the lexicon for query correction
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._entries: Dict[str, IndexEntry] = {}
        self._records: Dict[str, ProductRecord] = {}
        self._postings: Dict[str, Set[str]] = defaultdict(set)
        self._clock = clock
        self._lock = ReadWriteLock()

    # ---- Build ----
    def index_product(self, record: ProductRecord) -> IndexEntry:
        """
        Store or fully replace the entry for record.id. No field merging.
        A record without created_at keeps the creation time of the entry it
        replaces (or gets "now" the first time), so reindexing is idempotent.
        """
        tokens = tuple(tokenize(f"{record.name} {record.description}"))
        with self._lock.write():
            old = self._entries.get(record.id)
            if record.created_at is None:
                record = replace(record, created_at=old.created_at if old else as_utc(self._clock()))
            entry = self._entry_for(record, tokens)
            if old is not None:
                self._unpost(old)
            self._entries[record.id] = entry
            self._records[record.id] = record
            for tok in set(entry.tokens):
                self._postings[tok].add(entry.id)
        log.debug("indexed %s tokens=%d replaced=%s", record.id, len(entry.tokens), old is not None)
        return entry

    @staticmethod
    def _entry_for(record: ProductRecord, tokens: Tuple[str, ...]) -> IndexEntry:
        assert record.created_at is not None
        return IndexEntry(
            id=record.id,
            tokens=tokens,
            category=record.category,
            brand=record.brand,
            price=float(record.price),
            rating=float(record.rating),
            review_count=int(record.review_count),
            in_stock=record.stock > 0,
            popularity=float(record.sales),
            created_at=record.created_at,
        )

    def remove_product(self, product_id: str) -> bool:
        with self._lock.write():
            entry = self._entries.pop(product_id, None)
            self._records.pop(product_id, None)
            if entry is None:
                return False
            self._unpost(entry)
        log.debug("removed %s", product_id)
        return True

    # ---- Query ----
    def get(self, product_id: str) -> Optional[IndexEntry]:
        with self._lock.read():
            return self._entries.get(product_id)

    def record(self, product_id: str) -> Optional[ProductRecord]:
        with self._lock.read():
            return self._records.get(product_id)

    def snapshot(self) -> Tuple[Dict[str, IndexEntry], Dict[str, ProductRecord]]:
        """Consistent copies of entries and records for one search call."""
        with self._lock.read():
            return dict(self._entries), dict(self._records)

    def term_frequencies(self) -> Dict[str, int]:
        """token -> number of indexed products containing it."""
        with self._lock.read():
            return {tok: len(ids) for tok, ids in self._postings.items()}

    def lexicon(self) -> List[str]:
        with self._lock.read():
            return sorted(self._postings)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def __contains__(self, product_id: object) -> bool:
        with self._lock.read():
            return product_id in self._entries

    # ---- internals ----
    def _unpost(self, entry: IndexEntry) -> None:
        for tok in set(entry.tokens):
            ids = self._postings.get(tok)
            if ids is None:
                continue
            ids.discard(entry.id)
            if not ids:
                del self._postings[tok]

