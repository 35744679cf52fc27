from __future__ import annotations
from typing import Dict, Iterable, Tuple

from .locks import ReadWriteLock

_EMPTY: Tuple[str, ...] = ()


class SynonymTable:
    """word -> ordered synonyms. Read during scoring, written only via set()."""

    def __init__(self) -> None:
        self._table: Dict[str, Tuple[str, ...]] = {}
        self._lock = ReadWriteLock()

    def set(self, word: str, synonyms: Iterable[str]) -> None:
        """Replace (never merge) the synonym list for `word`. Order kept, repeats dropped."""
        ordered = tuple(dict.fromkeys(synonyms))
        with self._lock.write():
            self._table[word] = ordered

    def get(self, word: str) -> Tuple[str, ...]:
        with self._lock.read():
            return self._table.get(word, _EMPTY)

    def snapshot(self) -> Dict[str, Tuple[str, ...]]:
        """Consistent copy for one search call."""
        with self._lock.read():
            return dict(self._table)

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._table)
