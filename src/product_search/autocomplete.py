from __future__ import annotations
import itertools
import logging
from typing import Any, Dict, List, Optional

from . import config as CFG
from .index.trie import SuggestionTrie
from .locks import ReadWriteLock
from .models import AutocompleteQuery, Suggestion
from .normalize import split_words

log = logging.getLogger(__name__)


class AutocompleteEngine:
    """
    Prefix autocomplete over a SuggestionTrie.

    add_suggestion() is a write (exclusive); get_suggestions() is a read and
    may run alongside other reads.
    """

    def __init__(self) -> None:
        self._trie = SuggestionTrie()
        self._lock = ReadWriteLock()
        self._seq = itertools.count(1)

    def add_suggestion(
        self,
        text: str,
        type: str,
        popularity: float = 0,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Suggestion:
        if type not in CFG.SUGGESTION_TYPES:
            raise ValueError(f"suggestion type must be one of {CFG.SUGGESTION_TYPES}, got {type!r}")
        tokens = split_words(text)
        with self._lock.write():
            suggestion = Suggestion(
                text=text,
                type=type,
                popularity=float(popularity or 0),
                metadata=metadata,
                seq=next(self._seq),
            )
            self._trie.insert(tokens, suggestion)
        log.debug("suggestion added: %r type=%s tokens=%d", text, type, len(tokens))
        return suggestion

    def get_suggestions(self, query: AutocompleteQuery) -> List[Suggestion]:
        """
        Complete the *last* space-separated word of the query. Ranked by
        popularity desc, ties in insertion order, truncated to query.limit.

        A blank query or one ending in a space has an empty last word, which
        lands on the root: the most popular suggestions overall.
        """
        if query.limit <= 0:
            return []
        last = query.query.lower().split(" ")[-1]
        with self._lock.read():
            found = self._trie.collect(last)
        found.sort(key=lambda s: (-s.popularity, s.seq))
        return found[:query.limit]

    def __len__(self) -> int:
        with self._lock.read():
            return self._trie.size
