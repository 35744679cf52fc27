from __future__ import annotations
import bisect
import logging
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Protocol, Sequence, Tuple

from . import config as CFG
from .models import AutocompleteQuery
from .normalize import tokenize

if TYPE_CHECKING:  # pragma: no cover
    from .autocomplete import AutocompleteEngine

log = logging.getLogger(__name__)

# An edit near the start of a word costs more; past the first few letters
# every edit costs the floor.
_SWAP_COST = (6, 1)       # cost = max(6 - pos, 1)
_GAP_COST = (12, 2)       # cost = max(12 - 2 * pos, 2), for an added or missing letter

# How far either side of the bisect point we look for 1-edit neighbours
_LEXICON_BAND = 3000


class SuggestionProvider(Protocol):
    """query -> related query strings, attached to SearchResult.suggestions."""
    def __call__(self, query: str) -> List[str]: ...


class Speller(Protocol):
    """query -> corrected query, or None when nothing better is known."""
    def __call__(self, query: str) -> Optional[str]: ...


# ---------------------------------------------------------------- 1-edit matching

def _single_edit(word: str, term: str) -> Optional[Tuple[str, int]]:
    """
    Locate the one edit turning `word` into lexicon `term`.

    Returns ("swap" | "extra" | "missing", 1-based position in `word`), or
    None when the two are equal or more than one edit apart. Both words
    share a prefix up to the edit and must agree again right after it.
    """
    if word == term or abs(len(word) - len(term)) > 1:
        return None
    pos = 0
    for a, b in zip(word, term):
        if a != b:
            break
        pos += 1
    if len(word) == len(term):
        kind, tail_w, tail_t = "swap", word[pos + 1:], term[pos + 1:]
    elif len(word) > len(term):
        kind, tail_w, tail_t = "extra", word[pos + 1:], term[pos:]
    else:
        kind, tail_w, tail_t = "missing", word[pos:], term[pos + 1:]
    return (kind, pos + 1) if tail_w == tail_t else None


def _edit_cost(kind: str, pos: int) -> int:
    if kind == "swap":
        base, floor = _SWAP_COST
        return max(base - pos, floor)
    base, floor = _GAP_COST
    return max(base - 2 * pos, floor)


def within_1_edit(a: str, b: str) -> Tuple[bool, int]:
    """
    (ok, penalty): ok iff a and b differ by at most one substitution or one
    added/missing letter. Earlier edits cost more; penalty is <= 0.
    """
    if a == b:
        return True, 0
    edit = _single_edit(a, b)
    if edit is None:
        return False, 0
    return True, -_edit_cost(*edit)


def correct_token(tok: str, lexicon: Sequence[str], freq: Dict[str, int]) -> Tuple[str, int]:
    """
    Best lexicon term within one edit of `tok`, else `tok` itself.

    Preference:
      1) higher term frequency
      2) less severe penalty (closer to 0)
      3) lexicographic
    """
    i = bisect.bisect_left(lexicon, tok)
    if i < len(lexicon) and lexicon[i] == tok:
        return tok, 0

    lo = max(0, i - _LEXICON_BAND)
    hi = min(len(lexicon), i + _LEXICON_BAND)
    best_term: Optional[str] = None
    best_tf = -1
    best_pen = -10_000
    for term in lexicon[lo:hi]:
        if abs(len(term) - len(tok)) > 1:
            continue
        ok, pen = within_1_edit(tok, term)
        if not ok:
            continue
        tf = freq.get(term, 0)
        if (best_term is None
                or tf > best_tf
                or (tf == best_tf and pen > best_pen)
                or (tf == best_tf and pen == best_pen and term < best_term)):
            best_term, best_tf, best_pen = term, tf, pen
    if best_term is None:
        return tok, 0
    return best_term, best_pen


# ---------------------------------------------------------------- default collaborators

class LexiconSpeller:
    """
    "Did you mean": corrects each query token by at most one edit against the
    words currently in the product index. Best effort only.
    """

    def __init__(self, lexicon: Callable[[], List[str]], frequencies: Callable[[], Dict[str, int]]) -> None:
        self._lexicon = lexicon
        self._frequencies = frequencies

    def __call__(self, query: str) -> Optional[str]:
        toks = tokenize(query)
        if not toks:
            return None
        lexicon = self._lexicon()
        if not lexicon:
            return None
        freq = self._frequencies()
        corrected = [correct_token(t, lexicon, freq)[0] for t in toks]
        if corrected == toks:
            return None
        log.debug("did-you-mean %r -> %r", query, corrected)
        return " ".join(corrected)


class AutocompleteSuggestions:
    """Search-result suggestions taken from the autocomplete trie."""

    def __init__(self, autocomplete: "AutocompleteEngine", limit: int = CFG.SEARCH_SUGGESTION_LIMIT) -> None:
        self._autocomplete = autocomplete
        self._limit = limit

    def __call__(self, query: str) -> List[str]:
        hits = self._autocomplete.get_suggestions(AutocompleteQuery(query=query, limit=self._limit))
        return [s.text for s in hits]
