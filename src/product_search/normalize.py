from __future__ import annotations
import re
from typing import Iterable, List, Optional

from . import config as CFG

# Anything that is neither a word character nor whitespace becomes a space.
# \w is Unicode-aware, so "aromático" stays one token.
_PUNCT = re.compile(r"[^\w\s]")
_SPACES = re.compile(r"\s+")


def tokenize(text: Optional[str], stopwords: Optional[Iterable[str]] = None) -> List[str]:
    """
    Normalize free text into index tokens.

    Rules:
      * lowercase
      * punctuation/symbols replaced by a space
      * split on runs of whitespace
      * drop tokens of length <= 2 and stopwords

    Duplicates and source order are preserved. Empty input gives [].
    """
    if not text:
        return []
    stop = CFG.STOPWORDS if stopwords is None else frozenset(stopwords)
    cleaned = _PUNCT.sub(" ", text.lower())
    return [
        tok for tok in _SPACES.split(cleaned)
        if len(tok) >= CFG.MIN_TOKEN_LENGTH and tok not in stop
    ]


def normalize_only(text: Optional[str]) -> str:
    """Convenience: tokens joined by a single space."""
    return " ".join(tokenize(text))


def split_words(text: Optional[str]) -> List[str]:
    """Lowercase whitespace split, no filtering. Used by the autocomplete trie."""
    if not text:
        return []
    return text.lower().split()
