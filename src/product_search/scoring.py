from __future__ import annotations
from datetime import datetime
from typing import Dict, List, Mapping, Optional, Sequence

from . import config as CFG
from .models import Candidate, IndexEntry, SearchBoost

_DAY_SECONDS = 86_400.0


def token_score(
    query_tokens: Sequence[str],
    entry_tokens: Sequence[str],
    synonyms: Mapping[str, Sequence[str]],
) -> float:
    """
    Pairwise, cumulative text score over query_tokens x entry_tokens:
      +10 when one token contains the other
      +20 more when they are equal
      +5  when the entry token is a synonym of the query token
    Every pair counts; a query token that hits many entry tokens compounds.
    """
    score = 0.0
    for q in query_tokens:
        syns = synonyms.get(q, ())
        for t in entry_tokens:
            if q in t or t in q:
                score += CFG.SUBSTRING_MATCH_SCORE
            if q == t:
                score += CFG.EXACT_MATCH_SCORE
            if t in syns:
                score += CFG.SYNONYM_MATCH_SCORE
    return score


def days_since(created_at: datetime, now: datetime) -> float:
    return (now - created_at).total_seconds() / _DAY_SECONDS


def boost_score(entry: IndexEntry, boost: Optional[SearchBoost], now: datetime) -> float:
    """Additive boosts; a missing or zero weight contributes nothing."""
    if boost is None:
        return 0.0
    extra = 0.0
    if boost.popular_products:
        extra += entry.popularity * boost.popular_products * CFG.POPULARITY_FACTOR
    if boost.new_products:
        days = days_since(entry.created_at, now)
        if days < CFG.NEWNESS_WINDOW_DAYS:
            extra += boost.new_products * (1 - days / CFG.NEWNESS_WINDOW_DAYS)
    if boost.high_rated:
        extra += entry.rating * boost.high_rated
    return extra


def relevance_score(
    query_tokens: Sequence[str],
    entry: IndexEntry,
    synonyms: Mapping[str, Sequence[str]],
    boost: Optional[SearchBoost],
    now: datetime,
) -> float:
    return token_score(query_tokens, entry.tokens, synonyms) + boost_score(entry, boost, now)


def score_candidates(
    query_tokens: Sequence[str],
    entries: Dict[str, IndexEntry],
    synonyms: Mapping[str, Sequence[str]],
    boost: Optional[SearchBoost],
    now: datetime,
) -> List[Candidate]:
    """Score every entry; keep those with a total score > 0, in index order."""
    out: List[Candidate] = []
    for pid, entry in entries.items():
        score = relevance_score(query_tokens, entry, synonyms, boost, now)
        if score > 0:
            out.append(Candidate(product_id=pid, score=score))
    return out


def matched_tokens(
    query_tokens: Sequence[str],
    entry_tokens: Sequence[str],
    synonyms: Mapping[str, Sequence[str]],
) -> List[str]:
    """Distinct entry tokens that earned any text score, in entry order."""
    hits: Dict[str, None] = {}
    for t in entry_tokens:
        if t in hits:
            continue
        for q in query_tokens:
            if q in t or t in q or t in synonyms.get(q, ()):
                hits[t] = None
                break
    return list(hits)
