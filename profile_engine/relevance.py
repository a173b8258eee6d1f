"""
Relevance Scorer
================

Pure scoring of a candidate entity against the user's query string.

PRECEDENCE (first matching rule wins):
======================================
1. exact name match                    → 1.0
2. name starts with query              → 0.9
3. name contains query elsewhere,
   or query contains name              → 0.85
4. word overlap ratio r > 0.7          → 0.8 * r
   word overlap ratio r > 0.4          → 0.6 * r
5. best tag match (substring / tokens) → 0.5 or 0.3 * ratio
6. nothing matched                     → 0.05 floor

The floor is never zero so popular-but-unrelated candidates stay
rankable; exclusion is the Resolver's threshold decision.
"""

from __future__ import annotations
from typing import AbstractSet, Iterable, List

from .contracts.entities import ResolvedEntity


EXACT_MATCH = 1.0
PREFIX_MATCH = 0.9
SUBSTRING_MATCH = 0.85
STRONG_OVERLAP_FACTOR = 0.8
WEAK_OVERLAP_FACTOR = 0.6
TAG_SUBSTRING = 0.5
TAG_OVERLAP_FACTOR = 0.3
FLOOR_SCORE = 0.05


def _normalize(text: str) -> str:
    return (text or "").strip().lower()


def _tokens(text: str) -> List[str]:
    """Whitespace tokens longer than one character."""
    return [token for token in text.split() if len(token) > 1]


def _token_affinity(a: str, b: str) -> float:
    if a == b:
        return 1.0
    if a in b or b in a:
        return 0.5
    return 0.0


def word_overlap_ratio(query: str, name: str) -> float:
    """
    Pairwise token overlap between two normalized strings.

    Sum of per-pair affinities divided by the longer token count,
    capped at 1.0.
    """
    query_tokens = _tokens(query)
    name_tokens = _tokens(name)
    if not query_tokens or not name_tokens:
        return 0.0
    total = sum(
        _token_affinity(q, n) for q in query_tokens for n in name_tokens
    )
    return min(1.0, total / max(len(query_tokens), len(name_tokens)))


def _tag_score(tags: Iterable[str], query: str) -> float:
    query_tokens = _tokens(query)
    best = 0.0
    for raw_tag in tags:
        tag = _normalize(raw_tag)
        if not tag:
            continue
        if tag in query or query in tag:
            best = max(best, TAG_SUBSTRING)
            continue
        tag_tokens = _tokens(tag)
        if not query_tokens or not tag_tokens:
            continue
        matched = sum(
            1 for q in query_tokens
            if any(_token_affinity(q, t) > 0 for t in tag_tokens)
        )
        best = max(best, TAG_OVERLAP_FACTOR * matched / len(query_tokens))
    return best


def score_relevance(
    candidate_name: str,
    candidate_tags: AbstractSet[str],
    query: str
) -> float:
    """
    Score how well a candidate matches a query.

    Returns a float in [0.05, 1.0].
    """
    name = _normalize(candidate_name)
    needle = _normalize(query)
    if not needle:
        return FLOOR_SCORE

    if name:
        if name == needle:
            return EXACT_MATCH
        if name.startswith(needle):
            return PREFIX_MATCH
        if needle in name or name in needle:
            return SUBSTRING_MATCH

        ratio = word_overlap_ratio(needle, name)
        if ratio > 0.7:
            return STRONG_OVERLAP_FACTOR * ratio
        if ratio > 0.4:
            return WEAK_OVERLAP_FACTOR * ratio

    if candidate_tags:
        tag_score = _tag_score(candidate_tags, needle)
        if tag_score > 0:
            return max(FLOOR_SCORE, min(1.0, tag_score))

    return FLOOR_SCORE


def score_entity(entity: ResolvedEntity, query: str) -> float:
    """Score a normalized entity against the original query string."""
    return score_relevance(entity.name, entity.tags, query)
