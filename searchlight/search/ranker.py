"""
Ranker - Orders scored results by match quality, usage and type.

Two regimes split at HIGH_SCORE_THRESHOLD:
  - A high-score result always beats a low-score one.
  - Among high-score results, usage weight decides when the weights differ
    by more than USAGE_WEIGHT_THRESHOLD; otherwise type priority, then score.
  - Among low-score results usage is ignored: score, then type priority.

Usage history can therefore only reorder strong matches. A frequently used
item that matches weakly never outranks a precise match.
"""

from functools import cmp_to_key
from typing import Callable

from searchlight.search.models import SearchResult, type_priority

HIGH_SCORE_THRESHOLD = 50.0
USAGE_WEIGHT_THRESHOLD = 1.0


class Ranker:
    """Sorts SearchResults with the composite comparator."""

    def __init__(
        self,
        weight_of: Callable[[str], float],
        high_score_threshold: float = HIGH_SCORE_THRESHOLD,
        usage_weight_threshold: float = USAGE_WEIGHT_THRESHOLD,
    ):
        self.weight_of = weight_of
        self.high_score_threshold = high_score_threshold
        self.usage_weight_threshold = usage_weight_threshold

    def compare(self, a: SearchResult, b: SearchResult) -> int:
        """Negative if a ranks before b, positive if after, 0 if tied."""
        a_high = a.score >= self.high_score_threshold
        b_high = b.score >= self.high_score_threshold

        if a_high != b_high:
            return -1 if a_high else 1

        if a_high:
            a_weight = self.weight_of(a.identity)
            b_weight = self.weight_of(b.identity)
            if abs(a_weight - b_weight) > self.usage_weight_threshold:
                return -1 if a_weight > b_weight else 1

            priority = type_priority(a.provider_type) - type_priority(b.provider_type)
            if priority:
                return priority
            return _by_score(a, b)

        by_score = _by_score(a, b)
        if by_score:
            return by_score
        return type_priority(a.provider_type) - type_priority(b.provider_type)

    def rank(self, results: list[SearchResult]) -> list[SearchResult]:
        """Return a new list in rank order. Ties keep their input order."""
        return sorted(results, key=cmp_to_key(self.compare))


def _by_score(a: SearchResult, b: SearchResult) -> int:
    if a.score == b.score:
        return 0
    return -1 if a.score > b.score else 1
