"""
Match Scorer - Multi-keyword strict substring scoring.

Single keyword tiers:
  - exact match:     100
  - prefix match:     90
  - substring match:  80
  - otherwise:         0

Character-scatter matching is deliberately not supported ("wlcb" must not
match a target that merely contains w, l, c and b somewhere).

Several keywords use AND semantics: every keyword has to match the same
target on its own. The combined score is the weakest keyword's tier plus a
small bonus per extra keyword, capped at 100.
"""

EXACT_SCORE = 100.0
PREFIX_SCORE = 90.0
SUBSTRING_SCORE = 80.0
KEYWORD_BONUS = 2.0
MAX_SCORE = 100.0


def split_keywords(query: str) -> list[str]:
    """Case-fold and split a query on whitespace, dropping empty tokens."""
    return [token for token in query.casefold().split() if token]


def score_keyword(keyword: str, target: str) -> float:
    """
    Score one already case-folded keyword against a case-folded target.

    Args:
        keyword: Single search keyword
        target: String to match against

    Returns:
        100, 90, 80 or 0
    """
    if not keyword or not target:
        return 0.0
    if target == keyword:
        return EXACT_SCORE
    if target.startswith(keyword):
        return PREFIX_SCORE
    if keyword in target:
        return SUBSTRING_SCORE
    return 0.0


def score(query: str, target: str) -> float:
    """
    Score a raw query against a target string.

    Args:
        query: User query, possibly several whitespace-separated keywords
        target: Candidate string (title, URL, path...)

    Returns:
        Score in [0, 100]. 0 means no match.
    """
    keywords = split_keywords(query)
    if not keywords:
        return 0.0

    folded = target.casefold()

    if len(keywords) == 1:
        return score_keyword(keywords[0], folded)

    scores = []
    for keyword in keywords:
        keyword_score = score_keyword(keyword, folded)
        if keyword_score <= 0:
            return 0.0
        scores.append(keyword_score)

    bonus = KEYWORD_BONUS * (len(keywords) - 1)
    return min(min(scores) + bonus, MAX_SCORE)


def score_fields(query: str, fields) -> float:
    """Best score of a query over several candidate fields."""
    return max((score(query, f) for f in fields if f), default=0.0)
