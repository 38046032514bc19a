"""Similarity math and payload filtering shared by vector store backends.

The reference engine ranks with these functions, so alternate backends can
be checked against the same semantics.
"""

import math
from typing import Any, Optional


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Calculate cosine similarity between two vectors.

    Uses the formula: cos(θ) = (a · b) / (||a|| * ||b||)

    Returns:
        Score between -1.0 and 1.0, or NaN when either vector has zero norm.
    """
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(x * x for x in b))
    if norm_a == 0 or norm_b == 0:
        return math.nan
    return dot / (norm_a * norm_b)


def matches_filters(payload: dict[str, Any], filters: Optional[dict[str, Any]]) -> bool:
    """Return True if every filter key is present in payload with an equal value."""
    if not filters:
        return True
    for key, value in filters.items():
        if key not in payload or payload[key] != value:
            return False
    return True


def rank_key(score: float) -> tuple[int, float]:
    """Sort key for descending score order with NaN scores last.

    Used with a stable sort, so ties keep their scan order.
    """
    if math.isnan(score):
        return (1, 0.0)
    return (0, -score)
