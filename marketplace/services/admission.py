"""Admission gate: minimum seller credibility for opening a transaction."""

from marketplace.config import settings


def meets_score_requirement(score: float, minimum: float | None = None) -> bool:
    if minimum is None:
        minimum = settings.min_credibility_score
    return score >= minimum
