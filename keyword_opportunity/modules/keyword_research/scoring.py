"""Opportunity scoring -- a 0-100 score per phrase from volume, competition, length and CPC."""

from dataclasses import asdict

from keyword_opportunity.models.keyword import KeywordMetric, ScoredKeyword


def score_keyword(metric: KeywordMetric) -> tuple[int, str]:
    """Score a metric and explain which rules fired.

    Volume is worth up to 40 points, competition up to 30 (lower is
    better), phrase length up to 20 and CPC up to 10, so the total is
    always within 0-100.  Unknown competition compares as 0 and unknown
    CPC earns nothing.

    Returns:
        Tuple of (score, rationale) where rationale is the comma-joined
        list of labels for every branch that fired.
    """
    score = 0
    reasons: list[str] = []

    volume = metric.volume or 0
    if volume > 10000:
        score += 40
        reasons.append("High volume")
    elif volume > 1000:
        score += 30
        reasons.append("Good volume")
    elif volume > 100:
        score += 20
        reasons.append("Moderate volume")
    elif volume > 0:
        score += 10
        reasons.append("Low volume")

    competition = metric.competition if metric.competition is not None else 0.0
    if competition < 0.2:
        score += 30
        reasons.append("Very low competition")
    elif competition < 0.5:
        score += 25
        reasons.append("Low competition")
    elif competition < 0.8:
        score += 15
        reasons.append("Medium competition")
    else:
        score += 5
        reasons.append("High competition")

    word_count = metric.word_count
    if word_count >= 4:
        score += 20
        reasons.append("Long-tail keyword")
    elif word_count == 3:
        score += 15
        reasons.append("3-word phrase")
    elif word_count == 2:
        score += 10
        reasons.append("2-word phrase")

    cpc = metric.cpc or 0.0
    if cpc > 5:
        score += 10
        reasons.append("High commercial value")
    elif cpc > 1:
        score += 5
        reasons.append("Some commercial value")

    return max(0, min(100, score)), ", ".join(reasons)


def to_scored(metric: KeywordMetric) -> ScoredKeyword:
    """Attach score and rationale to a metric."""
    score, rationale = score_keyword(metric)
    return ScoredKeyword(**asdict(metric), score=score, rationale=rationale)


def score_all(metrics: list[KeywordMetric]) -> list[ScoredKeyword]:
    return [to_scored(metric) for metric in metrics]
