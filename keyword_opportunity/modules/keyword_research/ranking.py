"""Ranking and result assembly -- score, sort, filter and cap each keyword category."""

import logging
from typing import Callable

from keyword_opportunity.models.keyword import ResearchResult, ScoredKeyword
from keyword_opportunity.modules.keyword_research.classifier import ClassifiedMetrics
from keyword_opportunity.modules.keyword_research.scoring import score_all, to_scored

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
QUESTION_LIMIT = 20

# Every key sorts stably, so equal values keep classifier order.
SORT_KEYS: dict[str, Callable[[ScoredKeyword], tuple]] = {
    "score": lambda kw: (-kw.score,),
    "volume": lambda kw: (-(kw.volume or 0),),
    "competition": lambda kw: (kw.competition is None, kw.competition or 0.0),
}

FILTERS: dict[str, Callable[[ScoredKeyword], bool]] = {
    "all": lambda kw: True,
    "low_competition": lambda kw: kw.competition is not None and kw.competition < 0.5,
    "high_volume": lambda kw: (kw.volume or 0) > 1000,
}


def sort_keywords(keywords: list[ScoredKeyword], sort_by: str = "score") -> list[ScoredKeyword]:
    """Return a new list ordered by ``sort_by`` (score, volume or competition)."""
    try:
        key = SORT_KEYS[sort_by]
    except KeyError:
        raise ValueError(
            f"Unknown sort key: {sort_by!r}. Choose one of {', '.join(SORT_KEYS)}."
        ) from None
    return sorted(keywords, key=key)


def filter_keywords(keywords: list[ScoredKeyword], filter_by: str = "all") -> list[ScoredKeyword]:
    """Keep the keywords matching ``filter_by`` (all, low_competition, high_volume)."""
    try:
        predicate = FILTERS[filter_by]
    except KeyError:
        raise ValueError(
            f"Unknown filter: {filter_by!r}. Choose one of {', '.join(FILTERS)}."
        ) from None
    return [kw for kw in keywords if predicate(kw)]


def assemble_result(
    seed: str,
    classified: ClassifiedMetrics,
    limit: int = DEFAULT_LIMIT,
    sort_by: str = "score",
    filter_by: str = "all",
) -> ResearchResult:
    """Build the ResearchResult for one request.

    ``total_results`` counts every phrase that had usable data, before
    filtering and truncation.
    """
    if limit < 0:
        raise ValueError("limit must be zero or greater")

    seed_keywords = [to_scored(classified.seed)] if classified.seed else []
    related = sort_keywords(filter_keywords(score_all(classified.related), filter_by), sort_by)
    questions = sort_keywords(filter_keywords(score_all(classified.questions), filter_by), sort_by)

    result = ResearchResult(
        seed_keyword=seed,
        keywords=filter_keywords(seed_keywords, filter_by),
        related_keywords=related[:limit],
        question_keywords=questions[: min(QUESTION_LIMIT, limit)],
        total_results=classified.total,
    )
    logger.debug(
        "Assembled result for %r: %d related (of %d), %d questions (of %d), total=%d",
        seed, len(result.related_keywords), len(related),
        len(result.question_keywords), len(questions), result.total_results,
    )
    return result
