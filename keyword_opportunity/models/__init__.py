"""Data model for keyword research -- import every model from one place."""

from keyword_opportunity.models.keyword import (
    KeywordMetric,
    CandidateSet,
    ScoredKeyword,
    ResearchResult,
)

__all__ = [
    "KeywordMetric",
    "CandidateSet",
    "ScoredKeyword",
    "ResearchResult",
]
