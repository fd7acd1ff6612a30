"""Keyword Research module -- candidate expansion, metrics enrichment, scoring, and ranking."""

from keyword_opportunity.modules.keyword_research.researcher import KeywordResearcher
from keyword_opportunity.modules.keyword_research.kw_analyzer import KeywordAnalyzer
from keyword_opportunity.modules.keyword_research.candidates import (
    AIKeywordExpander,
    CandidateGenerator,
    RuleBasedExpander,
)
from keyword_opportunity.modules.keyword_research.classifier import classify_metrics, is_question
from keyword_opportunity.modules.keyword_research.ranking import assemble_result
from keyword_opportunity.modules.keyword_research.scoring import score_keyword

__all__ = [
    "KeywordResearcher",
    "KeywordAnalyzer",
    "AIKeywordExpander",
    "CandidateGenerator",
    "RuleBasedExpander",
    "classify_metrics",
    "is_question",
    "assemble_result",
    "score_keyword",
]
