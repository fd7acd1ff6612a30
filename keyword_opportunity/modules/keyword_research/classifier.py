"""Result classification -- drop phrases without data, split questions from related phrases."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from keyword_opportunity.models.keyword import KeywordMetric
from keyword_opportunity.utils.helpers import normalize_phrase

logger = logging.getLogger(__name__)

# Plain substring match, so "somewhat" and "know-how" count as questions.
QUESTION_MARKERS = ("how", "what", "why", "when", "where", "?")


def is_question(phrase: str) -> bool:
    lowered = phrase.lower()
    return any(marker in lowered for marker in QUESTION_MARKERS)


@dataclass
class ClassifiedMetrics:
    """Metrics with usable data, bucketed for ranking."""

    seed: Optional[KeywordMetric] = None
    related: list[KeywordMetric] = field(default_factory=list)
    questions: list[KeywordMetric] = field(default_factory=list)

    @property
    def total(self) -> int:
        return (1 if self.seed else 0) + len(self.related) + len(self.questions)


def classify_metrics(seed: str, metrics: list[KeywordMetric]) -> ClassifiedMetrics:
    """Filter out "no data" rows, separate the seed, and categorize the rest.

    Order of ``metrics`` is preserved inside each bucket; repeated phrases
    keep their first occurrence.
    """
    seed_norm = normalize_phrase(seed)
    result = ClassifiedMetrics()
    seen: set[str] = set()
    dropped = 0

    for metric in metrics:
        if not metric.has_data:
            dropped += 1
            continue
        if metric.phrase in seen:
            continue
        seen.add(metric.phrase)

        if metric.phrase == seed_norm:
            result.seed = metric
        elif is_question(metric.phrase):
            result.questions.append(metric)
        else:
            result.related.append(metric)

    logger.info(
        "Classified %d metrics: seed=%s, %d related, %d questions, %d without data",
        len(metrics), "yes" if result.seed else "no",
        len(result.related), len(result.questions), dropped,
    )
    return result
