"""Data model for keyword opportunity research.

Plain dataclasses: nothing here is persisted, every object is built
fresh for a single research request.
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from keyword_opportunity.utils.helpers import normalize_phrase

MAX_PHRASE_LENGTH = 100


def _to_optional_float(value: Any) -> Optional[float]:
    """Coerce a provider value to float, mapping null/NaN/garbage to None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, dict):
        value = value.get("value")
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


@dataclass
class KeywordMetric:
    """One row of enrichment data for a phrase.

    ``None`` stands for "unknown" on every metric field.
    """

    phrase: str
    volume: Optional[int] = None
    cpc: Optional[float] = None
    competition: Optional[float] = None
    trend: Optional[list[float]] = None

    def __post_init__(self) -> None:
        self.phrase = normalize_phrase(self.phrase)[:MAX_PHRASE_LENGTH].rstrip()

    @property
    def has_data(self) -> bool:
        """True when the volume carries signal (known, non-zero, not NaN)."""
        return self.volume is not None and self.volume > 0

    @property
    def word_count(self) -> int:
        return len(self.phrase.split())

    @classmethod
    def from_provider_row(cls, row: dict[str, Any]) -> "KeywordMetric":
        """Build a metric from one ``data`` row of the provider response.

        ``cpc`` may arrive as a number or as ``{"currency": .., "value": ..}``;
        ``trend`` as numbers or as ``{"month": .., "year": .., "value": ..}``.
        """
        volume_raw = _to_optional_float(row.get("vol"))
        volume = int(volume_raw) if volume_raw is not None and volume_raw >= 0 else None

        cpc = _to_optional_float(row.get("cpc"))
        if cpc is not None and cpc < 0:
            cpc = None

        competition = _to_optional_float(row.get("competition"))
        if competition is not None:
            competition = max(0.0, min(1.0, competition))

        trend: Optional[list[float]] = None
        raw_trend = row.get("trend")
        if isinstance(raw_trend, list) and raw_trend:
            values = [_to_optional_float(point) for point in raw_trend]
            trend = [v if v is not None else 0.0 for v in values][-12:]

        return cls(
            phrase=str(row.get("keyword", "")),
            volume=volume,
            cpc=cpc,
            competition=competition,
            trend=trend,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class CandidateSet:
    """Everything the candidate generator produced for one seed."""

    seed: str
    rule_based: list[str] = field(default_factory=list)
    ai_generated: list[str] = field(default_factory=list)

    def to_batch(self, ceiling: int = 100) -> list[str]:
        """Merge into the phrase batch sent to enrichment.

        The seed always comes first; AI phrases are preferred, then the
        batch is backfilled with rule-based phrases not already present
        (case-insensitive). Never longer than ``ceiling``.
        """
        batch: list[str] = []
        seen: set[str] = set()
        for phrase in [self.seed, *self.ai_generated, *self.rule_based]:
            if len(batch) >= ceiling:
                break
            key = normalize_phrase(phrase)
            if key and key not in seen:
                seen.add(key)
                batch.append(phrase)
        return batch

    @property
    def used_ai(self) -> bool:
        return bool(self.ai_generated)


@dataclass
class ScoredKeyword(KeywordMetric):
    """A metric that passed the "has data" filter, with its opportunity score."""

    score: int = 0
    rationale: str = ""


@dataclass
class ResearchResult:
    """Response object of one research request."""

    seed_keyword: str
    keywords: list[ScoredKeyword] = field(default_factory=list)
    related_keywords: list[ScoredKeyword] = field(default_factory=list)
    question_keywords: list[ScoredKeyword] = field(default_factory=list)
    total_results: int = 0

    def all_keywords(self) -> list[tuple[str, ScoredKeyword]]:
        """Every displayed keyword tagged with its category."""
        tagged = [("seed", kw) for kw in self.keywords]
        tagged.extend(("related", kw) for kw in self.related_keywords)
        tagged.extend(("question", kw) for kw in self.question_keywords)
        return tagged

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
