"""Keyword Research module -- seed expansion, metrics enrichment, classification, and opportunity ranking."""

import logging
import time
from typing import Optional

from keyword_opportunity.exceptions import ConfigurationError
from keyword_opportunity.models.keyword import CandidateSet, KeywordMetric, ResearchResult, ScoredKeyword
from keyword_opportunity.modules.keyword_research.candidates import CandidateGenerator
from keyword_opportunity.modules.keyword_research.classifier import classify_metrics
from keyword_opportunity.modules.keyword_research.ranking import (
    DEFAULT_LIMIT,
    assemble_result,
    filter_keywords,
    sort_keywords,
)
from keyword_opportunity.modules.keyword_research.scoring import score_all
from keyword_opportunity.utils.validators import (
    validate_country_code,
    validate_currency_code,
    validate_limit,
    validate_seed_keyword,
)

logger = logging.getLogger(__name__)

BATCH_CEILING = 100


class KeywordResearcher:
    """Keyword opportunity research pipeline.

    Expands one seed phrase into candidate search queries (rule-based and
    AI-assisted), enriches them with search volume, CPC and competition
    from Keywords Everywhere, then classifies, scores and ranks them.

    Only metrics-provider errors end a request.  AI failures fall back to
    rule-based candidates.

    Usage::

        from keyword_opportunity.integrations.llm_client import LLMClient
        from keyword_opportunity.integrations.keywords_everywhere import (
            KeywordsEverywhereClient, ProviderConfig,
        )

        researcher = KeywordResearcher(
            llm_client=LLMClient(),
            metrics_client=KeywordsEverywhereClient(),
        )
        result = await researcher.research(
            "content marketing",
            ProviderConfig(api_key="...", enabled=True),
            country="US",
            limit=50,
        )
    """

    def __init__(
        self,
        llm_client=None,
        metrics_client=None,
        candidate_generator: Optional[CandidateGenerator] = None,
        batch_ceiling: int = BATCH_CEILING,
        ai_timeout: float = 30.0,
        ai_model: Optional[str] = None,
    ):
        from keyword_opportunity.integrations.keywords_everywhere import (
            MAX_BATCH_SIZE,
            KeywordsEverywhereClient,
        )
        from keyword_opportunity.integrations.llm_client import LLMClient

        self._metrics = metrics_client or KeywordsEverywhereClient()
        if candidate_generator is None:
            candidate_generator = CandidateGenerator(
                llm_client=llm_client or LLMClient(),
                ai_timeout=ai_timeout,
                ai_model=ai_model,
            )
        self._generator = candidate_generator
        self._batch_ceiling = max(1, min(batch_ceiling, MAX_BATCH_SIZE))

    # ------------------------------------------------------------------
    # research
    # ------------------------------------------------------------------

    async def research(
        self,
        seed: str,
        config,
        country: str = "US",
        limit: int = DEFAULT_LIMIT,
        use_ai: bool = True,
        currency: str = "USD",
        sort_by: str = "score",
        filter_by: str = "all",
    ) -> ResearchResult:
        """Run the full pipeline for one seed phrase.

        Raises:
            ConfigurationError: provider disabled or API key missing.
            ProviderError: any metrics-provider failure (auth, quota, rate
                limit, malformed response, other HTTP errors).
            ValueError: empty seed, negative limit, or a malformed
                country or currency code.
        """
        if not self._metrics.is_configured(config):
            raise ConfigurationError(
                "Keywords Everywhere not configured. Set KEYWORDS_EVERYWHERE_API_KEY "
                "and enable the provider in settings."
            )
        for ok, error in (
            validate_seed_keyword(seed),
            validate_limit(limit),
            validate_country_code(country),
            validate_currency_code(currency),
        ):
            if not ok:
                raise ValueError(error)
        # Unknown sort or filter keys fail here, before any network call.
        filter_keywords([], filter_by)
        sort_keywords([], sort_by)

        seed = seed.strip()
        started = time.monotonic()
        logger.info(
            "Starting keyword research: seed=%r, country=%s, limit=%d, use_ai=%s",
            seed, country, limit, use_ai,
        )

        # Step 1: Candidates
        candidates = await self.generate_candidates(seed, country=country, use_ai=use_ai)
        batch = candidates.to_batch(self._batch_ceiling)
        logger.info("Pipeline step 1/3 (candidates): %d phrases in batch", len(batch))

        # Step 2: Enrich
        metrics = await self.enrich(batch, config, country=country, currency=currency)
        logger.info("Pipeline step 2/3 (enrich): %d rows", len(metrics))

        # Step 3: Classify, score, rank
        classified = classify_metrics(seed, metrics)
        result = assemble_result(
            seed, classified, limit=limit, sort_by=sort_by, filter_by=filter_by,
        )
        logger.info(
            "Pipeline step 3/3 (rank): %d related, %d questions, total=%d (%.2fs)",
            len(result.related_keywords), len(result.question_keywords),
            result.total_results, time.monotonic() - started,
        )
        return result

    # ------------------------------------------------------------------
    # generate_candidates
    # ------------------------------------------------------------------

    async def generate_candidates(
        self, seed: str, country: str = "US", use_ai: bool = True,
    ) -> CandidateSet:
        """Expand the seed with the rule-based and (optionally) AI expanders."""
        return await self._generator.generate(seed, country=country, use_ai=use_ai)

    # ------------------------------------------------------------------
    # enrich
    # ------------------------------------------------------------------

    async def enrich(
        self,
        phrases: list[str],
        config,
        country: str = "US",
        currency: str = "USD",
    ) -> list[KeywordMetric]:
        """One batched metrics call; the batch is cut to the ceiling first."""
        if len(phrases) > self._batch_ceiling:
            logger.warning(
                "Candidate batch of %d exceeds ceiling %d; truncating",
                len(phrases), self._batch_ceiling,
            )
            phrases = phrases[: self._batch_ceiling]
        return await self._metrics.get_keyword_data(
            phrases, config, country=country, currency=currency,
        )

    # ------------------------------------------------------------------
    # suggest_long_tail
    # ------------------------------------------------------------------

    async def suggest_long_tail(
        self,
        seed: str,
        config,
        country: str = "US",
        limit: int = DEFAULT_LIMIT,
    ) -> list[ScoredKeyword]:
        """Provider long-tail suggestions for a seed, scored and ranked.

        Phrases without volume data are dropped, like in ``research``.

        Raises:
            ConfigurationError: provider disabled or API key missing.
            ValueError: empty seed or negative limit.
        """
        if not self._metrics.is_configured(config):
            raise ConfigurationError(
                "Keywords Everywhere not configured. Set KEYWORDS_EVERYWHERE_API_KEY "
                "and enable the provider in settings."
            )
        for ok, error in (validate_seed_keyword(seed), validate_limit(limit)):
            if not ok:
                raise ValueError(error)
        metrics = await self._metrics.get_long_tail_keywords(seed.strip(), config, country=country)
        with_data = [m for m in metrics if m.has_data]
        ranked = sort_keywords(score_all(with_data))
        logger.info("Long-tail suggestions for %r: %d with data", seed, len(with_data))
        return ranked[:limit]

    # ------------------------------------------------------------------
    # keyword_trends
    # ------------------------------------------------------------------

    async def keyword_trends(
        self,
        phrases: list[str],
        config,
        country: str = "US",
    ) -> list[KeywordMetric]:
        """12-month search trends for up to ``batch_ceiling`` phrases."""
        if not self._metrics.is_configured(config):
            raise ConfigurationError(
                "Keywords Everywhere not configured. Set KEYWORDS_EVERYWHERE_API_KEY "
                "and enable the provider in settings."
            )
        if not phrases:
            raise ValueError("At least one phrase is required.")
        for phrase in phrases:
            ok, error = validate_seed_keyword(phrase)
            if not ok:
                raise ValueError(error)
        ok, error = validate_country_code(country)
        if not ok:
            raise ValueError(error)
        if len(phrases) > self._batch_ceiling:
            raise ValueError(
                f"At most {self._batch_ceiling} phrases per trends request, got {len(phrases)}."
            )
        return await self._metrics.get_keyword_trends(
            [p.strip() for p in phrases], config, country=country,
        )
