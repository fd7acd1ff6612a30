"""Application orchestrator for Keyword Opportunity Research."""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from keyword_opportunity.models.keyword import ResearchResult

logger = logging.getLogger(__name__)


class KeywordOpportunityApp:
    """Wires configuration, clients and the research pipeline together.

    Usage::

        app = KeywordOpportunityApp()
        app.initialize()
        result = await app.research("content marketing")
        status = app.get_status()
    """

    def __init__(
        self,
        config_path: str = "config/settings.yaml",
        env_path: str = ".env",
    ):
        self._config_path = config_path
        self._env_path = env_path
        self.config: dict[str, Any] = {}
        self._initialized = False
        self._llm_client = None
        self._metrics_client = None
        self._researcher = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Load environment and configuration, and prepare the export dir."""
        if self._initialized:
            return

        env_file = Path(self._env_path)
        if env_file.exists():
            load_dotenv(env_file)
            logger.info("Loaded environment from %s", self._env_path)

        self.config = self._load_config()

        export_dir = self.config.get("app", {}).get("export_dir", "")
        if export_dir:
            Path(export_dir).mkdir(parents=True, exist_ok=True)

        self._initialized = True
        logger.info("KeywordOpportunityApp initialised.")

    def _load_config(self) -> dict[str, Any]:
        """Load the YAML configuration file."""
        config_file = Path(self._config_path)
        if not config_file.exists():
            logger.warning("Config file not found: %s; using defaults.", self._config_path)
            return {}
        with open(config_file, "r", encoding="utf-8") as fh:
            config = yaml.safe_load(fh) or {}
        logger.info("Configuration loaded from %s", self._config_path)
        return config

    @property
    def research_settings(self) -> dict[str, Any]:
        return self.config.get("keyword_research", {}) or {}

    # ------------------------------------------------------------------
    # Collaborators (lazy)
    # ------------------------------------------------------------------

    def _get_llm_client(self):
        """Lazy-initialise and return the LLM client."""
        if self._llm_client is None:
            from keyword_opportunity.integrations.llm_client import LLMClient
            llm_cfg = self.config.get("llm", {})
            primary = llm_cfg.get("primary", {})
            fallback = llm_cfg.get("fallback", {})
            cache_cfg = llm_cfg.get("cache", {})
            budget_cfg = llm_cfg.get("budget", {})
            rl_cfg = self.config.get("rate_limits", {})

            self._llm_client = LLMClient(
                openai_model=primary.get("model", "gpt-4o-mini"),
                gemini_model=fallback.get("model", "gemini-2.0-flash"),
                max_tokens=primary.get("max_tokens", 2048),
                temperature=primary.get("temperature", 0.7),
                timeout=primary.get("timeout", 60),
                openai_rpm=rl_cfg.get("openai", {}).get("requests_per_minute", 60),
                gemini_rpm=rl_cfg.get("gemini", {}).get("requests_per_minute", 15),
                cache_enabled=cache_cfg.get("enabled", True),
                cache_ttl_hours=cache_cfg.get("ttl_hours", 24),
                cache_max_size=cache_cfg.get("max_size", 1000),
                max_monthly_budget=budget_cfg.get("max_monthly_usd", 100.0),
                budget_warning_pct=budget_cfg.get("warning_threshold_pct", 80.0),
            )
        return self._llm_client

    def _get_metrics_client(self):
        """Lazy-initialise and return the Keywords Everywhere client."""
        if self._metrics_client is None:
            from keyword_opportunity.integrations.keywords_everywhere import (
                KEYWORDS_EVERYWHERE_API_URL,
                KeywordsEverywhereClient,
            )
            from keyword_opportunity.utils.rate_limiter import RateLimiter
            provider_cfg = self.config.get("metrics_provider", {})
            rpm = self.config.get("rate_limits", {}).get(
                "keywords_everywhere", {}
            ).get("requests_per_minute", 30)

            self._metrics_client = KeywordsEverywhereClient(
                base_url=provider_cfg.get("base_url", KEYWORDS_EVERYWHERE_API_URL),
                timeout=provider_cfg.get("timeout", 30.0),
                data_source=provider_cfg.get("data_source", "gkp"),
                rate_limiter=RateLimiter(rpm, name="keywords_everywhere"),
            )
        return self._metrics_client

    def get_researcher(self):
        """Lazy-initialise and return the KeywordResearcher."""
        self._ensure_initialized()
        if self._researcher is None:
            from keyword_opportunity.modules.keyword_research.candidates import CandidateGenerator
            from keyword_opportunity.modules.keyword_research.researcher import KeywordResearcher
            kr_cfg = self.research_settings

            generator = CandidateGenerator(
                llm_client=self._get_llm_client(),
                rule_cap=kr_cfg.get("rule_based_cap", 80),
                ai_cap=kr_cfg.get("ai_generated_cap", 90),
                ai_timeout=kr_cfg.get("ai_timeout", 30.0),
                ai_model=kr_cfg.get("ai_model"),
            )
            self._researcher = KeywordResearcher(
                metrics_client=self._get_metrics_client(),
                candidate_generator=generator,
                batch_ceiling=kr_cfg.get("batch_ceiling", 100),
            )
        return self._researcher

    def provider_config(self):
        """ProviderConfig built from the environment."""
        from keyword_opportunity.integrations.keywords_everywhere import ProviderConfig
        return ProviderConfig.from_env()

    # ------------------------------------------------------------------
    # Research
    # ------------------------------------------------------------------

    async def research(
        self,
        seed: str,
        country: Optional[str] = None,
        limit: Optional[int] = None,
        use_ai: Optional[bool] = None,
        sort_by: str = "score",
        filter_by: str = "all",
    ) -> ResearchResult:
        """Run the research pipeline, filling unset options from settings."""
        self._ensure_initialized()
        kr_cfg = self.research_settings
        if country is None:
            country = os.getenv("DEFAULT_COUNTRY") or kr_cfg.get("default_country", "US")
        if limit is None:
            limit = kr_cfg.get("default_limit", 100)
        if use_ai is None:
            use_ai = kr_cfg.get("use_ai", True)

        return await self.get_researcher().research(
            seed,
            self.provider_config(),
            country=country,
            limit=limit,
            use_ai=use_ai,
            currency=kr_cfg.get("currency", "USD"),
            sort_by=sort_by,
            filter_by=filter_by,
        )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> dict[str, dict[str, Any]]:
        """Return health status of the major components."""
        self._ensure_initialized()
        status: dict[str, dict[str, Any]] = {}

        provider = self.provider_config()
        if provider.is_configured():
            status["metrics_provider"] = {"status": "ok", "details": "Keywords Everywhere configured"}
        elif not provider.enabled:
            status["metrics_provider"] = {"status": "warning", "details": "disabled"}
        else:
            status["metrics_provider"] = {
                "status": "error",
                "details": "KEYWORDS_EVERYWHERE_API_KEY not set",
            }

        openai_configured = bool(os.getenv("OPENAI_API_KEY"))
        gemini_configured = bool(os.getenv("GEMINI_API_KEY"))
        providers = []
        if openai_configured:
            providers.append("OpenAI")
        if gemini_configured:
            providers.append("Gemini")
        status["llm"] = {
            "status": "ok" if providers else "warning",
            "details": "providers: " + (", ".join(providers) or "none configured (rule-based only)"),
        }

        status["config"] = {
            "status": "ok" if self.config else "warning",
            "details": f"{len(self.config)} sections loaded" if self.config else "no config",
        }
        return status

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("Call initialize() before using the application.")
