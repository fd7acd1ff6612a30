"""Keywords Everywhere API client for search volume, CPC, competition and trends."""

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from keyword_opportunity.exceptions import (
    ConfigurationError,
    ProviderAuthError,
    ProviderError,
    ProviderMalformedResponseError,
    ProviderQuotaError,
    ProviderRateLimitError,
)
from keyword_opportunity.models.keyword import KeywordMetric
from keyword_opportunity.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

KEYWORDS_EVERYWHERE_API_URL = "https://api.keywordseverywhere.com/v1"
MAX_BATCH_SIZE = 100

_STATUS_ERRORS: dict[int, type[ProviderError]] = {
    401: ProviderAuthError,
    402: ProviderQuotaError,
    429: ProviderRateLimitError,
}


@dataclass
class ProviderConfig:
    """Credentials and on/off switch for the metrics provider."""

    api_key: str = ""
    enabled: bool = True

    def is_configured(self) -> bool:
        return bool(self.api_key and self.enabled)

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """Read KEYWORDS_EVERYWHERE_API_KEY / KEYWORDS_EVERYWHERE_ENABLED."""
        enabled_raw = os.getenv("KEYWORDS_EVERYWHERE_ENABLED", "true")
        return cls(
            api_key=os.getenv("KEYWORDS_EVERYWHERE_API_KEY", ""),
            enabled=enabled_raw.strip().lower() not in ("0", "false", "no", "off"),
        )


class KeywordsEverywhereClient:
    """Async client for the Keywords Everywhere v1 API.

    One request per call and no retries: retry policy belongs to the
    caller.  Non-2xx responses are translated into the ``ProviderError``
    family.

    Usage::

        client = KeywordsEverywhereClient()
        config = ProviderConfig(api_key="...", enabled=True)
        metrics = await client.get_keyword_data(["seo tools"], config, country="US")
    """

    def __init__(
        self,
        base_url: str = KEYWORDS_EVERYWHERE_API_URL,
        timeout: float = 30.0,
        data_source: str = "gkp",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._data_source = data_source
        self._transport = transport
        self._rate_limiter = rate_limiter

    @staticmethod
    def is_configured(config: Optional[ProviderConfig]) -> bool:
        """True when the config is present, enabled, and carries an API key."""
        if config is None:
            return False
        return config.is_configured()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_keyword_data(
        self,
        phrases: list[str],
        config: ProviderConfig,
        country: str = "US",
        currency: str = "USD",
    ) -> list[KeywordMetric]:
        """Fetch volume, CPC, competition and trend for a batch of phrases.

        Phrases the provider has no row for are simply absent from the
        returned list.
        """
        if len(phrases) > MAX_BATCH_SIZE:
            raise ValueError(
                f"Batch of {len(phrases)} phrases exceeds the provider ceiling of {MAX_BATCH_SIZE}."
            )
        if not phrases:
            return []
        payload = {
            "kw": phrases,
            "country": country,
            "currency": currency,
            "dataSource": self._data_source,
        }
        logger.info(
            "Requesting keyword data for %d phrases (country=%s, currency=%s)",
            len(phrases), country, currency,
        )
        data = await self._post("/get_keyword_data", payload, config)
        metrics = self._parse_rows(data)
        logger.info("Keyword data returned %d rows for %d phrases", len(metrics), len(phrases))
        return metrics

    async def get_long_tail_keywords(
        self,
        seed: str,
        config: ProviderConfig,
        country: str = "US",
    ) -> list[KeywordMetric]:
        """Fetch provider-suggested long-tail phrases for a seed."""
        payload = {"kw": [seed], "country": country}
        data = await self._post("/get_longtail_keywords", payload, config)
        return self._parse_rows(data)

    async def get_keyword_trends(
        self,
        phrases: list[str],
        config: ProviderConfig,
        country: str = "US",
    ) -> list[KeywordMetric]:
        """Fetch 12-month search trends for a batch of phrases."""
        if len(phrases) > MAX_BATCH_SIZE:
            raise ValueError(
                f"Batch of {len(phrases)} phrases exceeds the provider ceiling of {MAX_BATCH_SIZE}."
            )
        payload = {"kw": phrases, "country": country}
        data = await self._post("/get_search_trends", payload, config)
        return self._parse_rows(data)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _post(
        self, endpoint: str, payload: dict[str, Any], config: ProviderConfig,
    ) -> dict[str, Any]:
        """POST to the provider and return the decoded JSON body."""
        if not self.is_configured(config):
            raise ConfigurationError(
                "Keywords Everywhere API not configured. Please set API key in settings."
            )

        headers = {
            "Authorization": "Bearer " + config.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        url = self._base_url + endpoint
        if self._rate_limiter is not None:
            await self._rate_limiter.acquire()
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport,
            ) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            logger.error("Keywords Everywhere request timed out: %s", exc)
            raise ProviderError(
                "Request to Keywords Everywhere timed out after "
                + str(self._timeout) + "s.",
                detail=str(exc),
            ) from exc
        except httpx.TransportError as exc:
            logger.error("Keywords Everywhere request failed: %s", exc)
            raise ProviderError(
                "Could not reach Keywords Everywhere: " + str(exc),
                detail=str(exc),
            ) from exc

        if not response.is_success:
            raise self._error_for_response(response)

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Keywords Everywhere returned non-JSON body (HTTP %d)", response.status_code)
            raise ProviderMalformedResponseError(
                status_code=response.status_code,
                detail=_snippet(response.text),
            ) from exc
        if not isinstance(data, dict):
            raise ProviderMalformedResponseError(
                status_code=response.status_code,
                detail="Expected a JSON object, got " + type(data).__name__ + ".",
            )
        return data

    @staticmethod
    def _error_for_response(response: httpx.Response) -> ProviderError:
        """Translate a non-2xx response into the matching ProviderError."""
        status = response.status_code
        detail = ""
        is_json = True
        try:
            body = response.json()
            if isinstance(body, dict):
                detail = str(body.get("error") or body.get("message") or "")
        except ValueError:
            is_json = False
            text = response.text or ""
            lowered = text.lower()
            if "<html" in lowered or "<!doctype" in lowered:
                detail = "Server returned an HTML error page instead of JSON."
            else:
                detail = _snippet(text)

        if not detail:
            detail = response.reason_phrase or ""

        error_cls = _STATUS_ERRORS.get(status)
        if error_cls is None:
            error_cls = ProviderError if is_json else ProviderMalformedResponseError
        logger.error(
            "Keywords Everywhere API error: HTTP %d (%s) %s",
            status, error_cls.__name__, detail,
        )
        if error_cls is ProviderError:
            return ProviderError(
                "HTTP " + str(status) + ": Keywords Everywhere request failed. Details: " + detail,
                status_code=status,
                detail=detail,
            )
        return error_cls(status_code=status, detail=detail)

    @staticmethod
    def _parse_rows(data: dict[str, Any]) -> list[KeywordMetric]:
        """Turn the ``data`` array into KeywordMetric objects."""
        rows = data.get("data") or []
        if not isinstance(rows, list):
            raise ProviderMalformedResponseError(
                detail="Field 'data' is " + type(rows).__name__ + ", expected a list."
            )
        metrics: list[KeywordMetric] = []
        for row in rows:
            if not isinstance(row, dict) or not str(row.get("keyword", "")).strip():
                logger.debug("Skipping unusable provider row: %r", row)
                continue
            metrics.append(KeywordMetric.from_provider_row(row))
        return metrics


def _snippet(text: str, max_length: int = 200) -> str:
    text = " ".join((text or "").split())
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text
