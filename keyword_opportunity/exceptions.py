"""Exception hierarchy for the keyword opportunity research pipeline."""

from typing import Any, Optional


class KeywordResearchError(Exception):
    """Root exception for every error raised by this package.

    Carries the pipeline ``stage`` that failed so callers can show one
    clear message naming where the request broke.
    """

    stage: str = "keyword research"

    def __init__(self, message: str, *, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for logging or API responses."""
        return {
            "error_type": self.__class__.__name__,
            "stage": self.stage,
            "message": self.message,
        }

    def __str__(self) -> str:
        return self.stage.capitalize() + " failed: " + self.message


class ConfigurationError(KeywordResearchError):
    """Metrics provider is disabled or its credentials are missing."""

    stage = "configuration"


class AIGenerationError(KeywordResearchError):
    """AI-assisted candidate generation failed.

    Never surfaced to callers; the candidate generator downgrades it to
    rule-based candidates only.
    """

    stage = "ai candidate generation"


# ---------------------------------------------------------------------------
# Metrics provider errors
# ---------------------------------------------------------------------------


class ProviderError(KeywordResearchError):
    """Non-2xx (or unreachable) response from the keyword metrics provider."""

    stage = "metrics enrichment"
    hint = "The keyword metrics provider returned an error."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        detail: str = "",
        stage: Optional[str] = None,
    ):
        self.status_code = status_code
        self.detail = detail
        super().__init__(message or self._build_message(), stage=stage)

    def _build_message(self) -> str:
        text = self.hint
        if self.status_code is not None:
            text = "HTTP " + str(self.status_code) + ": " + text
        if self.detail:
            text = text + " Details: " + self.detail
        return text

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status_code"] = self.status_code
        data["detail"] = self.detail
        return data


class ProviderAuthError(ProviderError):
    """HTTP 401: the API key was rejected."""

    hint = "Invalid API key. Please verify your Keywords Everywhere API key is correct."


class ProviderQuotaError(ProviderError):
    """HTTP 402: account credits or subscription exhausted."""

    hint = (
        "Payment required. Your Keywords Everywhere account may be out of "
        "credits or your subscription may have expired. Check your account "
        "balance at keywordseverywhere.com."
    )


class ProviderRateLimitError(ProviderError):
    """HTTP 429: too many requests."""

    hint = "Rate limit exceeded. Please wait before making another request."


class ProviderMalformedResponseError(ProviderError):
    """Provider answered with something that is not the expected JSON."""

    hint = (
        "The provider returned a response that is not valid JSON (often an "
        "HTML error page). This usually indicates an endpoint issue or an "
        "invalid API key."
    )
