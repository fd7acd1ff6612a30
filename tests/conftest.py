"""Shared pytest fixtures for Keyword Opportunity Research tests."""

import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

# Ensure project root is on sys.path so 'keyword_opportunity' is importable.
_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

TEST_API_URL = "https://api.test.local/v1"


@pytest.fixture()
def mock_llm_client():
    """Return a mock LLMClient whose generate_text yields a JSON keyword array."""
    client = MagicMock()
    client.generate_text = AsyncMock(return_value=json.dumps([
        "content marketing strategy",
        "content marketing examples",
        "what is content marketing",
    ]))
    return client


@pytest.fixture()
def provider_config():
    """An enabled provider config with a dummy API key."""
    from keyword_opportunity.integrations.keywords_everywhere import ProviderConfig
    return ProviderConfig(api_key="test-key", enabled=True)


@pytest.fixture()
def make_metrics_client():
    """Factory: KeywordsEverywhereClient wired to an httpx.MockTransport handler."""
    from keyword_opportunity.integrations.keywords_everywhere import KeywordsEverywhereClient

    def _make(handler):
        return KeywordsEverywhereClient(
            base_url=TEST_API_URL,
            transport=httpx.MockTransport(handler),
        )
    return _make


@pytest.fixture()
def keyword_rows_handler():
    """Factory: MockTransport handler answering /get_keyword_data from a phrase->row table.

    Every request body is recorded on ``handler.requests`` so tests can
    inspect the batch that was sent.
    """
    def _make(rows_by_phrase: dict[str, dict]):
        requests: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            requests.append(body)
            data = []
            for phrase in body.get("kw", []):
                row = rows_by_phrase.get(phrase.lower())
                if row is not None:
                    data.append({"keyword": phrase, **row})
            return httpx.Response(200, json={"data": data})

        handler.requests = requests
        return handler
    return _make
