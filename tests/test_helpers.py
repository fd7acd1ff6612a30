"""Tests for display helpers, input validators, and the data model."""

import math

import pytest


class TestFormatting:
    """format_volume / format_cpc / competition_label / score_band."""

    @pytest.mark.parametrize("value, expected", [
        (None, "No data"),
        (0, "No data"),
        (float("nan"), "No data"),
        (999, "999"),
        (1500, "1.5K"),
        (3_400_000, "3.4M"),
    ])
    def test_format_volume(self, value, expected):
        from keyword_opportunity.utils.helpers import format_volume
        assert format_volume(value) == expected

    @pytest.mark.parametrize("value, expected", [
        (None, "No data"),
        (0, "No data"),
        (1.234, "$1.23"),
        (12, "$12.00"),
    ])
    def test_format_cpc(self, value, expected):
        from keyword_opportunity.utils.helpers import format_cpc
        assert format_cpc(value) == expected

    @pytest.mark.parametrize("value, expected", [
        (None, "Unknown"),
        (0.0, "Very Low"),
        (0.2, "Low"),
        (0.5, "Medium"),
        (0.8, "High"),
    ])
    def test_competition_label(self, value, expected):
        from keyword_opportunity.utils.helpers import competition_label
        assert competition_label(value) == expected

    @pytest.mark.parametrize("score, band", [(100, "high"), (70, "high"), (69, "medium"), (50, "medium"), (49, "low"), (0, "low")])
    def test_score_band(self, score, band):
        from keyword_opportunity.utils.helpers import score_band
        assert score_band(score) == band

    def test_normalize_phrase(self):
        from keyword_opportunity.utils.helpers import normalize_phrase
        assert normalize_phrase("  Content \t  MARKETING ") == "content marketing"


class TestValidators:
    """(is_valid, message) validators."""

    def test_seed(self):
        from keyword_opportunity.utils.validators import validate_seed_keyword

        assert validate_seed_keyword("seo") == (True, "")
        assert validate_seed_keyword("")[0] is False
        assert validate_seed_keyword("   ")[0] is False
        assert validate_seed_keyword("x" * 101)[0] is False

    def test_country(self):
        from keyword_opportunity.utils.validators import validate_country_code

        assert validate_country_code("US")[0]
        assert validate_country_code("")[0]
        assert not validate_country_code("USA")[0]

    def test_currency(self):
        from keyword_opportunity.utils.validators import validate_currency_code

        assert validate_currency_code("usd")[0]
        assert not validate_currency_code("US")[0]

    def test_limit(self):
        from keyword_opportunity.utils.validators import validate_limit

        assert validate_limit(0)[0]
        assert not validate_limit(-1)[0]
        assert not validate_limit(True)[0]
        assert not validate_limit("5")[0]


class TestKeywordMetric:
    """KeywordMetric normalization."""

    def test_has_data(self):
        from keyword_opportunity.models.keyword import KeywordMetric

        assert KeywordMetric("seo", volume=1).has_data
        assert not KeywordMetric("seo", volume=0).has_data
        assert not KeywordMetric("seo").has_data

    def test_from_provider_row_normalizes(self):
        from keyword_opportunity.models.keyword import KeywordMetric

        metric = KeywordMetric.from_provider_row({
            "keyword": "  SEO   Tools ",
            "vol": "1,000",
            "cpc": -1,
            "competition": 1.7,
        })
        assert metric.phrase == "seo tools"
        assert metric.volume is None
        assert metric.cpc is None
        assert metric.competition == 1.0
        assert metric.trend is None

    def test_nan_volume_is_unknown(self):
        from keyword_opportunity.models.keyword import KeywordMetric

        metric = KeywordMetric.from_provider_row({"keyword": "seo", "vol": math.nan})
        assert metric.volume is None
        assert not metric.has_data

    def test_phrase_truncated(self):
        from keyword_opportunity.models.keyword import KeywordMetric

        assert len(KeywordMetric("y" * 150).phrase) == 100

    def test_truncated_phrase_has_no_trailing_space(self):
        from keyword_opportunity.models.keyword import KeywordMetric

        metric = KeywordMetric.from_provider_row({"keyword": "a" * 99 + " bbbb", "vol": 10})
        assert metric.phrase == "a" * 99
        assert metric.phrase == metric.phrase.strip()
