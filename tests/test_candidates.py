"""Tests for candidate generation: rule-based expansion, AI parsing, and the AI fallback."""

import asyncio
import json

import pytest


class TestRuleBasedExpander:
    """Deterministic expansion of the seed."""

    def test_never_contains_seed_and_respects_cap(self):
        from keyword_opportunity.modules.keyword_research.candidates import RuleBasedExpander

        variants = RuleBasedExpander(cap=80, year=2025).expand("Content Marketing")
        assert 0 < len(variants) <= 80
        assert "content marketing" not in variants
        assert len(variants) == len(set(variants))

    def test_sorted_shortest_first(self):
        from keyword_opportunity.modules.keyword_research.candidates import RuleBasedExpander

        variants = RuleBasedExpander(year=2025).expand("content marketing")
        lengths = [len(v) for v in variants]
        assert lengths == sorted(lengths)

    def test_contains_expected_families(self):
        from keyword_opportunity.modules.keyword_research.candidates import RuleBasedExpander

        variants = RuleBasedExpander(cap=500, year=2025).expand("content marketing")
        assert "best content marketing" in variants
        assert "content marketing tips" in variants
        assert "content marketing 2025" in variants
        assert "how does content marketing work" in variants
        assert "content marketings" in variants
        assert "marketing tips" in variants
        assert "content marketing alternatives" in variants

    def test_singular_from_plural(self):
        from keyword_opportunity.modules.keyword_research.candidates import RuleBasedExpander

        variants = RuleBasedExpander(cap=500, year=2025).expand("seo tools")
        assert "seo tool" in variants

    def test_single_word_seed_has_no_word_variants(self):
        from keyword_opportunity.modules.keyword_research.candidates import RuleBasedExpander

        variants = RuleBasedExpander(cap=500, year=2025).expand("coffee")
        assert "coffee" not in variants
        assert "coffees" in variants
        assert "best coffee" in variants

    def test_small_cap(self):
        from keyword_opportunity.modules.keyword_research.candidates import RuleBasedExpander

        assert len(RuleBasedExpander(cap=5, year=2025).expand("seo")) == 5

    def test_empty_seed(self):
        from keyword_opportunity.modules.keyword_research.candidates import RuleBasedExpander

        assert RuleBasedExpander().expand("   ") == []

    def test_long_seed_variants_stay_within_length(self):
        from keyword_opportunity.modules.keyword_research.candidates import RuleBasedExpander

        seed = "x" * 95
        variants = RuleBasedExpander(cap=500, year=2025).expand(seed)
        assert all(len(v) <= 100 for v in variants)


class TestAIResponseParsing:
    """parse_response tolerates JSON, embedded arrays, fences and bullet lists."""

    def test_plain_json_array(self):
        from keyword_opportunity.modules.keyword_research.candidates import AIKeywordExpander

        assert AIKeywordExpander.parse_response('["a b", "c d"]') == ["a b", "c d"]

    def test_code_fenced_json(self):
        from keyword_opportunity.modules.keyword_research.candidates import AIKeywordExpander

        text = '```json\n["seo audit", "seo checklist"]\n```'
        assert AIKeywordExpander.parse_response(text) == ["seo audit", "seo checklist"]

    def test_array_embedded_in_prose(self):
        from keyword_opportunity.modules.keyword_research.candidates import AIKeywordExpander

        text = 'Here are some ideas: ["seo audit", "seo checklist"] hope it helps'
        assert AIKeywordExpander.parse_response(text) == ["seo audit", "seo checklist"]

    def test_categorized_object(self):
        from keyword_opportunity.modules.keyword_research.candidates import AIKeywordExpander

        text = json.dumps({
            "core": ["seo audit"],
            "questions": ["how to do an seo audit"],
            "note": "ignored",
        })
        assert AIKeywordExpander.parse_response(text) == [
            "seo audit", "how to do an seo audit",
        ]

    def test_bullet_list_fallback(self):
        from keyword_opportunity.modules.keyword_research.candidates import AIKeywordExpander

        text = "Keywords:\n- seo audit\n2. \"seo checklist\",\n* seo tools"
        assert AIKeywordExpander.parse_response(text) == [
            "seo audit", "seo checklist", "seo tools",
        ]

    def test_empty(self):
        from keyword_opportunity.modules.keyword_research.candidates import AIKeywordExpander

        assert AIKeywordExpander.parse_response("   ") == []


class TestAISanitize:
    """Every AI phrase passes the same validation filter."""

    def test_filters(self):
        from keyword_opportunity.modules.keyword_research.candidates import AIKeywordExpander

        phrases = [
            "Content Marketing",                 # seed
            "content marketing tips",
            "CONTENT MARKETING TIPS",            # duplicate
            "ab",                                # too short
            "one two three four five six seven eight nine ten eleven",
            "x" * 101,
            "content marketing <script>",
            "content-marketing tools",
            "what's content marketing",
        ]
        clean = AIKeywordExpander.sanitize(phrases, "content marketing", cap=90)
        assert clean == [
            "content marketing tips",
            "content-marketing tools",
            "what's content marketing",
        ]

    def test_cap(self):
        from keyword_opportunity.modules.keyword_research.candidates import AIKeywordExpander

        phrases = ["phrase number " + str(i) for i in range(200)]
        assert len(AIKeywordExpander.sanitize(phrases, "seed", cap=90)) == 90


class TestAIKeywordExpander:
    """expand() calls the model and raises AIGenerationError on any failure."""

    @pytest.mark.asyncio
    async def test_expand_passes_model_and_prompt(self, mock_llm_client):
        from keyword_opportunity.modules.keyword_research.candidates import AIKeywordExpander

        expander = AIKeywordExpander(mock_llm_client, model="gpt-4o-mini")
        phrases = await expander.expand("content marketing", country="gb")

        assert phrases == [
            "content marketing strategy",
            "content marketing examples",
            "what is content marketing",
        ]
        args, kwargs = mock_llm_client.generate_text.call_args
        assert "content marketing" in args[0]
        assert "GB market" in args[0]
        assert kwargs["model"] == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_expand_wraps_llm_errors(self, mock_llm_client):
        from keyword_opportunity.exceptions import AIGenerationError
        from keyword_opportunity.modules.keyword_research.candidates import AIKeywordExpander

        mock_llm_client.generate_text.side_effect = RuntimeError("No LLM provider configured.")
        with pytest.raises(AIGenerationError) as excinfo:
            await AIKeywordExpander(mock_llm_client).expand("seo")
        assert excinfo.value.stage == "ai candidate generation"

    @pytest.mark.asyncio
    async def test_expand_empty_result_is_failure(self, mock_llm_client):
        from keyword_opportunity.exceptions import AIGenerationError
        from keyword_opportunity.modules.keyword_research.candidates import AIKeywordExpander

        mock_llm_client.generate_text.return_value = "[]"
        with pytest.raises(AIGenerationError):
            await AIKeywordExpander(mock_llm_client).expand("seo")


class TestCandidateGenerator:
    """AI failure always collapses to rule-based-only candidates."""

    @pytest.mark.asyncio
    async def test_combines_both_sources(self, mock_llm_client):
        from keyword_opportunity.modules.keyword_research.candidates import CandidateGenerator

        generator = CandidateGenerator(llm_client=mock_llm_client, year=2025)
        candidates = await generator.generate("content marketing")

        assert candidates.used_ai
        assert candidates.ai_generated[0] == "content marketing strategy"
        assert len(candidates.rule_based) > 0

    @pytest.mark.asyncio
    async def test_use_ai_false_skips_model(self, mock_llm_client):
        from keyword_opportunity.modules.keyword_research.candidates import CandidateGenerator

        generator = CandidateGenerator(llm_client=mock_llm_client)
        candidates = await generator.generate("seo", use_ai=False)

        assert candidates.ai_generated == []
        mock_llm_client.generate_text.assert_not_called()

    @pytest.mark.asyncio
    async def test_ai_error_falls_back(self, mock_llm_client):
        from keyword_opportunity.modules.keyword_research.candidates import CandidateGenerator

        mock_llm_client.generate_text.side_effect = ValueError("garbage")
        candidates = await CandidateGenerator(llm_client=mock_llm_client).generate("seo")

        assert candidates.ai_generated == []
        assert len(candidates.rule_based) > 0

    @pytest.mark.asyncio
    async def test_ai_timeout_falls_back(self, mock_llm_client):
        from keyword_opportunity.modules.keyword_research.candidates import CandidateGenerator

        async def slow(*args, **kwargs):
            await asyncio.sleep(5)
            return '["never used"]'

        mock_llm_client.generate_text.side_effect = slow
        generator = CandidateGenerator(llm_client=mock_llm_client, ai_timeout=0.05)
        candidates = await generator.generate("seo")

        assert candidates.ai_generated == []
        assert len(candidates.rule_based) > 0

    @pytest.mark.asyncio
    async def test_without_llm_client(self):
        from keyword_opportunity.modules.keyword_research.candidates import CandidateGenerator

        candidates = await CandidateGenerator(llm_client=None).generate("seo")
        assert not candidates.used_ai


class TestCandidateBatch:
    """CandidateSet.to_batch ordering and ceiling."""

    def test_seed_first_then_ai_then_rules(self):
        from keyword_opportunity.models.keyword import CandidateSet

        candidates = CandidateSet(
            seed="seo",
            rule_based=["best seo", "seo tips", "seo audit"],
            ai_generated=["seo audit", "seo checklist"],
        )
        assert candidates.to_batch() == [
            "seo", "seo audit", "seo checklist", "best seo", "seo tips",
        ]

    def test_ceiling(self):
        from keyword_opportunity.models.keyword import CandidateSet

        candidates = CandidateSet(
            seed="seo",
            rule_based=["rule " + str(i) for i in range(80)],
            ai_generated=["ai " + str(i) for i in range(90)],
        )
        batch = candidates.to_batch(100)
        assert len(batch) == 100
        assert batch[0] == "seo"
        assert batch[1:91] == ["ai " + str(i) for i in range(90)]
        assert batch[91:] == ["rule " + str(i) for i in range(9)]
