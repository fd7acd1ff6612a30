"""Candidate generation -- rule-based and AI-assisted expansion of a seed phrase."""

import asyncio
import json
import logging
import re
from datetime import datetime
from typing import Any, Optional

from keyword_opportunity.exceptions import AIGenerationError
from keyword_opportunity.models.keyword import MAX_PHRASE_LENGTH, CandidateSet
from keyword_opportunity.utils.helpers import normalize_phrase

logger = logging.getLogger(__name__)

RULE_BASED_CAP = 80
AI_GENERATED_CAP = 90
AI_MAX_WORDS = 10
AI_MIN_LENGTH = 3

INTENT_PREFIXES = [
    "best", "top", "how to", "what is", "free", "cheap", "online",
    "affordable", "professional", "easy",
]

SUFFIXES = [
    "guide", "tips", "cost", "price", "near me", "review", "reviews",
    "examples", "ideas", "tools", "service", "services", "software",
    "for beginners", "checklist", "template", "benefits", "strategy",
]

QUESTION_TEMPLATES = [
    "how to {seed}",
    "what is {seed}",
    "why is {seed} important",
    "how does {seed} work",
    "what are the benefits of {seed}",
    "how much does {seed} cost",
    "when to use {seed}",
    "where to find {seed}",
    "why {seed}",
    "when {seed}",
    "where {seed}",
    "is {seed} worth it",
]

COMPARISON_TEMPLATES = [
    "{seed} vs",
    "{seed} alternatives",
    "{seed} comparison",
    "buy {seed}",
    "{seed} for sale",
    "{seed} deals",
]

STOP_WORDS = {
    "the", "and", "for", "with", "from", "into", "your", "you", "our",
    "are", "was", "were", "that", "this", "these", "those", "but", "not",
}

_ALLOWED_PHRASE_RE = re.compile(r"^(?:[^\W_]|[\s'\-])+$")
_BULLET_RE = re.compile(r"^\s*(?:[-*•>]+|\d+[.)])\s*")
_QUOTES = "\"'`“”‘’"


class RuleBasedExpander:
    """Deterministic seed expansion from prefix, suffix, and question templates.

    No I/O and no failure modes; this is the guaranteed fallback when the
    AI expander produces nothing.
    """

    def __init__(self, cap: int = RULE_BASED_CAP, year: Optional[int] = None):
        self._cap = cap
        self._year = year

    def expand(self, seed: str) -> list[str]:
        """Return up to ``cap`` variants of ``seed``, shortest first."""
        seed_norm = normalize_phrase(seed)
        if not seed_norm:
            return []
        year = self._year or datetime.now().year

        variants: list[str] = []
        for prefix in INTENT_PREFIXES:
            variants.append(prefix + " " + seed_norm)
        for suffix in SUFFIXES + [str(year)]:
            variants.append(seed_norm + " " + suffix)
        for template in QUESTION_TEMPLATES:
            variants.append(template.format(seed=seed_norm))
        variants.extend(self._number_variants(seed_norm))
        variants.extend(self._word_variants(seed_norm))
        for template in COMPARISON_TEMPLATES:
            variants.append(template.format(seed=seed_norm))

        seen: set[str] = {seed_norm}
        unique: list[str] = []
        for variant in variants:
            phrase = normalize_phrase(variant)
            if not phrase or len(phrase) > MAX_PHRASE_LENGTH or phrase in seen:
                continue
            seen.add(phrase)
            unique.append(phrase)

        # Shorter phrases are likelier to carry search volume; sort is stable.
        unique.sort(key=len)
        return unique[: self._cap]

    @staticmethod
    def _number_variants(seed: str) -> list[str]:
        """Plural and singular forms, inflecting the last word only."""
        words = seed.split()
        last = words[-1]
        head = words[:-1]
        forms: list[str] = []
        if last.endswith("ies") and len(last) > 4:
            forms.append(last[:-3] + "y")
        elif last.endswith(("ches", "shes", "sses", "xes", "zes")):
            forms.append(last[:-2])
        elif last.endswith("s") and not last.endswith("ss") and len(last) > 3:
            forms.append(last[:-1])
        else:
            if last.endswith("y") and len(last) > 2 and last[-2] not in "aeiou":
                forms.append(last[:-1] + "ies")
            elif last.endswith(("ch", "sh", "s", "x", "z")):
                forms.append(last + "es")
            else:
                forms.append(last + "s")
        return [" ".join(head + [form]) for form in forms]

    @staticmethod
    def _word_variants(seed: str) -> list[str]:
        """Variants built on each significant word of a multi-word seed."""
        words = seed.split()
        if len(words) < 2:
            return []
        variants: list[str] = []
        for word in words:
            if len(word) < 3 or word in STOP_WORDS:
                continue
            variants.extend([
                word,
                "best " + word,
                word + " tips",
                "what is " + word,
            ])
        return variants


class AIKeywordExpander:
    """Ask the language model for keyword ideas and sanitize what comes back.

    ``expand`` raises ``AIGenerationError`` on any failure, including an
    empty result; the candidate generator decides how to recover.
    """

    def __init__(
        self,
        llm_client,
        model: Optional[str] = None,
        cap: int = AI_GENERATED_CAP,
    ):
        self._llm = llm_client
        self._model = model
        self._cap = cap

    async def expand(self, seed: str, country: str = "US") -> list[str]:
        prompt = self.build_prompt(seed, country, self._cap)
        try:
            raw = await self._llm.generate_text(
                prompt,
                system_prompt=(
                    "You are an expert SEO keyword researcher. "
                    "Respond ONLY with a JSON array of strings."
                ),
                model=self._model,
            )
        except Exception as exc:
            raise AIGenerationError("Language model call failed: " + str(exc)) from exc

        phrases = self.sanitize(self.parse_response(raw or ""), seed, self._cap)
        if not phrases:
            raise AIGenerationError("Language model returned no usable keyword phrases.")
        logger.info("AI generated %d keyword phrases for %r", len(phrases), seed)
        return phrases

    @staticmethod
    def build_prompt(seed: str, country: str = "US", count: int = AI_GENERATED_CAP) -> str:
        """Structured research prompt; the country only shapes the wording."""
        market = "the " + country.upper() + " market" if country else "a global audience"
        return (
            "Research the topic \"" + seed.strip() + "\" for " + market + ".\n\n"
            "Step 1 - Intent analysis: work out who searches for this topic, "
            "what problem they are trying to solve, and what they would type "
            "into a search engine at each stage of their journey.\n\n"
            "Step 2 - Generate up to " + str(count) + " realistic search queries "
            "covering these categories:\n"
            "- Core: direct variations of the topic\n"
            "- Informational: learning and understanding\n"
            "- Problem-solving: fixing or troubleshooting\n"
            "- Commercial: comparing, reviewing, evaluating options\n"
            "- Transactional: buying, hiring, signing up\n"
            "- Question: full questions starting with how/what/why/when/where\n"
            "- Long-tail: specific 4-8 word phrases\n\n"
            "Rules:\n"
            "- Use spelling and phrasing natural for " + market + ".\n"
            "- Each query must be under 100 characters and at most 10 words.\n"
            "- Use only letters, numbers, spaces, hyphens and apostrophes.\n"
            "- Do not repeat the topic itself on its own.\n\n"
            "Return ONLY a single flat JSON array of strings, for example:\n"
            "[\"keyword one\", \"keyword two\"]\n"
            "No categories, no explanations, no markdown."
        )

    @staticmethod
    def parse_response(text: str) -> list[str]:
        """Extract phrases from free-form model output.

        Tries, in order: the whole text as JSON, the first ``[...]``
        substring as JSON, then one phrase per line.
        """
        cleaned = text.strip()
        if cleaned.startswith("```"):
            lines = cleaned.split("\n")[1:]
            if lines and lines[-1].strip().startswith("```"):
                lines = lines[:-1]
            cleaned = "\n".join(lines).strip()
        if not cleaned:
            return []

        try:
            return _flatten_json_phrases(json.loads(cleaned))
        except ValueError:
            pass

        for pattern in (r"\[[\s\S]*?\]", r"\[[\s\S]*\]"):
            match = re.search(pattern, cleaned)
            if not match:
                continue
            try:
                return _flatten_json_phrases(json.loads(match.group(0)))
            except ValueError:
                continue

        logger.debug("AI response is not JSON; falling back to line splitting")
        phrases: list[str] = []
        for line in cleaned.splitlines():
            line = _BULLET_RE.sub("", line).strip().rstrip(",").strip(_QUOTES).strip()
            if not line or line.endswith(":") or line in ("[", "]"):
                continue
            phrases.append(line)
        return phrases

    @staticmethod
    def sanitize(phrases: list[str], seed: str, cap: int = AI_GENERATED_CAP) -> list[str]:
        """Validation filter applied to every AI phrase, whatever path parsed it."""
        seed_norm = normalize_phrase(seed)
        seen: set[str] = set()
        clean: list[str] = []
        for raw in phrases:
            phrase = normalize_phrase(raw)
            if not phrase or phrase == seed_norm or phrase in seen:
                continue
            if len(phrase) < AI_MIN_LENGTH or len(phrase) > MAX_PHRASE_LENGTH:
                continue
            if len(phrase.split()) > AI_MAX_WORDS:
                continue
            if not _ALLOWED_PHRASE_RE.match(phrase):
                continue
            seen.add(phrase)
            clean.append(phrase)
            if len(clean) >= cap:
                break
        return clean


def _flatten_json_phrases(data: Any) -> list[str]:
    """Collect strings from a JSON array, or from the list values of an object."""
    if isinstance(data, str):
        return [data]
    if isinstance(data, dict):
        if "keyword" in data:
            return [str(data["keyword"])]
        phrases: list[str] = []
        for value in data.values():
            if isinstance(value, (list, dict)):
                phrases.extend(_flatten_json_phrases(value))
        return phrases
    if isinstance(data, list):
        phrases = []
        for item in data:
            if isinstance(item, (str, dict, list)):
                phrases.extend(_flatten_json_phrases(item))
        return phrases
    raise ValueError("JSON payload holds no keyword phrases")


class CandidateGenerator:
    """Combine the rule-based and AI expanders into one CandidateSet.

    Usage::

        generator = CandidateGenerator(llm_client=LLMClient())
        candidates = await generator.generate("content marketing", country="US")
        batch = candidates.to_batch(ceiling=100)
    """

    def __init__(
        self,
        llm_client=None,
        rule_cap: int = RULE_BASED_CAP,
        ai_cap: int = AI_GENERATED_CAP,
        ai_timeout: float = 30.0,
        ai_model: Optional[str] = None,
        year: Optional[int] = None,
    ):
        self._rules = RuleBasedExpander(cap=rule_cap, year=year)
        self._ai = AIKeywordExpander(llm_client, model=ai_model, cap=ai_cap) if llm_client else None
        self._ai_timeout = ai_timeout

    async def generate(
        self, seed: str, country: str = "US", use_ai: bool = True,
    ) -> CandidateSet:
        seed = seed.strip()
        ai_task = None
        if use_ai and self._ai is not None:
            ai_task = asyncio.create_task(self._ai_candidates_or_empty(seed, country))

        rule_based = self._rules.expand(seed)
        ai_generated = await ai_task if ai_task is not None else []

        logger.info(
            "Candidates for %r: %d rule-based, %d AI-generated",
            seed, len(rule_based), len(ai_generated),
        )
        return CandidateSet(seed=seed, rule_based=rule_based, ai_generated=ai_generated)

    async def _ai_candidates_or_empty(self, seed: str, country: str) -> list[str]:
        """The single place where AI failure collapses to "no AI candidates"."""
        try:
            return await asyncio.wait_for(
                self._ai.expand(seed, country), timeout=self._ai_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "AI keyword expansion timed out after %.1fs; using rule-based candidates only",
                self._ai_timeout,
            )
        except AIGenerationError as exc:
            logger.warning("AI keyword expansion failed: %s; using rule-based candidates only", exc)
        except Exception as exc:
            logger.warning(
                "Unexpected AI expansion error: %s; using rule-based candidates only", exc,
            )
        return []
