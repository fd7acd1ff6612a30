"""Keyword analyzer -- research summaries and CSV/JSON export."""

import csv
import io
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any

from keyword_opportunity.models.keyword import ResearchResult
from keyword_opportunity.utils.helpers import (
    competition_label,
    format_cpc,
    format_volume,
    score_band,
)

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "category", "keyword", "volume", "cpc", "competition",
    "competition_label", "score", "score_band", "rationale", "trend",
]


class KeywordAnalyzer:
    """Summarize and export keyword research results.

    Usage::

        analyzer = KeywordAnalyzer()
        report = analyzer.generate_keyword_report(result)
        path = await analyzer.export_to_csv(result, "exports/content-marketing.csv")
    """

    # ------------------------------------------------------------------
    # generate_keyword_report
    # ------------------------------------------------------------------

    def generate_keyword_report(self, result: ResearchResult, top_n: int = 10) -> dict:
        """Build a structured summary of a research result."""
        tagged = result.all_keywords()
        scores = [kw.score for _, kw in tagged]
        avg_score = sum(scores) // len(scores) if scores else 0

        band_distribution: dict[str, int] = {"high": 0, "medium": 0, "low": 0}
        for score in scores:
            band_distribution[score_band(score)] += 1

        top_opportunities = sorted(
            (kw for _, kw in tagged), key=lambda kw: kw.score, reverse=True,
        )[:top_n]

        report = {
            "seed_keyword": result.seed_keyword,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "total_results": result.total_results,
            "displayed": {
                "seed": len(result.keywords),
                "related": len(result.related_keywords),
                "questions": len(result.question_keywords),
            },
            "total_volume": sum(kw.volume or 0 for _, kw in tagged),
            "average_score": avg_score,
            "score_bands": band_distribution,
            "top_opportunities": [
                {
                    "keyword": kw.phrase,
                    "score": kw.score,
                    "volume": format_volume(kw.volume),
                    "rationale": kw.rationale,
                }
                for kw in top_opportunities
            ],
        }
        logger.info(
            "Keyword report for %r: %d keywords, avg score=%d",
            result.seed_keyword, len(tagged), avg_score,
        )
        return report

    # ------------------------------------------------------------------
    # export_to_csv
    # ------------------------------------------------------------------

    async def export_to_csv(self, result: ResearchResult, filepath: str) -> str:
        """Export every displayed keyword to a CSV file.

        Returns the absolute filepath of the created CSV.
        """
        rows = self._rows(result)
        logger.info("Exporting %d keywords to CSV: %s", len(rows), filepath)

        dirpath = os.path.dirname(filepath)
        if dirpath:
            os.makedirs(dirpath, exist_ok=True)

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS, extrasaction="ignore")
            writer.writeheader()
            writer.writerows(rows)

        abs_path = os.path.abspath(filepath)
        logger.info("CSV exported: %s (%d rows)", abs_path, len(rows))
        return abs_path

    # ------------------------------------------------------------------
    # export_to_json
    # ------------------------------------------------------------------

    async def export_to_json(self, result: ResearchResult, filepath: str) -> str:
        """Export the full result, plus its summary, to a JSON file.

        Returns the absolute filepath of the created JSON.
        """
        logger.info("Exporting research data to JSON: %s", filepath)

        dirpath = os.path.dirname(filepath)
        if dirpath:
            os.makedirs(dirpath, exist_ok=True)

        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.research_to_json_bytes(result).decode("utf-8"))

        abs_path = os.path.abspath(filepath)
        logger.info("JSON exported: %s", abs_path)
        return abs_path

    # ------------------------------------------------------------------
    # Utility: in-memory export
    # ------------------------------------------------------------------

    @classmethod
    def keywords_to_csv_bytes(cls, result: ResearchResult) -> bytes:
        """CSV export as bytes, for download buttons or HTTP responses."""
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(cls._rows(result))
        return output.getvalue().encode("utf-8")

    @staticmethod
    def research_to_json_bytes(result: ResearchResult) -> bytes:
        data = result.to_dict()
        data["summary"] = KeywordAnalyzer().generate_keyword_report(result)
        return json.dumps(
            data, indent=2, default=str, ensure_ascii=False
        ).encode("utf-8")

    @staticmethod
    def _rows(result: ResearchResult) -> list[dict[str, Any]]:
        rows = []
        for category, kw in result.all_keywords():
            rows.append({
                "category": category,
                "keyword": kw.phrase,
                "volume": kw.volume if kw.volume is not None else "",
                "cpc": format_cpc(kw.cpc),
                "competition": kw.competition if kw.competition is not None else "",
                "competition_label": competition_label(kw.competition),
                "score": kw.score,
                "score_band": score_band(kw.score),
                "rationale": kw.rationale,
                "trend": json.dumps(kw.trend) if kw.trend else "",
            })
        return rows
