"""Keyword Opportunity Research: seed expansion, metrics enrichment and opportunity ranking."""

__version__ = "1.0.0"
