"""Clients for external services: keyword metrics provider and language models."""
