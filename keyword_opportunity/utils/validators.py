"""Input validation utilities for seed phrases, country and currency codes."""

import re

_COUNTRY_RE = re.compile(r"^[A-Za-z]{2}$")
_CURRENCY_RE = re.compile(r"^[A-Za-z]{3}$")


def validate_seed_keyword(seed: str) -> tuple[bool, str]:
    """Validate a seed phrase.

    Args:
        seed: The phrase the user wants to research.

    Returns:
        Tuple of (is_valid, error_message).  error_message is empty on success.
    """
    if not seed or not isinstance(seed, str):
        return False, "Seed keyword is empty or not a string."
    seed = seed.strip()
    if not seed:
        return False, "Please enter a seed keyword."
    if len(seed) > 100:
        return False, "Seed keyword exceeds maximum length (100 chars)."
    return True, ""


def validate_country_code(country: str) -> tuple[bool, str]:
    """Validate a two-letter country code such as 'US' or 'gb'.

    An empty string is accepted and means global data.
    """
    if country is None or not isinstance(country, str):
        return False, "Country code is not a string."
    country = country.strip()
    if country and not _COUNTRY_RE.match(country):
        return False, f"Invalid country code: {country!r}. Use two letters, e.g. 'US'."
    return True, ""


def validate_currency_code(currency: str) -> tuple[bool, str]:
    """Validate a three-letter ISO currency code such as 'USD'."""
    if not currency or not isinstance(currency, str):
        return False, "Currency code is empty or not a string."
    currency = currency.strip()
    if not _CURRENCY_RE.match(currency):
        return False, f"Invalid currency code: {currency!r}. Use three letters, e.g. 'USD'."
    return True, ""


def validate_limit(limit: int) -> tuple[bool, str]:
    """Validate a result-page limit (any non-negative integer)."""
    if isinstance(limit, bool) or not isinstance(limit, int):
        return False, "Limit must be an integer."
    if limit < 0:
        return False, "Limit must be zero or greater."
    return True, ""
