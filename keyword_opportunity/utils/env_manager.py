"""Environment variable manager for provider credentials and settings.

Reads and writes the project ``.env`` file through python-dotenv, and
reports which registered keys are configured, with masked values for
display.
"""

import os
import shutil
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from dotenv import set_key as dotenv_set_key
from dotenv import unset_key as dotenv_unset_key


class EnvManager:
    """Manages the .env file for API keys and configuration."""

    API_KEY_REGISTRY = {
        # Keyword metrics
        "KEYWORDS_EVERYWHERE_API_KEY": {
            "category": "Keyword Metrics",
            "label": "Keywords Everywhere API Key",
            "description": "Search volume, CPC, competition and trend data (required)",
            "required": True,
            "docs_url": "https://keywordseverywhere.com/api-documentation.html",
            "is_secret": True,
        },
        "KEYWORDS_EVERYWHERE_ENABLED": {
            "category": "Keyword Metrics",
            "label": "Keywords Everywhere Enabled",
            "description": "Set to false to switch the metrics provider off (default: true)",
            "required": False,
            "docs_url": "",
        },

        # AI / LLM
        "OPENAI_API_KEY": {
            "category": "AI / LLM",
            "label": "OpenAI API Key",
            "description": "Primary model for AI keyword suggestions",
            "required": False,
            "docs_url": "https://platform.openai.com/api-keys",
            "is_secret": True,
        },
        "GEMINI_API_KEY": {
            "category": "AI / LLM",
            "label": "Google Gemini API Key",
            "description": "Fallback model for AI keyword suggestions",
            "required": False,
            "docs_url": "https://aistudio.google.com/app/apikey",
            "is_secret": True,
        },

        # Application Settings
        "DEFAULT_COUNTRY": {
            "category": "App Settings",
            "label": "Default Country",
            "description": "Two-letter market code used when none is given (default: US)",
            "required": False,
            "docs_url": "",
        },
        "LOG_LEVEL": {
            "category": "App Settings",
            "label": "Log Level",
            "description": "Logging verbosity: DEBUG, INFO, WARNING, ERROR",
            "required": False,
            "docs_url": "",
        },
    }

    def __init__(self, env_path: Optional[str] = None):
        if env_path:
            self.env_path = Path(env_path)
        else:
            self.env_path = Path(__file__).parent.parent.parent / ".env"

    def load_env(self) -> dict[str, str]:
        """Load all variables from the .env file (empty dict if missing)."""
        if not self.env_path.exists():
            return {}
        return {k: v or "" for k, v in dotenv_values(self.env_path).items()}

    def get_key(self, key_name: str) -> Optional[str]:
        """Value from .env, falling back to the process environment."""
        value = self.load_env().get(key_name, "") or os.environ.get(key_name, "")
        return value or None

    def set_key(self, key_name: str, value: str) -> None:
        """Write one key to .env and to the current process environment."""
        self.ensure_env_exists()
        dotenv_set_key(str(self.env_path), key_name, value)
        os.environ[key_name] = value

    def delete_key(self, key_name: str) -> None:
        if self.env_path.exists() and key_name in self.load_env():
            dotenv_unset_key(str(self.env_path), key_name)
        os.environ.pop(key_name, None)

    def get_status(self) -> dict[str, dict]:
        """Configuration status for every registered key."""
        env_vars = self.load_env()
        status = {}
        for key, meta in self.API_KEY_REGISTRY.items():
            value = env_vars.get(key, "") or os.environ.get(key, "")
            status[key] = {
                **meta,
                "configured": bool(value),
                "masked_value": self._mask_value(value) if meta.get("is_secret") else value,
            }
        return status

    def missing_required(self) -> list[str]:
        """Registered keys marked required that have no value."""
        return [
            key for key, info in self.get_status().items()
            if info["required"] and not info["configured"]
        ]

    @staticmethod
    def _mask_value(value: str) -> str:
        """Mask a value for display (first 4 and last 4 chars shown)."""
        if not value:
            return ""
        if len(value) <= 10:
            return "*" * len(value)
        return value[:4] + "*" * (len(value) - 8) + value[-4:]

    def ensure_env_exists(self) -> None:
        """Create .env from .env.example (or empty) if it doesn't exist."""
        if self.env_path.exists():
            return
        example_path = self.env_path.parent / ".env.example"
        if example_path.exists():
            shutil.copy(example_path, self.env_path)
        else:
            self.env_path.parent.mkdir(parents=True, exist_ok=True)
            self.env_path.touch()
