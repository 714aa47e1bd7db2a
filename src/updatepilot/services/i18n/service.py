"""Internationalization service for UpdatePilot."""

import json
from pathlib import Path
from typing import Any

from updatepilot.logger import get_logger

logger = get_logger(__name__)


class I18nService:
    """
    Loads and provides localized strings from i18n.json.

    Keys are nested objects whose leaves map language codes to text:
    {
        "api": {
            "http_error": {
                "404": { "en": "Resource not found ...", "de": "Ressource nicht gefunden ..." }
            }
        }
    }
    """

    def __init__(self, i18n_file: Path) -> None:
        """
        Initialize I18n service.

        Args:
            i18n_file: Path to i18n.json file
        """
        self.i18n_file = i18n_file
        self._data: dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        """Load i18n data from file."""
        try:
            if self.i18n_file.exists():
                with open(self.i18n_file, encoding="utf-8") as f:
                    self._data = json.load(f)
                logger.info(f"Loaded i18n data from {self.i18n_file}")
            else:
                logger.warning(f"I18n file not found: {self.i18n_file}")
                self._data = {}
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load i18n file: {e}")
            self._data = {}

    def _lookup(self, path: str) -> dict[str, str] | None:
        node: Any = self._data
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node if isinstance(node, dict) else None

    def translate(self, path: str, lang: str = "en", default: str | None = None, **params: object) -> str:
        """
        Translate a dot-path key.

        Args:
            path: Dot-separated key (e.g., "api.http_error.404")
            lang: Language code, falls back to English
            default: Returned when the key is missing; the path itself if None
            **params: Values substituted into "{name}" placeholders

        Returns:
            Localized, formatted text
        """
        entry = self._lookup(path)
        text = None
        if entry:
            text = entry.get(lang) or entry.get("en")

        if not text:
            return default if default is not None else path

        try:
            return text.format(**params)
        except (KeyError, IndexError, ValueError):
            logger.warning(f"Failed to format i18n text for {path}")
            return text

    def reload(self) -> None:
        """Reload i18n data from file."""
        self._load()
