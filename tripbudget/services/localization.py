"""String catalog loaded once per selected language.

File format: ``{"KEY": {"en": "...", "pl": "...", "description": "..."}}``.
Per key the selected language wins, then English, then the key itself.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger("tripbudget.localization")

SYSTEM_LANGUAGE = "System"
STRINGS_FILE = "strings.json"

SUPPORTED_LANGUAGES: Dict[str, str] = {
    SYSTEM_LANGUAGE: "System",
    "en": "English",
    "pl": "Polski",
    "de": "Deutsch",
    "nl": "Nederlands",
    "es": "Español",
    "fr": "Français",
    "zh": "中文",
    "ja": "日本語",
    "pt": "Português",
    "cs": "Čeština",
    "sk": "Slovenčina",
    "hr": "Hrvatski",
    "ru": "Русский",
    "sr": "Српски",
    "uk": "Українська",
    "th": "ไทย",
    "hi": "हिन्दी",
    "el": "Ελληνικά",
    "it": "Italiano",
    "ar": "العربية",
    "hu": "Magyar",
    "fi": "Suomi",
    "is": "Íslenska",
    "no": "Norsk",
    "sv": "Svenska",
    "ro": "Română",
    "mn": "Монгол",
}


def resolve_language(language: str, system_language: str = "en") -> str:
    """Map the user's choice to a language code; 'System' only knows pl/en."""
    if language == SYSTEM_LANGUAGE or language not in SUPPORTED_LANGUAGES:
        return "pl" if system_language.lower().startswith("pl") else "en"
    return language


class LocalizationCatalog:
    def __init__(self, translations: Optional[Dict[str, str]] = None, language: str = "en"):
        self.language = language
        self._translations: Dict[str, str] = dict(translations or {})

    @classmethod
    def from_mapping(
        cls, data: Dict[str, Dict[str, str]], language: str
    ) -> "LocalizationCatalog":
        translations: Dict[str, str] = {}
        for key, details in data.items():
            if not isinstance(details, dict):
                translations[key] = key
            elif language in details:
                translations[key] = details[language]
            elif "en" in details:
                translations[key] = details["en"]
            else:
                translations[key] = key
        return cls(translations, language)

    @classmethod
    def load(
        cls, directory: Path, language: str, system_language: str = "en"
    ) -> "LocalizationCatalog":
        code = resolve_language(language, system_language)
        path = directory / STRINGS_FILE
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("could not load strings file %s: %s", path, exc)
            return cls(language=code)
        if not isinstance(data, dict):
            logger.warning("strings file %s is not an object", path)
            return cls(language=code)
        logger.info("loaded %d strings for '%s' from %s", len(data), code, path.name)
        return cls.from_mapping(data, code)

    @property
    def translations(self) -> Dict[str, str]:
        return dict(self._translations)

    def localized(self, key: str, *args: object) -> str:
        fmt = self._translations.get(key, key)
        if not args:
            return fmt
        try:
            return fmt.replace("%@", "%s") % args
        except (TypeError, ValueError):
            logger.warning("bad format arguments for key %s", key)
            return fmt

    def __contains__(self, key: object) -> bool:
        return key in self._translations
