import json
from functools import lru_cache
from pathlib import Path
from typing import Optional

import config
from enums.message_audience import MessageAudience

L10N_DIR = Path(__file__).resolve().parent.parent / "l10n"


class Localizator:

    @staticmethod
    @lru_cache(maxsize=None)
    def _load(language: str) -> dict:
        localization_file = L10N_DIR / f"{language}.json"
        with open(localization_file, "r", encoding="UTF-8") as f:
            return json.loads(f.read())

    @staticmethod
    def get_text(audience: MessageAudience, key: str, lang: Optional[str] = None) -> str:
        """
        Get localized text for given audience and key.

        Args:
            audience: Message audience (BUYER, SELLER, ADMIN, COMMON)
            key: Localization key
            lang: Optional language code (e.g., "fr", "en").
                  If None, uses config.LANGUAGE (default).
                  Pass it explicitly in FastAPI routes that honour Accept-Language.

        Returns:
            Localized text string

        Example:
            text = Localizator.get_text(MessageAudience.BUYER, "error_empty_cart", lang="en")
        """
        language = lang if lang is not None else config.LANGUAGE
        return Localizator._load(language)[audience.value][key]
