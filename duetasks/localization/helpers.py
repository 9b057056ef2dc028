"""Localization helper functions."""
from __future__ import annotations

from typing import Optional
from fastapi import Request

from duetasks.localization.translations import TRANSLATIONS


def get_locale_from_request(request: Optional[Request] = None, default: str = "en") -> str:
    """Extract locale from request Accept-Language header or return default."""
    if request is None:
        return default

    accept_language = request.headers.get("Accept-Language", "")
    if not accept_language:
        return default

    # e.g. "ru-RU,ru;q=0.9,en;q=0.8": only the first language counts
    first_lang = accept_language.split(",")[0].split(";")[0].strip().lower()
    if first_lang.startswith("ru"):
        return "ru"
    if first_lang.startswith("en"):
        return "en"
    return default


def get_translation(key: str, locale: str = "en", **kwargs) -> str:
    """Get translated message for a key, with optional formatting."""
    translations = TRANSLATIONS.get(locale.lower(), TRANSLATIONS["en"])
    message = translations.get(key) or TRANSLATIONS["en"].get(key, key)

    if kwargs:
        try:
            message = message.format(**kwargs)
        except (KeyError, ValueError):
            pass

    return message


def t(key: str, locale: str = "en", **kwargs) -> str:
    """Short alias for get_translation."""
    return get_translation(key, locale, **kwargs)
