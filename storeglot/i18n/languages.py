"""
Language codes and utilities.

Storefront locales arrive in many spellings ("en", "EN_us", "english",
Saleor's "PT_BR"). Everything internal uses lower-case ISO 639-1 codes with
an optional lower-case region ("pt-br"); DeepL wants upper case ("PT-BR").
"""

from __future__ import annotations

from enum import Enum


class Language(str, Enum):
    """Languages with first-class support (DeepL target languages)."""

    AR = "ar"
    BG = "bg"
    CS = "cs"
    DA = "da"
    DE = "de"
    EL = "el"
    EN = "en"
    EN_GB = "en-gb"
    EN_US = "en-us"
    ES = "es"
    ET = "et"
    FI = "fi"
    FR = "fr"
    HU = "hu"
    ID = "id"
    IT = "it"
    JA = "ja"
    KO = "ko"
    LT = "lt"
    LV = "lv"
    NB = "nb"
    NL = "nl"
    PL = "pl"
    PT = "pt"
    PT_BR = "pt-br"
    PT_PT = "pt-pt"
    RO = "ro"
    RU = "ru"
    SK = "sk"
    SL = "sl"
    SV = "sv"
    TR = "tr"
    UK = "uk"
    ZH = "zh"


LANGUAGE_NAMES: dict[str, str] = {
    "ar": "Arabic",
    "bg": "Bulgarian",
    "cs": "Czech",
    "da": "Danish",
    "de": "German",
    "el": "Greek",
    "en": "English",
    "en-gb": "English (British)",
    "en-us": "English (American)",
    "es": "Spanish",
    "et": "Estonian",
    "fa": "Persian",
    "fi": "Finnish",
    "fr": "French",
    "he": "Hebrew",
    "hu": "Hungarian",
    "id": "Indonesian",
    "it": "Italian",
    "ja": "Japanese",
    "ko": "Korean",
    "lt": "Lithuanian",
    "lv": "Latvian",
    "nb": "Norwegian (Bokmål)",
    "nl": "Dutch",
    "pl": "Polish",
    "pt": "Portuguese",
    "pt-br": "Portuguese (Brazilian)",
    "pt-pt": "Portuguese (European)",
    "ro": "Romanian",
    "ru": "Russian",
    "sk": "Slovak",
    "sl": "Slovenian",
    "sv": "Swedish",
    "tr": "Turkish",
    "uk": "Ukrainian",
    "ur": "Urdu",
    "zh": "Chinese",
}

# Right-to-left scripts need a `dir` attribute on rendered HTML
RTL_LANGUAGES: frozenset[str] = frozenset({"ar", "he", "fa", "ur"})

# Spelled-out names people put in config files
_NAME_VARIANTS = {
    "english": "en",
    "spanish": "es",
    "french": "fr",
    "german": "de",
    "italian": "it",
    "portuguese": "pt",
    "dutch": "nl",
    "polish": "pl",
    "russian": "ru",
    "japanese": "ja",
    "chinese": "zh",
    "korean": "ko",
    "arabic": "ar",
    "hebrew": "he",
    "persian": "fa",
    "farsi": "fa",
    "norwegian": "nb",
    "swedish": "sv",
    "danish": "da",
    "finnish": "fi",
    "turkish": "tr",
    "ukrainian": "uk",
}


def normalize_language_code(code: str) -> str:
    """
    Normalize a language code to `xx` or `xx-yy`.

    >>> normalize_language_code("PT_BR")
    'pt-br'
    >>> normalize_language_code("English")
    'en'
    """
    code = code.strip().lower().replace("_", "-")
    return _NAME_VARIANTS.get(code, code)


def base_language(code: str) -> str:
    """Strip the region: `pt-br` -> `pt`."""
    return normalize_language_code(code).split("-")[0]


def to_deepl_code(code: str) -> str:
    """DeepL spelling of a language code (`pt-br` -> `PT-BR`)."""
    return normalize_language_code(code).upper()


def is_rtl(code: str) -> bool:
    """Check if language is right-to-left."""
    return base_language(code) in RTL_LANGUAGES


def get_language_name(code: str) -> str:
    """Get human-readable language name."""
    code = normalize_language_code(code)
    return LANGUAGE_NAMES.get(code, LANGUAGE_NAMES.get(code.split("-")[0], code))


def get_language_by_code(code: str) -> Language | None:
    """Get Language enum by code."""
    try:
        return Language(normalize_language_code(code))
    except ValueError:
        return None
