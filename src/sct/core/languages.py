"""Translation language definitions.

Codes follow BCP-47 style tags as accepted by the supported providers
("zh-Hans" / "zh-Hant" for the Chinese scripts). "auto" is only meaningful
as a source language and asks the provider to detect it.
"""

from __future__ import annotations

AUTO = "auto"

# fmt: off
TRANSLATION_LANGUAGES: dict[str, str] = {
    "en": "english",      "zh-Hans": "chinese (simplified)",
    "zh-Hant": "chinese (traditional)",                   "ja": "japanese",
    "ko": "korean",       "fr": "french",       "de": "german",
    "es": "spanish",      "it": "italian",      "pt": "portuguese",
    "ru": "russian",      "ar": "arabic",       "hi": "hindi",
    "th": "thai",         "vi": "vietnamese",   "nl": "dutch",
    "pl": "polish",       "tr": "turkish",      "uk": "ukrainian",
    "cs": "czech",        "sv": "swedish",      "da": "danish",
    "fi": "finnish",      "no": "norwegian",    "el": "greek",
    "he": "hebrew",       "id": "indonesian",   "ms": "malay",
    "ro": "romanian",
}
# fmt: on


def is_valid_language(code: str, allow_auto: bool = False) -> bool:
    """Check if a language code is supported for translation."""
    if allow_auto and code == AUTO:
        return True
    return code in TRANSLATION_LANGUAGES


def language_name(code: str) -> str:
    """Get the full language name for a code, or the code itself if unknown."""
    if code == AUTO:
        return "auto-detect"
    return TRANSLATION_LANGUAGES.get(code, code)


def validate_language(code: str, allow_auto: bool = False) -> str:
    """Validate a language code and return it, raising ValueError if invalid."""
    if not is_valid_language(code, allow_auto=allow_auto):
        raise ValueError(
            f"Unsupported language: '{code}'. "
            f"Run 'sct languages' to see all {len(TRANSLATION_LANGUAGES)} supported languages."
        )
    return code
