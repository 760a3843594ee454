"""Tests for translation language codes."""

import pytest

from sct.core.languages import (
    AUTO,
    TRANSLATION_LANGUAGES,
    is_valid_language,
    language_name,
    validate_language,
)


def test_common_languages_supported():
    for code in ("en", "zh-Hans", "zh-Hant", "ja", "ko", "fr", "de"):
        assert code in TRANSLATION_LANGUAGES


def test_auto_only_valid_as_source():
    assert is_valid_language(AUTO, allow_auto=True)
    assert not is_valid_language(AUTO)


def test_language_name():
    assert language_name("ja") == "japanese"
    assert language_name("auto") == "auto-detect"
    assert language_name("xx") == "xx"


def test_validate_language():
    assert validate_language("fr") == "fr"
    with pytest.raises(ValueError, match="sct languages"):
        validate_language("klingon")
    with pytest.raises(ValueError):
        validate_language("auto")
