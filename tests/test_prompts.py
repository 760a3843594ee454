"""Tests for prompt rendering, resolution and numbered response parsing."""

from sct.core.config import PromptConfig
from sct.core.models import TranslationScene
from sct.llm.prompts import (
    DEFAULT_INSERT_PROMPT,
    DEFAULT_PROMPT,
    default_template,
    format_numbered_segments,
    parse_numbered_response,
    parse_single_response,
    render_prompt,
    resolve_prompt_template,
)


def test_parse_extra_lines_truncated():
    response = "1. A\n2. B\n3. C\n4. D"
    result, exact = parse_numbered_response(response, 2)
    assert result == ["A", "B"]
    assert exact is False


def test_parse_fewer_lines_padded():
    response = "1. Only one"
    result, exact = parse_numbered_response(response, 3)
    assert result == ["Only one", "", ""]
    assert exact is False


def test_parse_exact_match():
    response = "1. Hello\n2. World"
    result, exact = parse_numbered_response(response, 2)
    assert result == ["Hello", "World"]
    assert exact is True


def test_parse_alternate_numbering():
    response = "1) 你好\n2: 世界"
    result, exact = parse_numbered_response(response, 2)
    assert result == ["你好", "世界"]
    assert exact is True


def test_parse_no_numbering_fallback():
    response = "Just plain text\nAnother line"
    result, exact = parse_numbered_response(response, 2)
    assert result == ["Just plain text", "Another line"]
    assert exact is True


def test_format_numbered_segments():
    assert format_numbered_segments(["File", "Edit"]) == "1. File\n2. Edit"


def test_render_prompt_uses_language_names():
    rendered = render_prompt(DEFAULT_PROMPT, "en", "ja", "Hello")
    assert "english" in rendered
    assert "japanese" in rendered
    assert rendered.rstrip().endswith("Hello")


def test_render_prompt_auto_source():
    assert "auto-detect" in render_prompt("{source_language}", None, "en")


def test_render_prompt_keeps_text_placeholder():
    rendered = render_prompt("To {target_language}: {text}", None, "fr")
    assert rendered == "To french: {text}"


def test_resolve_scene_prompt_wins():
    prompts = PromptConfig(
        engine_prompts={"ollama": "engine {text}"},
        scene_prompts={TranslationScene.SCREENSHOT: "scene {text}"},
    )
    template = resolve_prompt_template(prompts, "ollama", TranslationScene.SCREENSHOT, "bound")
    assert template == "scene {text}"


def test_resolve_engine_prompt_before_binding():
    prompts = PromptConfig(engine_prompts={"ollama": "engine {text}"})
    assert resolve_prompt_template(prompts, "ollama", None, "bound") == "engine {text}"
    assert resolve_prompt_template(prompts, "mtran", None, "bound") == "bound"


def test_resolve_none_without_custom_prompts():
    assert resolve_prompt_template(PromptConfig(), "ollama", TranslationScene.SCREENSHOT) is None


def test_default_template_per_scene():
    assert default_template(TranslationScene.TRANSLATE_AND_INSERT) is DEFAULT_INSERT_PROMPT
    assert default_template(TranslationScene.TEXT_SELECTION) is DEFAULT_PROMPT
    assert default_template(TranslationScene.SCREENSHOT) is None
    assert default_template(None) is None


def test_format_numbered_segments_encodes_line_breaks():
    assert format_numbered_segments(["Save", "Two\nlines\n"]) == "1. Save\n2. Two<br>lines"


def test_parse_decodes_line_breaks():
    response = "1. Enregistrer\n2. Deux <br/> lignes"
    result, exact = parse_numbered_response(response, 2)
    assert result == ["Enregistrer", "Deux\nlignes"]
    assert exact is True


def test_parse_single_response_keeps_all_lines():
    assert parse_single_response("1. Bonjour\nMonde") == "Bonjour\nMonde"
    assert parse_single_response("Bonjour<BR>Monde") == "Bonjour\nMonde"


def test_parse_single_response_only_strips_first_number():
    assert parse_single_response("2. Étape deux") == "2. Étape deux"
    assert parse_single_response("1) Premier\n2) Second") == "Premier\n2) Second"
