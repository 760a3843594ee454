"""Prompt templates for LLM translation and prompt template resolution."""

from __future__ import annotations

import re

from sct.core.config import PromptConfig
from sct.core.languages import language_name
from sct.core.models import TranslationScene

TRANSLATION_SYSTEM = """\
You are a professional translator for on-screen text. Translate text captured \
from a screenshot accurately while keeping it natural and concise.

Rules:
- Translate each numbered line from {source_language} to {target_language}
- Keep translations concise — they are drawn over the original text
- Keep product names, code, numbers and URLs unchanged
- Do NOT merge or split lines — return the EXACT same number of lines
- A <br> inside a line is a line break in the original text: keep it in the \
matching place of the translation, never replace it with a real newline
- Return ONLY the translated lines, numbered exactly as the input

Examples (en → fr):
Input:
1. File
2. Save as...
3. Unsaved changes<br>will be lost

Output:
1. Fichier
2. Enregistrer sous...
3. Les modifications non enregistrées<br>seront perdues
"""

TRANSLATION_USER = """\
Translate these {count} lines from {source_language} to {target_language}. \
Return exactly {count} numbered lines, one per input line.

{text}
"""

DEFAULT_PROMPT = """\
Translate the following text from {source_language} to {target_language}.
Provide only the translation without any explanations or additional text.

Text to translate:
{text}
"""

DEFAULT_INSERT_PROMPT = """\
Translate the following text from {source_language} to {target_language}.
The translation will be inserted at the cursor position.
Provide only the translation without any explanations, formatting, or additional text.
Keep the translation concise and natural for the target language.

Text to translate:
{text}
"""

LINE_BREAK = "<br>"
_LINE_BREAK_RE = re.compile(r"[ \t]*<br\s*/?>[ \t]*", re.IGNORECASE)
_NUMBER_SEPARATORS = (". ", ") ", ": ")


def encode_line_breaks(text: str) -> str:
    """Fold a multi-line text onto one line, marking each break with <br>."""
    return LINE_BREAK.join(text.strip().splitlines())


def decode_line_breaks(text: str) -> str:
    return _LINE_BREAK_RE.sub("\n", text)


def format_numbered_segments(texts: list[str]) -> str:
    """Format a list of texts as numbered lines for LLM input.

    Line breaks inside a text are encoded so each text stays on exactly
    one numbered line.
    """
    return "\n".join(f"{i + 1}. {encode_line_breaks(text)}" for i, text in enumerate(texts))


def render_prompt(
    template: str,
    source_language: str | None,
    target_language: str,
    text: str | None = None,
) -> str:
    """Substitute the template variables by plain substring replacement.

    With ``text=None`` the ``{text}`` variable is left in place for the
    provider, which fills it with the lines of each request it sends.
    """
    rendered = template.replace(
        "{source_language}", language_name(source_language or "auto")
    ).replace("{target_language}", language_name(target_language))
    if text is not None:
        rendered = rendered.replace("{text}", text)
    return rendered


def resolve_prompt_template(
    prompts: PromptConfig,
    engine: str,
    scene: TranslationScene | None,
    binding_prompt: str | None = None,
) -> str | None:
    """Pick the custom template for an engine and scene.

    Priority: scene prompt > engine prompt > scene binding's custom prompt.
    Returns None when nothing custom is configured, leaving the provider on
    its built-in prompt.
    """
    if scene is not None:
        scene_prompt = prompts.scene_prompts.get(scene)
        if scene_prompt:
            return scene_prompt
    engine_prompt = prompts.engine_prompts.get(engine)
    if engine_prompt:
        return engine_prompt
    if binding_prompt:
        return binding_prompt
    return None


def default_template(scene: TranslationScene | None) -> str | None:
    """Built-in single-text template for the text scenes.

    Screenshots return None: providers keep their numbered batch prompt.
    """
    if scene is TranslationScene.TRANSLATE_AND_INSERT:
        return DEFAULT_INSERT_PROMPT
    if scene is TranslationScene.TEXT_SELECTION:
        return DEFAULT_PROMPT
    return None


def parse_numbered_response(response: str, expected_count: int) -> tuple[list[str], bool]:
    """Parse a numbered LLM response back into a list of texts.

    Handles various formats:
    - "1. Text here"
    - "1) Text here"
    - "1: Text here"
    - Plain lines (fallback)

    Returns:
        Tuple of (parsed texts, exact_match) where exact_match is True
        if the parsed count matches expected_count exactly. Parsed texts
        are truncated or padded to expected_count; callers must not use
        them when exact_match is False.
    """
    lines = [line.strip() for line in response.strip().splitlines() if line.strip()]

    parsed = []
    for line in lines:
        # Try stripping common numbering patterns
        for sep in _NUMBER_SEPARATORS:
            parts = line.split(sep, 1)
            if len(parts) == 2 and parts[0].strip().isdigit():
                parsed.append(decode_line_breaks(parts[1].strip()))
                break
        else:
            # No numbering found, use the line as-is
            parsed.append(decode_line_breaks(line))

    exact_match = len(parsed) == expected_count

    if len(parsed) > expected_count:
        parsed = parsed[:expected_count]

    while len(parsed) < expected_count:
        parsed.append("")

    return parsed, exact_match


def parse_single_response(response: str) -> str:
    """Parse the response to a one-line request as a single translation.

    Models often answer a multi-line text with real newlines instead of
    <br> markers; every line of the response belongs to the one text.
    A leading "1." numbering on the first line is dropped.
    """
    lines = [line.strip() for line in response.strip().splitlines()]
    if lines:
        for sep in _NUMBER_SEPARATORS:
            number, found, rest = lines[0].partition(sep)
            if found and number.strip() == "1":
                lines[0] = rest.strip()
                break
    return decode_line_breaks("\n".join(lines).strip())
