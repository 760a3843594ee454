"""LLM translation provider via LiteLLM (Ollama, OpenAI, Claude, Gemini, compatible APIs)."""

from __future__ import annotations

import os

from sct.core.config import EngineConfig
from sct.core.errors import ProviderErrorKind
from sct.core.languages import language_name
from sct.llm.client import acomplete, is_ollama_model, keys_in_environment, ollama_model_ready
from sct.llm.prompts import (
    TRANSLATION_SYSTEM,
    TRANSLATION_USER,
    format_numbered_segments,
    parse_numbered_response,
    parse_single_response,
    render_prompt,
)
from sct.translation.provider import TranslationProvider
from sct.utils.console import console

MAX_SPLIT_DEPTH = 3


class LLMTranslationProvider(TranslationProvider):
    """Translates a whole batch as numbered lines in one chat completion.

    On a line-count mismatch the batch is split in halves and retried,
    up to MAX_SPLIT_DEPTH levels, before the call is reported as failed.
    """

    supports_batch = True
    default_timeout = 60.0

    def __init__(self, engine: str, config: EngineConfig):
        super().__init__(
            engine,
            name=config.name or f"{engine} ({config.model})",
            local=config.local or is_ollama_model(config.model),
            timeout=config.timeout,
        )
        self.config = config

    @property
    def api_key(self) -> str | None:
        if self.config.api_key_env:
            return os.environ.get(self.config.api_key_env)
        return None

    def _messages(
        self,
        texts: list[str],
        source_language: str | None,
        target_language: str,
        prompt: str | None,
    ) -> list[dict[str, str]]:
        numbered = format_numbered_segments(texts)
        if prompt is not None:
            # Language variables are already resolved; {text} is filled per request
            # so that split retries only carry their own lines.
            if "{text}" not in prompt:
                prompt = prompt.rstrip() + "\n\n{text}"
            content = render_prompt(prompt, source_language, target_language, numbered)
            return [{"role": "user", "content": content}]

        source = language_name(source_language or "auto")
        target = language_name(target_language)
        return [
            {
                "role": "system",
                "content": TRANSLATION_SYSTEM.format(
                    source_language=source, target_language=target
                ),
            },
            {
                "role": "user",
                "content": TRANSLATION_USER.format(
                    count=len(texts),
                    source_language=source,
                    target_language=target,
                    text=numbered,
                ),
            },
        ]

    async def _process_chunk(
        self,
        texts: list[str],
        source_language: str | None,
        target_language: str,
        prompt: str | None,
        _depth: int = 0,
    ) -> list[str]:
        """Translate one chunk, retrying with smaller batches on mismatch."""
        messages = self._messages(texts, source_language, target_language, prompt)
        response = await acomplete(messages, self.config, api_key=self.api_key)
        if len(texts) == 1:
            # Nothing to misalign: the whole response is the one translation
            translated_text = parse_single_response(response)
            if not translated_text:
                raise self._fail(
                    ProviderErrorKind.TRANSLATION_FAILED,
                    f"empty response from {self.config.model}",
                )
            return [translated_text]

        translated, exact_match = parse_numbered_response(response, len(texts))

        if exact_match:
            return translated
        if _depth + 1 >= MAX_SPLIT_DEPTH:
            raise self._fail(
                ProviderErrorKind.LENGTH_MISMATCH,
                f"expected {len(texts)} lines from {self.config.model}",
            )

        console.print(
            f"[yellow]{self.engine}: line count mismatch ({len(texts)} expected), "
            f"retrying with smaller batches...[/yellow]"
        )
        mid = len(texts) // 2
        first_half = await self._process_chunk(
            texts[:mid], source_language, target_language, prompt, _depth=_depth + 1
        )
        second_half = await self._process_chunk(
            texts[mid:], source_language, target_language, prompt, _depth=_depth + 1
        )
        return first_half + second_half

    async def translate_batch(
        self,
        texts: list[str],
        source_language: str | None,
        target_language: str,
        prompt: str | None = None,
    ) -> list[str]:
        if not texts:
            return []

        # Skip empty texts — don't send them to the LLM
        non_empty_idx = [i for i, t in enumerate(texts) if t.strip()]
        if not non_empty_idx:
            raise self._fail(ProviderErrorKind.EMPTY_INPUT)

        non_empty = [texts[i] for i in non_empty_idx]
        translated = await self._process_chunk(non_empty, source_language, target_language, prompt)

        # Reconstruct the full list with empties preserved
        result = list(texts)
        for j, idx in enumerate(non_empty_idx):
            result[idx] = translated[j]
        return result

    async def translate_text(
        self,
        text: str,
        source_language: str | None,
        target_language: str,
        prompt: str | None = None,
    ) -> str:
        if not text.strip():
            raise self._fail(ProviderErrorKind.EMPTY_INPUT)
        (translated,) = await self.translate_batch([text], source_language, target_language, prompt)
        return translated

    async def is_available(self) -> bool:
        if is_ollama_model(self.config.model):
            return await ollama_model_ready(self.config.model, self.config.api_base)
        if self.config.api_key_env:
            return bool(self.api_key)
        # Self-hosted OpenAI-compatible endpoints may not need a key
        return self.config.api_base is not None or keys_in_environment(self.config.model)
