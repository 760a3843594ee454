"""Plain-text translation for the text-selection and translate-and-insert scenes."""

from __future__ import annotations

from dataclasses import dataclass

from sct.core.config import SCTConfig
from sct.core.errors import FlowError
from sct.core.models import EngineSelectionMode, ResultBundle, TranslationScene
from sct.translation.selector import EngineSelector


@dataclass
class TextTranslation:
    source_text: str
    translated_text: str
    engine: str
    bundle: ResultBundle


class TextTranslationFlow:
    """Translates one string with the engines bound to its scene."""

    def __init__(self, selector: EngineSelector, config: SCTConfig):
        self.selector = selector
        self.config = config

    async def translate(
        self,
        text: str,
        scene: TranslationScene = TranslationScene.TEXT_SELECTION,
        target_language: str | None = None,
        source_language: str | None = None,
    ) -> TextTranslation:
        """Translate ``text`` under scene binding.

        Raises:
            FlowError: translation_failure for empty input or when every
                bound engine failed.
        """
        if not text.strip():
            raise FlowError.translation_failure("no text to translate")

        target = target_language or self.config.translation.target_language
        try:
            bundle = await self.selector.translate(
                [text],
                target_language=target,
                source_language=source_language,
                scene=scene,
                mode=EngineSelectionMode.SCENE_BINDING,
            )
        except Exception as e:
            raise FlowError.translation_failure(str(e), cause=e) from e

        try:
            best = self.selector.require_usable(bundle)
        except Exception as e:
            raise FlowError.translation_failure(str(e), cause=e, bundle=bundle) from e

        return TextTranslation(
            source_text=text,
            translated_text=best.translated_texts[0],
            engine=best.engine,
            bundle=bundle,
        )
