"""Pair analyzer segments with one engine's translations, by position."""

from __future__ import annotations

from sct.core.errors import FlowError
from sct.core.models import BilingualSegment, ResultBundle, TextSegment


def align_segments(
    segments: list[TextSegment],
    translations: list[str],
    target_language: str,
    source_language: str | None = None,
) -> list[BilingualSegment]:
    """Pair segment i with translation i.

    Each bilingual segment keeps the original TextSegment (and its id), so
    spatial metadata flows through to rendering unchanged.

    Raises:
        FlowError: translation_failure when the counts differ. A partial
            alignment would draw translations over the wrong text.
    """
    if len(translations) != len(segments):
        raise FlowError.translation_failure(
            f"expected {len(segments)} translations, got {len(translations)}"
        )
    return [
        BilingualSegment(
            id=segment.id,
            original=segment,
            translated_text=translated,
            source_language=source_language,
            target_language=target_language,
        )
        for segment, translated in zip(segments, translations)
    ]


def align_bundle(
    segments: list[TextSegment],
    bundle: ResultBundle,
    target_language: str,
) -> list[BilingualSegment]:
    """Align against the bundle's best result (the primary engine's when it succeeded)."""
    if not segments:
        return []
    best = bundle.best_result
    if best is None:
        raise FlowError.translation_failure("no engine produced a translation", bundle=bundle)
    source_language = next(
        (seg.source_language for seg in best.segments if seg.source_language), None
    )
    return align_segments(segments, best.translated_texts, target_language, source_language)
