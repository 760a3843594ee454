"""Tests for the error taxonomy."""

from sct.core.errors import (
    FlowError,
    FlowErrorKind,
    MultiEngineError,
    MultiEngineErrorKind,
    ProviderError,
    ProviderErrorKind,
)


def test_provider_error_description_includes_engine():
    error = ProviderError(ProviderErrorKind.CONNECTION_FAILED, "refused", engine="mtran")
    assert str(error) == "[mtran] Connection failed: refused"


def test_provider_error_rate_limited():
    assert "Retry after 30 seconds" in str(
        ProviderError(ProviderErrorKind.RATE_LIMITED, retry_after=30)
    )
    assert "try again later" in str(ProviderError(ProviderErrorKind.RATE_LIMITED))


def test_provider_error_timeout_message():
    assert "after 5s" in str(ProviderError(ProviderErrorKind.TIMEOUT, "5s"))


def test_all_engines_failed_lists_primary_first():
    primary = ProviderError(ProviderErrorKind.TIMEOUT, engine="ollama")
    fallback = ProviderError(ProviderErrorKind.CONNECTION_FAILED, "refused", engine="mtran")
    error = MultiEngineError.all_engines_failed([primary, fallback])
    assert error.kind is MultiEngineErrorKind.ALL_ENGINES_FAILED
    text = error.description
    assert text.index("[ollama]") < text.index("(also:")
    assert "[mtran]" in text


def test_multi_engine_error_kinds():
    assert "No translation engines" in str(MultiEngineError.no_engines_configured())
    assert "deepl" in str(MultiEngineError.primary_not_available("deepl"))
    assert MultiEngineError.no_results().kind is MultiEngineErrorKind.NO_RESULTS


def test_flow_error_recovery_suggestions():
    assert FlowError.analysis_failure("x").recovery_suggestion
    assert FlowError.translation_failure("x").recovery_suggestion
    assert FlowError.no_text_found().recovery_suggestion
    assert FlowError.cancelled().recovery_suggestion is None


def test_flow_error_equality_by_kind_and_message():
    assert FlowError.cancelled() == FlowError.cancelled()
    assert FlowError.translation_failure("a") != FlowError.translation_failure("b")
    assert FlowError.no_text_found() != FlowError.cancelled()
    assert len({FlowError.cancelled(), FlowError.cancelled()}) == 1


def test_flow_error_keeps_cause():
    cause = MultiEngineError.no_results()
    error = FlowError.translation_failure(str(cause), cause=cause)
    assert error.kind is FlowErrorKind.TRANSLATION_FAILURE
    assert error.cause is cause
    assert error.description.startswith("Translation failed:")
    assert not error.is_cancelled
    assert FlowError.cancelled().is_cancelled
