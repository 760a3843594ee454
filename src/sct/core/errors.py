"""Error taxonomy for the translation flow, the engine selector and providers."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sct.core.models import ResultBundle


class ProviderErrorKind(str, Enum):
    NOT_AVAILABLE = "not_available"
    NOT_REGISTERED = "not_registered"
    CONNECTION_FAILED = "connection_failed"
    INVALID_CONFIGURATION = "invalid_configuration"
    TRANSLATION_FAILED = "translation_failed"
    EMPTY_INPUT = "empty_input"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    LENGTH_MISMATCH = "length_mismatch"


class ProviderError(Exception):
    """Raised by a translation provider for a single failed call."""

    def __init__(
        self,
        kind: ProviderErrorKind,
        message: str = "",
        engine: str | None = None,
        retry_after: float | None = None,
    ):
        self.kind = kind
        self.message = message
        self.engine = engine
        self.retry_after = retry_after
        super().__init__(self.description)

    @property
    def description(self) -> str:
        prefix = f"[{self.engine}] " if self.engine else ""
        match self.kind:
            case ProviderErrorKind.NOT_AVAILABLE:
                text = "Translation provider is not available."
            case ProviderErrorKind.NOT_REGISTERED:
                text = "No provider is registered for this engine."
            case ProviderErrorKind.CONNECTION_FAILED:
                text = f"Connection failed: {self.message}"
            case ProviderErrorKind.INVALID_CONFIGURATION:
                text = f"Invalid configuration: {self.message}"
            case ProviderErrorKind.EMPTY_INPUT:
                text = "Cannot translate empty text."
            case ProviderErrorKind.TIMEOUT:
                text = "Translation request timed out."
                if self.message:
                    text = f"Translation request timed out after {self.message}."
            case ProviderErrorKind.RATE_LIMITED:
                if self.retry_after is not None:
                    text = f"Rate limited. Retry after {int(self.retry_after)} seconds."
                else:
                    text = "Rate limited. Please try again later."
            case ProviderErrorKind.LENGTH_MISMATCH:
                text = f"Provider returned a different number of translations: {self.message}"
            case _:
                text = f"Translation failed: {self.message}"
        return prefix + text


class MultiEngineErrorKind(str, Enum):
    ALL_ENGINES_FAILED = "all_engines_failed"
    NO_ENGINES_CONFIGURED = "no_engines_configured"
    PRIMARY_NOT_AVAILABLE = "primary_not_available"
    NO_RESULTS = "no_results"


class MultiEngineError(Exception):
    """Raised when no usable result bundle can be formed at all."""

    def __init__(
        self,
        kind: MultiEngineErrorKind,
        errors: list[BaseException] | None = None,
        engine: str | None = None,
    ):
        self.kind = kind
        self.errors = list(errors or [])
        self.engine = engine
        super().__init__(self.description)

    @classmethod
    def all_engines_failed(cls, errors: list[BaseException]) -> MultiEngineError:
        return cls(MultiEngineErrorKind.ALL_ENGINES_FAILED, errors=errors)

    @classmethod
    def no_engines_configured(cls) -> MultiEngineError:
        return cls(MultiEngineErrorKind.NO_ENGINES_CONFIGURED)

    @classmethod
    def primary_not_available(
        cls, engine: str, errors: list[BaseException] | None = None
    ) -> MultiEngineError:
        return cls(MultiEngineErrorKind.PRIMARY_NOT_AVAILABLE, errors=errors, engine=engine)

    @classmethod
    def no_results(cls) -> MultiEngineError:
        return cls(MultiEngineErrorKind.NO_RESULTS)

    @property
    def description(self) -> str:
        match self.kind:
            case MultiEngineErrorKind.ALL_ENGINES_FAILED:
                if not self.errors:
                    return "All translation engines failed"
                # Primary's error first, fallback errors as secondary detail
                primary, *others = self.errors
                text = f"All translation engines failed: {primary}"
                if others:
                    text += " (also: " + "; ".join(str(e) for e in others) + ")"
                return text
            case MultiEngineErrorKind.NO_ENGINES_CONFIGURED:
                return "No translation engines are configured"
            case MultiEngineErrorKind.PRIMARY_NOT_AVAILABLE:
                return f"Primary engine {self.engine} is not available"
            case _:
                return "No translation results available"


class FlowErrorKind(str, Enum):
    ANALYSIS_FAILURE = "analysis_failure"
    TRANSLATION_FAILURE = "translation_failure"
    RENDERING_FAILURE = "rendering_failure"
    CANCELLED = "cancelled"
    NO_TEXT_FOUND = "no_text_found"


_RECOVERY_SUGGESTIONS = {
    FlowErrorKind.ANALYSIS_FAILURE: (
        "Check your configured analysis provider, model and endpoint, then try again."
    ),
    FlowErrorKind.TRANSLATION_FAILURE: (
        "Check your configured translation engines and endpoints, or enable a fallback engine."
    ),
    FlowErrorKind.RENDERING_FAILURE: "Try capturing a smaller region or a different font.",
    FlowErrorKind.CANCELLED: None,
    FlowErrorKind.NO_TEXT_FOUND: "Select a region that contains readable text.",
}


class FlowError(Exception):
    """Single classified failure surfaced by the flow controller."""

    def __init__(
        self,
        kind: FlowErrorKind,
        message: str = "",
        cause: BaseException | None = None,
        bundle: ResultBundle | None = None,
    ):
        self.kind = kind
        self.message = message
        self.cause = cause
        self.bundle = bundle
        super().__init__(self.description)

    @classmethod
    def analysis_failure(cls, message: str, cause: BaseException | None = None) -> FlowError:
        return cls(FlowErrorKind.ANALYSIS_FAILURE, message, cause=cause)

    @classmethod
    def translation_failure(
        cls,
        message: str,
        cause: BaseException | None = None,
        bundle: ResultBundle | None = None,
    ) -> FlowError:
        return cls(FlowErrorKind.TRANSLATION_FAILURE, message, cause=cause, bundle=bundle)

    @classmethod
    def rendering_failure(cls, message: str, cause: BaseException | None = None) -> FlowError:
        return cls(FlowErrorKind.RENDERING_FAILURE, message, cause=cause)

    @classmethod
    def cancelled(cls) -> FlowError:
        return cls(FlowErrorKind.CANCELLED)

    @classmethod
    def no_text_found(cls) -> FlowError:
        return cls(FlowErrorKind.NO_TEXT_FOUND)

    @property
    def description(self) -> str:
        match self.kind:
            case FlowErrorKind.ANALYSIS_FAILURE:
                return f"Image analysis failed: {self.message}"
            case FlowErrorKind.TRANSLATION_FAILURE:
                return f"Translation failed: {self.message}"
            case FlowErrorKind.RENDERING_FAILURE:
                return f"Rendering failed: {self.message}"
            case FlowErrorKind.CANCELLED:
                return "Translation was cancelled."
            case _:
                return "No text was found in the captured image."

    @property
    def recovery_suggestion(self) -> str | None:
        return _RECOVERY_SUGGESTIONS[self.kind]

    @property
    def is_cancelled(self) -> bool:
        return self.kind is FlowErrorKind.CANCELLED

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FlowError):
            return NotImplemented
        return self.kind is other.kind and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.kind, self.message))
