"""Unified async LLM client via LiteLLM with Ollama availability checks."""

from __future__ import annotations

from sct.core.config import EngineConfig
from sct.utils.console import console


def _extract_ollama_model(model: str) -> str | None:
    """Extract the Ollama model name from a LiteLLM model string.

    Returns None if the model is not an Ollama model.
    E.g. "ollama_chat/qwen3:8b" -> "qwen3:8b"
    """
    for prefix in ("ollama_chat/", "ollama/"):
        if model.startswith(prefix):
            return model[len(prefix) :]
    return None


def is_ollama_model(model: str) -> bool:
    return _extract_ollama_model(model) is not None


async def ollama_model_ready(model: str, api_base: str | None = None) -> bool:
    """Check that the Ollama server is reachable and has the model pulled.

    Returns False if the model is not an Ollama model, the ollama package
    is not installed, or the server cannot be reached.
    """
    model_name = _extract_ollama_model(model)
    if model_name is None:
        return False

    try:
        import ollama
    except ImportError:
        return False

    try:
        client = ollama.AsyncClient(host=api_base) if api_base else ollama.AsyncClient()
        available = {m.model for m in (await client.list()).models}
    except Exception as e:
        console.print(f"[dim]Ollama not reachable for {model_name}:[/dim] {e}")
        return False

    if model_name in available:
        return True

    # Ollama stores models as "name:tag" — check if the exact base matches with :latest
    return ":" not in model_name and f"{model_name}:latest" in available


def keys_in_environment(model: str) -> bool:
    """Whether LiteLLM finds the credentials it needs for a hosted model."""
    try:
        import litellm
    except ImportError:
        return False

    try:
        report = litellm.validate_environment(model=model)
    except Exception:
        return False
    return bool(report.get("keys_in_environment"))


async def acomplete(
    messages: list[dict[str, str]],
    config: EngineConfig,
    api_key: str | None = None,
    **kwargs: object,
) -> str:
    """Send an async chat completion request via LiteLLM.

    Args:
        messages: Chat messages in OpenAI format.
        config: Engine configuration (model, api_base, sampling parameters).
        api_key: Explicit API key, when the engine names its own env var.
        **kwargs: Additional kwargs passed to litellm.acompletion.

    Returns:
        The assistant's response text.
    """
    try:
        from litellm import acompletion
    except ImportError:
        raise ImportError("LiteLLM is not installed. Install with: pip install 'screen-translate[llm]'")

    if api_key is not None:
        kwargs["api_key"] = api_key

    response = await acompletion(
        model=config.model,
        messages=messages,
        api_base=config.api_base,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        **kwargs,
    )
    return response.choices[0].message.content or ""
