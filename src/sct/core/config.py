"""Configuration system for screen-translate.

Layered config loading (lowest to highest priority):
1. config/default.toml (shipped with package)
2. ~/.config/sct/config.toml (user-level)
3. ./sct.toml (project-level)
4. Environment variables (SCT_TRANSLATION__TARGET_LANGUAGE, etc.)
5. CLI flags
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sct.core.models import EngineSelectionMode, TranslationScene

_PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_DEFAULT_CONFIG = _PACKAGE_ROOT / "config" / "default.toml"
_USER_CONFIG = Path.home() / ".config" / "sct" / "config.toml"
_PROJECT_CONFIG = Path("sct.toml")


class TranslationConfig(BaseModel):
    target_language: str = "zh-Hans"
    source_language: str = "auto"  # "auto" means let the provider detect
    mode: EngineSelectionMode = EngineSelectionMode.PRIMARY_FALLBACK
    scene: TranslationScene = TranslationScene.SCREENSHOT
    default_engine: str = "ollama"
    fallback_engine: str | None = "mtran"
    fallback_enabled: bool = True
    parallel_engines: list[str] = Field(default_factory=list)
    local_engine: str = "ollama"  # Built-in engine that needs no external service setup

    @property
    def source(self) -> str | None:
        """Source language as passed to providers (None for auto-detect)."""
        if not self.source_language or self.source_language == "auto":
            return None
        return self.source_language


class EngineConfig(BaseModel):
    kind: str = "llm"  # "llm", "mtran" or "deepl"
    name: str | None = None
    model: str = "ollama_chat/qwen3:8b"
    api_base: str | None = None
    api_key_env: str | None = None  # Name of the env var holding the API key
    temperature: float = 0.3
    max_tokens: int = 4096
    timeout: float | None = None  # Provider-specific default when unset
    local: bool = False
    enabled: bool = True


class SceneBinding(BaseModel):
    """Engines bound to one translation scene."""

    scene: TranslationScene = TranslationScene.SCREENSHOT
    primary_engine: str
    fallback_engine: str | None = None
    fallback_enabled: bool = True
    custom_prompt: str | None = None

    @classmethod
    def default(
        cls,
        scene: TranslationScene,
        local_engine: str,
        external_engine: str | None = None,
    ) -> SceneBinding:
        """Binding used when a scene has none configured.

        The local engine is primary; the first externally configured engine
        is the fallback.
        """
        return cls(
            scene=scene,
            primary_engine=local_engine,
            fallback_engine=external_engine,
            fallback_enabled=True,
        )


class PromptConfig(BaseModel):
    engine_prompts: dict[str, str] = Field(default_factory=dict)
    scene_prompts: dict[TranslationScene, str] = Field(default_factory=dict)

    @property
    def has_custom_prompts(self) -> bool:
        return bool(self.engine_prompts or self.scene_prompts)


class RenderConfig(BaseModel):
    min_font_size: float = 10.0
    max_font_size: float = 32.0
    font_scale: float = 0.7
    font_path: str | None = None  # TrueType font; Pillow's bundled font when unset
    sample_offset: int = 2
    padding_x: int = 4  # Per side
    padding_y: int = 2  # Per side
    line_spacing: int = 2
    min_wrap_width: int = 200
    fallback_background: tuple[int, int, int] = (40, 40, 40)
    center_tolerance: float = 0.05
    hit_margin_x: float = 20.0
    hit_margin_y: float = 10.0


class AnalyzerConfig(BaseModel):
    provider: str = "segments-file"
    model: str = ""

    @property
    def description(self) -> str:
        """Provider/model summary appended to analysis failure messages."""
        return f"{self.provider}/{self.model}" if self.model else self.provider


class SCTConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SCT_",
        env_nested_delimiter="__",
    )

    translation: TranslationConfig = TranslationConfig()
    engines: dict[str, EngineConfig] = Field(default_factory=dict)
    scenes: dict[TranslationScene, SceneBinding] = Field(default_factory=dict)
    prompts: PromptConfig = PromptConfig()
    render: RenderConfig = RenderConfig()
    analyzer: AnalyzerConfig = AnalyzerConfig()

    def binding_for(self, scene: TranslationScene) -> SceneBinding | None:
        """Return the explicit binding for a scene, if one is configured."""
        return self.scenes.get(scene)


def _load_toml(path: Path) -> dict:
    """Load a TOML file if it exists, return empty dict otherwise."""
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _apply_scene_keys(config_data: dict) -> None:
    """Fill each scene binding's ``scene`` field from its table key."""
    for scene, binding in config_data.get("scenes", {}).items():
        if isinstance(binding, dict):
            binding.setdefault("scene", scene)


def load_config(**cli_overrides: object) -> SCTConfig:
    """Load configuration from all layers and merge.

    Args:
        **cli_overrides: Direct overrides from CLI flags. Keys can be
            dot-separated (e.g. translation.target_language="ja").
    """
    # Layer 1-3: TOML files
    config_data: dict = {}
    for path in (_DEFAULT_CONFIG, _USER_CONFIG, _PROJECT_CONFIG):
        layer = _load_toml(path)
        config_data = _deep_merge(config_data, layer)

    # Layer 4: env vars. Init kwargs outrank the environment in BaseSettings,
    # so only the variables actually set are merged over the TOML layers.
    env_layer = SCTConfig().model_dump(mode="json", exclude_unset=True)
    config_data = _deep_merge(config_data, env_layer)

    # Layer 5: CLI overrides (dot-separated keys)
    for key, value in cli_overrides.items():
        if value is None:
            continue
        parts = key.split(".")
        target = config_data
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = value

    _apply_scene_keys(config_data)
    return SCTConfig(**config_data)
