"""Configuration system for immerse.

Layered config loading (lowest to highest priority):
1. config/default.toml (shipped with package)
2. ~/.config/immerse/config.toml (user-level)
3. ./immerse.toml (project-level)
4. Environment variables (IMMERSE_CONDENSE__PADDING, IMMERSE_WORKERS, etc.)
5. An explicit --config file
6. CLI flags

The resolved config is frozen: it is built once per invocation and passed
explicitly to every component.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, EnvSettingsSource, SettingsConfigDict

from immerse.core.errors import ConfigError
from immerse.core.languages import normalize_language

_PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_DEFAULT_CONFIG = _PACKAGE_ROOT / "config" / "default.toml"
_USER_CONFIG = Path.home() / ".config" / "immerse" / "config.toml"
_PROJECT_CONFIG = Path("immerse.toml")

AUDIO_CODECS: dict[str, str] = {
    "mp3": "libmp3lame",
    "ogg": "libopus",
    "m4a": "aac",
}


class CondenseConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    language_priority: tuple[str, ...] = ("jpn", "eng")
    prefer_internal_subs: bool = True
    padding: float = Field(default=0.2, ge=0.0)  # seconds around each cue
    bitrate: str = "64k"
    audio_format: Literal["mp3", "ogg", "m4a"] = "mp3"
    max_cue_seconds: float = Field(default=30.0, gt=0.0)

    @field_validator("language_priority", mode="before")
    @classmethod
    def normalize_priority(cls, v: object) -> tuple[str, ...]:
        if isinstance(v, str):
            v = v.split(",")
        seen: list[str] = []
        for code in v:  # type: ignore[union-attr]
            tag = normalize_language(str(code))
            if tag and tag not in seen:
                seen.append(tag)
        if not seen:
            raise ValueError("language_priority must name at least one language")
        return tuple(seen)

    @property
    def codec(self) -> str:
        return AUDIO_CODECS[self.audio_format]


class LibraryConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    video_dir: Path = Path.home() / "Videos"
    music_dir: Path = Path.home() / "Music"  # MPD music root
    pod_subdir: str = "immersion"
    staleness_days: int = Field(default=7, ge=1)

    @field_validator("video_dir", "music_dir")
    @classmethod
    def expand_home(cls, v: Path) -> Path:
        return v.expanduser()

    @property
    def pod_dir(self) -> Path:
        """Root of the immersion pod, inside the MPD music directory."""
        return self.music_dir / self.pod_subdir


class ImmerseConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="IMMERSE_",
        env_nested_delimiter="__",
        frozen=True,
    )

    condense: CondenseConfig = CondenseConfig()
    library: LibraryConfig = LibraryConfig()
    overwrite: bool = False
    condense_enabled: bool = True
    workers: int = Field(default=2, ge=1)
    scratch_dir: Path | None = None
    tool_timeout: float | None = Field(default=None, gt=0.0)

    @field_validator("scratch_dir")
    @classmethod
    def expand_scratch(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None


def _load_toml(path: Path) -> dict:
    """Load a TOML file if it exists, return empty dict otherwise."""
    if path.is_file():
        try:
            with open(path, "rb") as f:
                return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {path}: {e}") from e
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


def _flatten_general(data: dict) -> dict:
    """Lift the [general] section into the top level."""
    if "general" not in data:
        return data
    data = data.copy()
    general = data.pop("general")
    return _deep_merge(data, general)


def load_config(config_file: Path | None = None, **cli_overrides: object) -> ImmerseConfig:
    """Load configuration from all layers and merge.

    Args:
        config_file: Optional explicit config file, applied after the
            standard locations. Must exist.
        **cli_overrides: Direct overrides from CLI flags. Keys can be
            dot-separated (e.g. condense.padding=0.5).

    Raises:
        ConfigError: If a file cannot be parsed or a value is invalid.
    """
    if config_file is not None and not Path(config_file).is_file():
        raise ConfigError(f"Config file not found: {config_file}")

    # Layer 1-3: TOML files
    config_data: dict = {}
    for path in (_DEFAULT_CONFIG, _USER_CONFIG, _PROJECT_CONFIG):
        config_data = _deep_merge(config_data, _flatten_general(_load_toml(path)))

    # Layer 4: IMMERSE_* variables, nested with "__"
    try:
        env_data = EnvSettingsSource(ImmerseConfig)()
    except ValueError as e:
        raise ConfigError(f"Invalid environment variable: {e}") from e
    config_data = _deep_merge(config_data, env_data)

    if config_file is not None:
        config_data = _deep_merge(config_data, _flatten_general(_load_toml(Path(config_file))))

    for key, value in cli_overrides.items():
        if value is None:
            continue
        parts = key.split(".")
        target = config_data
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = value

    try:
        return ImmerseConfig(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
