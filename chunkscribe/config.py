"""
chunkscribe.config - YAML config loading, CLI override merging, validation.

Handles loading chunkscribe.yaml, applying command-line overrides, and
validating all parameters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from chunkscribe.exceptions import ConfigError

CONFIG_FILENAME = "chunkscribe.yaml"

DECODERS = {"soundfile", "librosa", "ffmpeg"}
EXPORT_FORMATS = {"txt", "html", "json", "srt"}


class ChunkscribeConfig(BaseModel):
    """Resolved configuration for a transcription run."""

    endpoint_url: str = "http://localhost:5000/transcribe"
    upload_field: str = "file"

    window_seconds: float = Field(default=60.0, gt=0.0)
    target_sample_rate: int = Field(default=16000, gt=0)
    decoder: str = "soundfile"

    timeout_seconds: float | None = Field(default=None, gt=0.0)

    export_format: str = "txt"

    config_path: Path | None = None

    @field_validator("endpoint_url")
    @classmethod
    def validate_endpoint_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("endpoint_url must be an http:// or https:// URL")
        return v

    @field_validator("decoder")
    @classmethod
    def validate_decoder(cls, v: str) -> str:
        if v not in DECODERS:
            raise ValueError(f"decoder must be one of: {DECODERS}")
        return v

    @field_validator("export_format")
    @classmethod
    def validate_export_format(cls, v: str) -> str:
        if v not in EXPORT_FORMATS:
            raise ValueError(f"export_format must be one of: {EXPORT_FORMATS}")
        return v


def merge_config(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge overrides into a base config. Overrides that are None are ignored."""
    merged = base.copy()
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value
    return merged


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ChunkscribeConfig:
    """Load and validate configuration.

    Args:
        config_path: Explicit YAML file. When omitted, ``chunkscribe.yaml``
            in the working directory is used if present, defaults otherwise.
        overrides: Values (typically CLI options) taking precedence over the file

    Raises:
        ConfigError: If the file is missing, unreadable, or fails validation
    """
    raw_config: dict[str, Any] = {}

    if config_path is None:
        candidate = Path.cwd() / CONFIG_FILENAME
        if candidate.exists():
            config_path = candidate
    elif not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    if config_path is not None:
        try:
            with open(config_path, encoding="utf-8") as f:
                raw_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(raw_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping")
        raw_config["config_path"] = config_path

    merged = merge_config(raw_config, overrides or {})

    try:
        return ChunkscribeConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def create_default_config() -> dict[str, Any]:
    """Create a default config dict suitable for writing to disk."""
    config = ChunkscribeConfig()
    return config.model_dump(exclude={"config_path", "timeout_seconds"})


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
