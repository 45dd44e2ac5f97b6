"""Tests for chunkscribe.config module."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml

from chunkscribe.config import (
    ChunkscribeConfig,
    create_default_config,
    load_config,
    merge_config,
    write_config,
)
from chunkscribe.exceptions import ConfigError


class TestChunkscribeConfig:
    def test_default_config(self) -> None:
        config = ChunkscribeConfig()
        assert config.endpoint_url == "http://localhost:5000/transcribe"
        assert config.upload_field == "file"
        assert config.window_seconds == 60.0
        assert config.target_sample_rate == 16000
        assert config.decoder == "soundfile"
        assert config.timeout_seconds is None

    def test_invalid_decoder_raises(self) -> None:
        with pytest.raises(ValueError):
            ChunkscribeConfig(decoder="quicktime")

    def test_invalid_export_format_raises(self) -> None:
        with pytest.raises(ValueError):
            ChunkscribeConfig(export_format="docx")

    def test_non_positive_window_raises(self) -> None:
        with pytest.raises(ValueError):
            ChunkscribeConfig(window_seconds=0)

    def test_endpoint_must_be_http(self) -> None:
        with pytest.raises(ValueError):
            ChunkscribeConfig(endpoint_url="ftp://example.com/transcribe")


class TestMergeConfig:
    def test_overrides_take_precedence(self) -> None:
        merged = merge_config({"window_seconds": 60.0}, {"window_seconds": 30.0})
        assert merged["window_seconds"] == 30.0

    def test_none_overrides_ignored(self) -> None:
        merged = merge_config({"decoder": "librosa"}, {"decoder": None})
        assert merged["decoder"] == "librosa"

    def test_base_not_mutated(self) -> None:
        base = {"decoder": "librosa"}
        merge_config(base, {"decoder": "ffmpeg"})
        assert base == {"decoder": "librosa"}


class TestLoadConfig:
    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "chunkscribe.yaml"
        path.write_text(yaml.dump({"endpoint_url": "https://stt.example.com/v1", "window_seconds": 30}))

        config = load_config(path)

        assert config.endpoint_url == "https://stt.example.com/v1"
        assert config.window_seconds == 30.0
        assert config.config_path == path

    def test_overrides_win_over_file(self, tmp_path: Path) -> None:
        path = tmp_path / "chunkscribe.yaml"
        path.write_text(yaml.dump({"window_seconds": 30}))

        config = load_config(path, {"window_seconds": 10.0, "decoder": None})

        assert config.window_seconds == 10.0
        assert config.decoder == "soundfile"

    def test_defaults_without_file(self, tmp_path: Path) -> None:
        original_cwd = os.getcwd()
        try:
            os.chdir(tmp_path)
            config = load_config()
        finally:
            os.chdir(original_cwd)

        assert config.config_path is None
        assert config.window_seconds == 60.0

    def test_discovers_file_in_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "chunkscribe.yaml").write_text(yaml.dump({"decoder": "librosa"}))

        original_cwd = os.getcwd()
        try:
            os.chdir(tmp_path)
            config = load_config()
        finally:
            os.chdir(original_cwd)

        assert config.decoder == "librosa"

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "chunkscribe.yaml"
        path.write_text("window_seconds: [unclosed")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "chunkscribe.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_invalid_value_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "chunkscribe.yaml"
        path.write_text(yaml.dump({"decoder": "nope"}))

        with pytest.raises(ConfigError):
            load_config(path)


class TestDefaultConfig:
    def test_create_and_write_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "chunkscribe.yaml"
        write_config(create_default_config(), path)

        config = load_config(path)

        assert config.endpoint_url == ChunkscribeConfig().endpoint_url
        assert config.window_seconds == 60.0

    def test_default_config_omits_runtime_fields(self) -> None:
        defaults = create_default_config()
        assert "config_path" not in defaults
        assert "timeout_seconds" not in defaults
