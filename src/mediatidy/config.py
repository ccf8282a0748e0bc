"""Configuration management for MediaTidy."""

import os
import re
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from mediatidy.utils.language import language_name_to_code

LOG_FORMATS = {"json", "text"}
LOG_LEVELS = {"debug", "info", "warning", "error", "critical"}

ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ToolsConfig(BaseModel):
    """External tool locations."""

    mkvmerge: str = Field(default="mkvmerge", description="mkvmerge executable")
    ffmpeg: str = Field(default="ffmpeg", description="ffmpeg executable")
    ffprobe: str = Field(default="ffprobe", description="ffprobe executable")
    mediainfo: str = Field(default="mediainfo", description="mediainfo executable")
    handbrake: str = Field(default="HandBrakeCLI", description="HandBrakeCLI executable")
    timeout_seconds: Optional[int] = Field(
        default=None, description="Maximum run time per tool invocation (None waits forever)"
    )

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: Optional[int]) -> Optional[int]:
        """Validate timeout is positive when set."""
        if v is not None and v <= 0:
            raise ValueError("Tool timeout must be positive")
        return v


class ConvertConfig(BaseModel):
    """Re-encoding targets."""

    video_codec: str = Field(default="libx264", description="FFmpeg video encoder")
    video_quality: int = Field(default=20, description="Constant rate factor")
    video_preset: str = Field(default="medium", description="Encoder preset")
    audio_codec: str = Field(default="ac3", description="FFmpeg audio encoder")
    handbrake_video: str = Field(
        default="x264 --quality 20 --encoder-preset medium",
        description="HandBrake --encoder value and video options",
    )
    handbrake_audio: str = Field(
        default="copy --audio-fallback ac3",
        description="HandBrake --aencoder value and audio options",
    )

    @field_validator("video_quality")
    @classmethod
    def validate_quality(cls, v: int) -> int:
        """Validate CRF range."""
        if not 0 <= v <= 51:
            raise ValueError("Video quality must be between 0 and 51")
        return v


class ProcessConfig(BaseModel):
    """Per-file track policy."""

    keep_languages: List[str] = Field(
        default=["eng"], description="Audio and subtitle languages to keep"
    )
    keep_undefined: bool = Field(default=True, description="Keep tracks with unknown language")
    remove_unwanted_tracks: bool = Field(
        default=True, description="Remux to drop tracks not in keep_languages"
    )
    remux_non_mkv: bool = Field(default=True, description="Remux non-MKV files to MKV")
    deinterlace: bool = Field(default=False, description="De-interlace video with HandBrake")

    @field_validator("keep_languages")
    @classmethod
    def validate_languages(cls, v: List[str]) -> List[str]:
        """Normalize names and codes to ISO 639-2/B."""
        return [language_name_to_code(code) for code in v]


class ProcessingConfig(BaseModel):
    """How many files are processed at once."""

    worker_count: int = Field(default=1, description="Files processed in parallel")

    @field_validator("worker_count")
    @classmethod
    def validate_worker_count(cls, v: int) -> int:
        """Validate worker count."""
        if v < 1:
            raise ValueError("Worker count must be at least 1")
        return v


class LoggingConfig(BaseModel):
    """Where and how log events are written."""

    format: str = Field(default="text", description="Renderer, json or text")
    level: str = Field(default="info", description="Minimum log level")
    output: str = Field(default="logs/mediatidy.log", description="Log file, empty to disable")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Only the two structlog renderers are supported."""
        if v not in LOG_FORMATS:
            raise ValueError(f"Log format must be one of {sorted(LOG_FORMATS)}")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Accept level names in any case."""
        level = v.lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level


class ExecutionConfig(BaseModel):
    """Run modes that change what tools are allowed to do."""

    dry_run: bool = Field(default=False, description="Log operations instead of running them")
    test_snippets: bool = Field(default=False, description="Only convert the first snippet_seconds")
    snippet_seconds: int = Field(default=180, description="Snippet length in seconds")

    @field_validator("snippet_seconds")
    @classmethod
    def validate_snippet(cls, v: int) -> int:
        """Validate snippet length."""
        if v <= 0:
            raise ValueError("Snippet length must be positive")
        return v


def _substitute_env_vars(value: Any) -> Any:
    """Recursively expand ${VAR_NAME} references in loaded YAML."""
    if isinstance(value, dict):
        return {key: _substitute_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value

    def expand(match: re.Match) -> str:
        name = match.group(1)
        if name not in os.environ:
            raise ValueError(f"Environment variable '{name}' is not set (referenced in configuration)")
        return os.environ[name]

    return ENV_VAR_PATTERN.sub(expand, value)


class Config(BaseModel):
    """Top-level MediaTidy configuration."""

    tools: ToolsConfig = Field(default_factory=ToolsConfig, description="Tool locations")
    convert: ConvertConfig = Field(default_factory=ConvertConfig, description="Encoding targets")
    process: ProcessConfig = Field(default_factory=ProcessConfig, description="Track policy")
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig, description="Concurrency")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Log output")
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig, description="Run modes")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file.

        Args:
            path: YAML file, ``${VAR}`` references are expanded from the environment

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If a variable is unset or a value is invalid
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls.model_validate(_substitute_env_vars(raw))

    @classmethod
    def from_defaults(cls) -> "Config":
        """Create configuration with default values."""
        return cls()


def load_config(path: Optional[str | Path] = None) -> Config:
    """Load configuration from a file, or the defaults when no file is given."""
    return Config.from_defaults() if path is None else Config.from_yaml(path)
