"""Configuration settings for glyfkit."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class ErrorPolicy(str, Enum):
    """What to do when a single glyph fails to decode."""

    RAISE = "raise"
    EMPTY = "empty"


class CodecConfig(BaseModel):
    """Configuration for the glyph codec and table-wide passes."""

    max_component_depth: int = Field(
        default=64,
        ge=1,
        le=1024,
        description="Composite nesting depth treated as a reference loop",
    )
    on_error: ErrorPolicy = Field(
        default=ErrorPolicy.RAISE,
        description="Abort on a malformed glyph, or substitute an empty glyph",
    )


class ProcessingConfig(BaseModel):
    """Configuration for font processing."""

    max_workers: int | None = Field(
        default=1,
        description="Max worker processes for glyph decoding (None = auto, 1 = in-process)",
    )
    flatten: bool = Field(
        default=True,
        description="Flatten nested composite glyphs",
    )
    recalc_bounds: bool = Field(
        default=True,
        description="Recalculate glyph bounding boxes after flattening",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class GlyfKitSettings(BaseModel):
    """Main application settings."""

    codec: CodecConfig = Field(default_factory=CodecConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> GlyfKitSettings:
    """Get default application settings."""
    return GlyfKitSettings()
