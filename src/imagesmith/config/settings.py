"""Configuration settings for imagesmith."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

KNOWN_BACKENDS = ("pillow", "opencv")


class BackendConfig(BaseModel):
    """Graphics backend selection."""

    priority: list[str] = Field(
        default_factory=lambda: list(KNOWN_BACKENDS),
        min_length=1,
        description="Backend names in order of evaluation; the first available one wins",
    )

    @field_validator("priority")
    @classmethod
    def _normalize_names(cls, value: list[str]) -> list[str]:
        return [name.strip().lower() for name in value]


class SaveConfig(BaseModel):
    """Defaults applied when writing images."""

    jpeg_quality: int = Field(
        default=75,
        ge=0,
        le=100,
        description="JPEG quality used when save() is called without one",
    )
    dir_permission: int = Field(
        default=0o755,
        ge=0,
        le=0o777,
        description="Mode for directories created while saving",
    )


class TextConfig(BaseModel):
    """Defaults for text rendering."""

    default_size: int = Field(
        default=12,
        ge=1,
        description="Font size in pixels when text() is called without one",
    )
    font_path: Path | None = Field(
        default=None,
        description="TrueType font used when text() is called without one (None = backend built-in)",
    )


class CompareConfig(BaseModel):
    """Perceptual comparison settings.

    The difference hash needs one more column than it has rows so that each
    row yields ``hash_height`` gradient bits.
    """

    hash_width: int = Field(default=9, ge=2, le=64)
    hash_height: int = Field(default=8, ge=1, le=64)
    similar_threshold: int = Field(
        default=10,
        ge=0,
        description="Largest Hamming distance still reported as a variation of the same image",
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


class ImagesmithSettings(BaseModel):
    """Main application settings."""

    backend: BackendConfig = Field(default_factory=BackendConfig)
    save: SaveConfig = Field(default_factory=SaveConfig)
    text: TextConfig = Field(default_factory=TextConfig)
    compare: CompareConfig = Field(default_factory=CompareConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> ImagesmithSettings:
    """Get default application settings."""
    return ImagesmithSettings()
