"""
Application settings loaded from environment variables.

All variables use the MARKPRINT_ prefix, e.g. MARKPRINT_PORT=8080.
A .env file in the working directory is read as well.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Bundled client and theme stylesheets
DEFAULT_STATIC_DIR = Path(__file__).parent.parent / "static"

DEFAULT_PAGE_WIDTHS = {
    "A4": 794,  # 210mm at 96dpi
    "Letter": 816,  # 8.5in at 96dpi
    "Legal": 816,
    "B5": 672,  # 176mm at 96dpi
}


class Settings(BaseSettings):
    """Runtime configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MARKPRINT_",
        env_file=".env",
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 3000
    environment: Literal["development", "production", "test"] = "production"
    log_level: str = "INFO"

    # Uploads
    max_file_size: int = Field(default=26_214_400, gt=0, description="Bytes")

    # PDF rendering
    pdf_timeout_ms: int = Field(default=30_000, gt=0)
    pdf_concurrency_limit: int = Field(default=3, ge=1)
    browser_executable_path: str | None = None
    page_widths: dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_PAGE_WIDTHS))
    b5_height_px: int = 945  # 250mm at 96dpi

    static_dir: Path = DEFAULT_STATIC_DIR

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("page_widths")
    @classmethod
    def _merge_page_widths(cls, value: dict[str, int]) -> dict[str, int]:
        """Overrides replace individual sizes; unlisted sizes keep their defaults."""
        return {**DEFAULT_PAGE_WIDTHS, **value}

    @property
    def pdf_max_pending(self) -> int:
        """Bound of the PDF wait queue."""
        return self.pdf_concurrency_limit * 2

    @property
    def cors_origins(self) -> list[str]:
        """Allowed CORS origins; open only in development."""
        return ["*"] if self.environment == "development" else []

    @property
    def themes_dir(self) -> Path:
        return self.static_dir / "styles" / "themes"


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def init_settings(settings: Settings) -> Settings:
    """Install an explicit settings instance (tests, embedding)."""
    global _settings
    _settings = settings
    return _settings


def reset_settings() -> None:
    """Drop cached settings so the next get_settings() reloads."""
    global _settings
    _settings = None
