from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings, read from the environment or a ``.env`` file when present."""

    model_config = SettingsConfigDict(
        env_prefix="DOCMARK_",
        env_file=Path(__file__).resolve().parents[2] / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "docmark"
    app_version: str = "0.1.0"

    # Preview and export share one scale unless overridden.
    preview_scale: float = Field(default=2.0, gt=0)
    export_scale: float = Field(default=2.0, gt=0)
    download_delay_ms: int = Field(default=500, ge=0)

    base_dir: Path = Field(default_factory=lambda: Path.home() / ".docmark")
    store_dir: Optional[Path] = None
    downloads_dir: Optional[Path] = None
    font_dir: Optional[Path] = None

    log_level: str = "INFO"

    def configure_paths(self) -> None:
        """Fill in default directories and create them if missing."""
        self.store_dir = (self.store_dir or (self.base_dir / "watermark-store")).resolve()
        self.downloads_dir = (self.downloads_dir or (self.base_dir / "downloads")).resolve()

        for directory in (self.store_dir, self.downloads_dir):
            directory.mkdir(parents=True, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    settings = Settings()
    settings.configure_paths()
    return settings
