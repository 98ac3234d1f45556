"""
Configuration for the form engine and its API.
"""

from pathlib import Path
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


def _get_data_dir() -> Path:
    """Get the data directory relative to project root."""
    # Project root is 3 levels up from this file: backend/dynaform/config.py
    config_file = Path(__file__)
    project_root = config_file.parent.parent.parent
    return project_root / "data"


class Settings(BaseSettings):
    catalog_path: Path = Field(
        default_factory=lambda: _get_data_dir() / "formFields.json", alias="CATALOG_PATH"
    )
    display_names_path: Path = Field(
        default_factory=lambda: _get_data_dir() / "nameFields.json", alias="DISPLAY_NAMES_PATH"
    )
    sqlite_path: Path = Field(
        default_factory=lambda: _get_data_dir() / "handoff.sqlite", alias="SQLITE_PATH"
    )
    handoff_key: str = Field(default="confirmationData", alias="HANDOFF_KEY")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("catalog_path", "display_names_path", "sqlite_path", mode="before")
    @classmethod
    def convert_path(cls, v):
        """Convert string to Path if needed."""
        if isinstance(v, str):
            return Path(v)
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        populate_by_name = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
