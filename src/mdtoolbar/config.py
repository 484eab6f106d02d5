"""Configuration management for mdtoolbar."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ItalicMarker = Literal["*", "_"]
BoldMarker = Literal["**", "__"]
ListMarker = Literal["-", "*", "+"]


class FormatOptions(BaseModel):
    """Marker preferences used when the formatter adds new markup.

    Detection and removal always recognize every marker variant; these
    options only decide what gets written.
    """

    model_config = ConfigDict(frozen=True)

    italic_marker: ItalicMarker = "*"
    bold_marker: BoldMarker = "**"
    preferred_list_marker: ListMarker = "-"


class Settings(BaseSettings):
    """Application configuration via environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Marker preferences
    italic_marker: ItalicMarker = Field(
        default="*",
        alias="MDTOOLBAR_ITALIC_MARKER",
    )
    bold_marker: BoldMarker = Field(
        default="**",
        alias="MDTOOLBAR_BOLD_MARKER",
    )
    preferred_list_marker: ListMarker = Field(
        default="-",
        alias="MDTOOLBAR_LIST_MARKER",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        alias="MDTOOLBAR_LOG_LEVEL",
    )

    def format_options(self) -> FormatOptions:
        """Build the engine options from these settings."""
        return FormatOptions(
            italic_marker=self.italic_marker,
            bold_marker=self.bold_marker,
            preferred_list_marker=self.preferred_list_marker,
        )


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """Load settings, optionally from a specific .env file.

    A fresh instance is returned on every call; nothing is cached.
    """
    if env_file:
        return Settings(_env_file=env_file)
    return Settings()
