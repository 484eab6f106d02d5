"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from mdtoolbar.config import FormatOptions, Settings, load_settings

ENV_VARS = (
    "MDTOOLBAR_ITALIC_MARKER",
    "MDTOOLBAR_BOLD_MARKER",
    "MDTOOLBAR_LIST_MARKER",
    "MDTOOLBAR_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the host environment out of these tests."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        """Test the default marker preferences."""
        settings = Settings(_env_file=None)

        assert settings.italic_marker == "*"
        assert settings.bold_marker == "**"
        assert settings.preferred_list_marker == "-"
        assert settings.log_level == "WARNING"

    def test_environment_overrides(self, monkeypatch):
        """Test reading markers from prefixed variables."""
        monkeypatch.setenv("MDTOOLBAR_ITALIC_MARKER", "_")
        monkeypatch.setenv("MDTOOLBAR_LIST_MARKER", "*")

        settings = Settings(_env_file=None)

        assert settings.italic_marker == "_"
        assert settings.preferred_list_marker == "*"

    def test_invalid_marker_rejected(self, monkeypatch):
        """Test that an unknown marker fails validation."""
        monkeypatch.setenv("MDTOOLBAR_ITALIC_MARKER", "#")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_field_names_accepted(self):
        """Test constructing settings by field name."""
        settings = Settings(_env_file=None, bold_marker="__")

        assert settings.bold_marker == "__"

    def test_load_from_env_file(self, tmp_path: Path):
        """Test reading a specific .env file."""
        env_file = tmp_path / "toolbar.env"
        env_file.write_text("MDTOOLBAR_LIST_MARKER=+\n", encoding="utf-8")

        settings = load_settings(env_file)

        assert settings.preferred_list_marker == "+"

    def test_fresh_instance_each_call(self, monkeypatch, tmp_path: Path):
        """Test that later environment changes are picked up."""
        monkeypatch.chdir(tmp_path)
        first = load_settings()
        monkeypatch.setenv("MDTOOLBAR_ITALIC_MARKER", "_")
        second = load_settings()

        assert first.italic_marker == "*"
        assert second.italic_marker == "_"


class TestFormatOptions:
    """Tests for the engine options model."""

    def test_built_from_settings(self):
        """Test converting settings to options."""
        options = Settings(_env_file=None, italic_marker="_").format_options()

        assert options == FormatOptions(italic_marker="_")

    def test_frozen(self):
        """Test that options cannot be changed after creation."""
        options = FormatOptions()

        with pytest.raises(ValidationError):
            options.italic_marker = "_"

    def test_rejects_unknown_list_marker(self):
        """Test list marker validation."""
        with pytest.raises(ValidationError):
            FormatOptions(preferred_list_marker="#")
