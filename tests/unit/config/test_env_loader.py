"""Tests for environment variable substitution and .env loading."""

import os
from pathlib import Path

import pytest


class TestSubstituteEnvVars:
    """Tests for substitute_env_vars()."""

    def test_substitutes_multiple(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test every reference in the text is replaced."""
        from nativesearch.config.env_loader import substitute_env_vars

        monkeypatch.setenv("NS_HOST", "docs.example.com")
        monkeypatch.setenv("NS_PATH", "search-data")

        result = substitute_env_vars("url: https://${NS_HOST}/${NS_PATH}")

        assert result == "url: https://docs.example.com/search-data"

    def test_explicit_mapping(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an explicit mapping is used instead of os.environ."""
        from nativesearch.config.env_loader import substitute_env_vars
        from nativesearch.lib.errors import ConfigError

        monkeypatch.setenv("NS_HOST", "from-process")

        assert substitute_env_vars("${NS_HOST}", {"NS_HOST": "mapped"}) == "mapped"
        with pytest.raises(ConfigError):
            substitute_env_vars("${NS_HOST}", {})

    def test_text_without_references(self) -> None:
        """Test text without references is returned unchanged."""
        from nativesearch.config.env_loader import substitute_env_vars

        assert substitute_env_vars("plain: $HOME {x}") == "plain: $HOME {x}"

    def test_missing_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test an unset variable raises ConfigError."""
        from nativesearch.config.env_loader import substitute_env_vars
        from nativesearch.lib.errors import ConfigError

        monkeypatch.delenv("NS_NOT_SET", raising=False)

        with pytest.raises(ConfigError, match="NS_NOT_SET"):
            substitute_env_vars("key: ${NS_NOT_SET}")


class TestLoadEnvFile:
    """Tests for load_env_file()."""

    def test_loads_file(self, temp_dir: Path, isolated_env: dict[str, str]) -> None:
        """Test variables from an explicit .env file are loaded."""
        from nativesearch.config.env_loader import load_env_file

        env_file = temp_dir / ".env"
        env_file.write_text("NS_FROM_DOTENV=loaded\n")

        assert load_env_file(env_file) is True
        assert os.environ["NS_FROM_DOTENV"] == "loaded"

    def test_does_not_override(
        self, temp_dir: Path, isolated_env: dict[str, str]
    ) -> None:
        """Test existing environment values take precedence."""
        from nativesearch.config.env_loader import load_env_file

        os.environ["NS_EXISTING"] = "shell"
        env_file = temp_dir / ".env"
        env_file.write_text("NS_EXISTING=dotenv\n")

        load_env_file(env_file)

        assert os.environ["NS_EXISTING"] == "shell"
