"""Tests for configuration loading.

Tests cover:
- Defaults when no config file exists
- YAML parsing and ${VAR} substitution
- NATIVESEARCH_* environment overrides
- Explicit override precedence
- Validation error reporting
"""

from pathlib import Path

import pytest


class TestConfigLoaderDefaults:
    """Tests for loading without a config file."""

    def test_defaults_without_file(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test built-in defaults are used when no file is found."""
        from nativesearch.config.loader import ConfigLoader

        monkeypatch.chdir(temp_dir)
        config = ConfigLoader(env={}).load()

        assert config.indexer.max_chunk_tokens == 1500
        assert config.search.fuzzy_threshold == 0.4
        assert config.search.field_weights.title == 10
        assert config.assistant.max_context_tokens == 8000
        assert config.assistant.api_key is None

    def test_finds_config_in_working_directory(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test nativesearch.yml in the working directory is picked up."""
        from nativesearch.config.loader import ConfigLoader

        (temp_dir / "nativesearch.yml").write_text("search:\n  max_results: 7\n")
        monkeypatch.chdir(temp_dir)

        config = ConfigLoader(env={}).load()

        assert config.search.max_results == 7

    def test_prefers_yml_extension(self, temp_dir: Path) -> None:
        """Test .yml wins over .yaml when both exist."""
        from nativesearch.config.loader import ConfigLoader

        (temp_dir / "nativesearch.yaml").write_text("{}")
        (temp_dir / "nativesearch.yml").write_text("{}")

        found = ConfigLoader().find_config_file(temp_dir)

        assert found == temp_dir / "nativesearch.yml"


class TestConfigLoaderFile:
    """Tests for explicit config files."""

    def test_loads_sections(self, temp_dir: Path) -> None:
        """Test every section is read from the file."""
        from nativesearch.config.loader import ConfigLoader

        path = temp_dir / "nativesearch.yml"
        path.write_text(
            "indexer:\n"
            "  base_url: https://docs.example.com\n"
            "  workers: 4\n"
            "search:\n"
            "  field_weights:\n"
            "    title: 20\n"
            "assistant:\n"
            "  provider: openai\n"
        )

        config = ConfigLoader(env={}).load(path)

        assert config.indexer.base_url == "https://docs.example.com"
        assert config.indexer.workers == 4
        assert config.search.field_weights.title == 20
        assert config.search.field_weights.heading == 8
        assert config.assistant.provider == "openai"

    def test_empty_file(self, temp_dir: Path) -> None:
        """Test an empty file yields the defaults."""
        from nativesearch.config.loader import ConfigLoader

        path = temp_dir / "nativesearch.yml"
        path.write_text("")

        config = ConfigLoader(env={}).load(path)

        assert config.indexer.workers == 1

    def test_env_var_substitution(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test ${VAR} references are replaced before parsing."""
        from nativesearch.config.loader import ConfigLoader

        monkeypatch.setenv("DOCS_API_KEY", "sk-from-env")
        path = temp_dir / "nativesearch.yml"
        path.write_text("assistant:\n  api_key: ${DOCS_API_KEY}\n")

        config = ConfigLoader().load(path)

        assert config.assistant.api_key == "sk-from-env"

    def test_substitution_uses_injected_env(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test ${VAR} references read the loader's env mapping."""
        from nativesearch.config.loader import ConfigLoader

        monkeypatch.setenv("DOCS_API_KEY", "sk-from-process")
        path = temp_dir / "nativesearch.yml"
        path.write_text("assistant:\n  api_key: ${DOCS_API_KEY}\n")

        config = ConfigLoader(env={"DOCS_API_KEY": "sk-injected"}).load(path)

        assert config.assistant.api_key == "sk-injected"

    def test_missing_env_var(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test an unset ${VAR} raises ConfigError naming the variable."""
        from nativesearch.config.loader import ConfigLoader
        from nativesearch.lib.errors import ConfigError

        monkeypatch.delenv("NATIVESEARCH_TEST_UNSET", raising=False)
        path = temp_dir / "nativesearch.yml"
        path.write_text("assistant:\n  api_key: ${NATIVESEARCH_TEST_UNSET}\n")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader(env={}).load(path)

        assert exc_info.value.field == "NATIVESEARCH_TEST_UNSET"

    def test_missing_file(self, temp_dir: Path) -> None:
        """Test an explicit path that does not exist raises ConfigError."""
        from nativesearch.config.loader import ConfigLoader
        from nativesearch.lib.errors import ConfigError

        with pytest.raises(ConfigError, match="not found"):
            ConfigLoader(env={}).load(temp_dir / "missing.yml")

    def test_invalid_yaml(self, temp_dir: Path) -> None:
        """Test malformed YAML raises ConfigError."""
        from nativesearch.config.loader import ConfigLoader
        from nativesearch.lib.errors import ConfigError

        path = temp_dir / "nativesearch.yml"
        path.write_text("search: [unclosed\n")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader(env={}).load(path)

        assert exc_info.value.field == "yaml_parse"

    def test_non_mapping_top_level(self, temp_dir: Path) -> None:
        """Test a YAML list at the top level is rejected."""
        from nativesearch.config.loader import ConfigLoader
        from nativesearch.lib.errors import ConfigError

        path = temp_dir / "nativesearch.yml"
        path.write_text("- one\n- two\n")

        with pytest.raises(ConfigError, match="must be a mapping"):
            ConfigLoader(env={}).load(path)


class TestConfigLoaderPrecedence:
    """Tests for environment and explicit overrides."""

    def test_env_overrides_file(self, temp_dir: Path) -> None:
        """Test NATIVESEARCH_* variables override file values."""
        from nativesearch.config.loader import ConfigLoader

        path = temp_dir / "nativesearch.yml"
        path.write_text("indexer:\n  workers: 2\n  site_dir: from-file\n")
        env = {"NATIVESEARCH_WORKERS": "8", "NATIVESEARCH_PROVIDER": "openai"}

        config = ConfigLoader(env=env).load(path)

        assert config.indexer.workers == 8
        assert config.indexer.site_dir == "from-file"
        assert config.assistant.provider == "openai"

    def test_empty_env_value_ignored(self, temp_dir: Path) -> None:
        """Test empty environment values do not override anything."""
        from nativesearch.config.loader import ConfigLoader

        path = temp_dir / "nativesearch.yml"
        path.write_text("indexer:\n  workers: 2\n")

        config = ConfigLoader(env={"NATIVESEARCH_WORKERS": ""}).load(path)

        assert config.indexer.workers == 2

    def test_bad_integer_env(self, temp_dir: Path) -> None:
        """Test a non-integer numeric override raises ConfigError."""
        from nativesearch.config.loader import ConfigLoader
        from nativesearch.lib.errors import ConfigError

        path = temp_dir / "nativesearch.yml"
        path.write_text("{}")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader(env={"NATIVESEARCH_WORKERS": "many"}).load(path)

        assert exc_info.value.field == "indexer.workers"

    def test_explicit_overrides_win(self, temp_dir: Path) -> None:
        """Test explicit overrides beat both file and environment."""
        from nativesearch.config.loader import ConfigLoader

        path = temp_dir / "nativesearch.yml"
        path.write_text("indexer:\n  workers: 2\n")

        config = ConfigLoader(env={"NATIVESEARCH_WORKERS": "4"}).load(
            path, overrides={"indexer": {"workers": 16}}
        )

        assert config.indexer.workers == 16


class TestConfigLoaderValidation:
    """Tests for validation failures."""

    def test_out_of_range_value(self, temp_dir: Path) -> None:
        """Test an invalid value reports its dotted field path."""
        from nativesearch.config.loader import ConfigLoader
        from nativesearch.lib.errors import ConfigError

        path = temp_dir / "nativesearch.yml"
        path.write_text("search:\n  fuzzy_threshold: 1.5\n")

        with pytest.raises(ConfigError) as exc_info:
            ConfigLoader(env={}).load(path)

        assert exc_info.value.field == "config_validation"
        assert "search.fuzzy_threshold" in exc_info.value.message

    def test_unknown_key_rejected(self, temp_dir: Path) -> None:
        """Test unknown keys are rejected."""
        from nativesearch.config.loader import ConfigLoader
        from nativesearch.lib.errors import ConfigError

        path = temp_dir / "nativesearch.yml"
        path.write_text("indexer:\n  sitedir: typo\n")

        with pytest.raises(ConfigError, match="indexer.sitedir"):
            ConfigLoader(env={}).load(path)
