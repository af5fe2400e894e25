"""Tests for artfinder.config: Settings loading, env overrides, and
validate_env."""

import pytest

from artfinder.config import (
    BACKENDS,
    Settings,
    get_settings,
    reset_settings,
    validate_env,
)
from artfinder.exceptions import ConfigurationError


# =============================================================================
# Settings defaults and validation
# =============================================================================


class TestSettingsDefaults:
    """Tests for Settings construction."""

    def test_defaults(self):
        settings = Settings()
        assert settings.persistence_backend == "supabase"
        assert settings.openai_model == "gpt-4"
        assert settings.analysis_max_items is None
        assert settings.write_concurrency == 8
        assert settings.research_table == "research_data"
        assert settings.analysis_table == "analysis_results"

    def test_backend_is_normalized(self):
        assert Settings(persistence_backend=" Memory ").persistence_backend == "memory"

    def test_unknown_backend_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown persistence backend"):
            Settings(persistence_backend="mongo")

    def test_write_concurrency_must_be_positive(self):
        with pytest.raises(ConfigurationError, match="write_concurrency"):
            Settings(write_concurrency=0)

    def test_backends_constant(self):
        assert set(BACKENDS) == {"supabase", "astra", "memory"}


# =============================================================================
# Settings.from_yaml
# =============================================================================


class TestSettingsFromYaml:
    """Tests for YAML loading and environment overrides."""

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = Settings.from_yaml(tmp_path / "absent.yaml", env={})
        assert settings == Settings()

    def test_yaml_values_applied(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            "persistence_backend: astra\nreddit_limit: 50\nastra_keyspace: research\n",
            encoding="utf-8",
        )
        settings = Settings.from_yaml(path, env={})
        assert settings.persistence_backend == "astra"
        assert settings.reddit_limit == 50
        assert settings.astra_keyspace == "research"

    def test_unknown_yaml_keys_ignored(self, tmp_path, caplog):
        path = tmp_path / "settings.yaml"
        path.write_text("mystery_knob: 3\n", encoding="utf-8")
        settings = Settings.from_yaml(path, env={})
        assert not hasattr(settings, "mystery_knob")
        assert "mystery_knob" in caplog.text

    def test_env_overrides_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("persistence_backend: astra\nwrite_concurrency: 2\n", encoding="utf-8")
        settings = Settings.from_yaml(
            path,
            env={
                "ARTFINDER_BACKEND": "memory",
                "ARTFINDER_WRITE_CONCURRENCY": "16",
                "OPENAI_API_KEY": "sk-test",
                "ARTFINDER_ANALYSIS_MAX_ITEMS": "100",
            },
        )
        assert settings.persistence_backend == "memory"
        assert settings.write_concurrency == 16
        assert settings.openai_api_key == "sk-test"
        assert settings.analysis_max_items == 100

    def test_empty_env_values_are_ignored(self, tmp_path):
        settings = Settings.from_yaml(
            tmp_path / "absent.yaml", env={"ARTFINDER_BACKEND": ""}
        )
        assert settings.persistence_backend == "supabase"

    def test_invalid_env_cast_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="ARTFINDER_HTTP_TIMEOUT"):
            Settings.from_yaml(
                tmp_path / "absent.yaml", env={"ARTFINDER_HTTP_TIMEOUT": "soon"}
            )

    def test_yaml_strings_are_cast(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(
            'write_concurrency: "8"\nhttp_timeout: "12.5"\nanalysis_max_items: null\n',
            encoding="utf-8",
        )
        settings = Settings.from_yaml(path, env={})
        assert settings.write_concurrency == 8
        assert settings.http_timeout == 12.5
        assert settings.analysis_max_items is None

    def test_uncastable_yaml_value_raises(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("write_concurrency: lots\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="write_concurrency"):
            Settings.from_yaml(path, env={})

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("key: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Failed to parse"):
            Settings.from_yaml(path, env={})

    def test_non_mapping_yaml_raises(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="must contain a mapping"):
            Settings.from_yaml(path, env={})

    def test_reads_process_environment_by_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv("YOUTUBE_API_KEY", "yt-key")
        monkeypatch.chdir(tmp_path)
        settings = Settings.from_yaml(tmp_path / "absent.yaml")
        assert settings.youtube_api_key == "yt-key"


# =============================================================================
# Cached accessor
# =============================================================================


class TestGetSettings:
    """Tests for the process-wide settings cache."""

    def test_cached_until_reset(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        reset_settings()
        try:
            first = get_settings()
            assert get_settings() is first
            reset_settings()
            assert get_settings() is not first
        finally:
            reset_settings()


# =============================================================================
# validate_env
# =============================================================================


class TestValidateEnv:
    """Tests for validate_env."""

    def test_missing_required_raises(self):
        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            validate_env("memory")

    def test_backend_vars_required(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        with pytest.raises(ConfigurationError, match="SUPABASE_URL"):
            validate_env("supabase")

    def test_non_strict_reports_status(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("ASTRA_BASE_URL", "https://db.example.com")
        status = validate_env("astra", strict=False)
        assert status["OPENAI_API_KEY"] is True
        assert status["ASTRA_BASE_URL"] is True
        assert status["ASTRA_TOKEN"] is False
        assert status["YOUTUBE_API_KEY"] is False

    def test_memory_backend_needs_only_openai(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        status = validate_env("memory")
        assert status["OPENAI_API_KEY"] is True

    def test_unknown_backend_raises(self):
        with pytest.raises(ConfigurationError, match="Unknown persistence backend"):
            validate_env("mongo")
