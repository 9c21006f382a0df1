"""
Tests for library settings and logging configuration.
"""

import logging
import textwrap

import pytest
from featmodel.config import (
    LOGGER_NAME,
    Settings,
    configure_logging,
    get_settings,
    reset_settings,
    set_settings,
)
from featmodel.errors import ConfigError


@pytest.fixture(autouse=True)
def restore_settings():
    yield
    reset_settings()


class TestSettings:
    """Test loading settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.log_level == "WARNING"
        assert settings.deduplicate_contained_features is False
        assert settings.default_name_prefix == "@"

    def test_from_yaml(self):
        settings = Settings.from_yaml(textwrap.dedent("""
            log_level: DEBUG
            deduplicate_contained_features: true
        """))
        assert settings.log_level == "DEBUG"
        assert settings.deduplicate_contained_features is True
        assert settings.default_name_prefix == "@"

    def test_empty_yaml(self):
        assert Settings.from_yaml("") == Settings()

    def test_unknown_key(self):
        with pytest.raises(ConfigError):
            Settings.from_yaml("colour: blue")

    def test_wrong_type(self):
        with pytest.raises(ConfigError):
            Settings.from_yaml("deduplicate_contained_features: maybe")

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError):
            Settings.from_yaml("- a\n- b\n")

    def test_invalid_yaml(self):
        with pytest.raises(ConfigError):
            Settings.from_yaml("log_level: [unclosed")

    def test_from_file(self, tmp_path):
        path = tmp_path / "featmodel.yaml"
        path.write_text("default_name_prefix: 'f_'\n")
        assert Settings.from_file(path).default_name_prefix == "f_"

    def test_yaml_roundtrip(self):
        settings = Settings(log_level="INFO", deduplicate_contained_features=True)
        assert Settings.from_yaml(settings.to_yaml()) == settings

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("FEATMODEL_LOG_LEVEL", "debug")
        monkeypatch.setenv("FEATMODEL_DEDUPLICATE", "true")
        monkeypatch.setenv("FEATMODEL_NAME_PREFIX", "#")
        settings = Settings.from_env()
        assert settings.log_level == "DEBUG"
        assert settings.deduplicate_contained_features is True
        assert settings.default_name_prefix == "#"

    def test_with_changes(self):
        assert Settings().with_changes(log_level="ERROR").log_level == "ERROR"


class TestProcessSettings:
    def test_set_and_reset(self):
        previous = set_settings(Settings(log_level="INFO"))
        assert previous == Settings()
        assert get_settings().log_level == "INFO"
        reset_settings()
        assert get_settings() == Settings()


class TestConfigureLogging:
    def test_sets_level(self):
        logger = configure_logging(Settings(log_level="DEBUG"))
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG

    def test_does_not_stack_handlers(self):
        configure_logging(Settings(log_level="INFO"))
        logger = configure_logging(Settings(log_level="INFO"))
        ours = [h for h in logger.handlers if getattr(h, "_featmodel_handler", False)]
        assert len(ours) == 1

    def test_unknown_level(self):
        with pytest.raises(ConfigError):
            configure_logging(Settings(log_level="LOUD"))
