"""
Layered injector configuration.
"""

import logging

import pytest

from wirebox import ConfigError, InjectorConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("WIREBOX_DIAGNOSTICS", "WIREBOX_LOG_LEVEL", "WIREBOX_NAME"):
        monkeypatch.delenv(key, raising=False)


class TestInjectorConfig:

    def test_defaults(self):
        config = InjectorConfig.load()
        assert config.diagnostics is False
        assert config.log_level == "DEBUG"
        assert config.level == logging.DEBUG
        assert config.name == "injector"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("WIREBOX_DIAGNOSTICS", "true")
        monkeypatch.setenv("WIREBOX_LOG_LEVEL", "info")
        config = InjectorConfig.load()
        assert config.diagnostics is True
        assert config.level == logging.INFO

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text('WIREBOX_NAME="billing"\nWIREBOX_DIAGNOSTICS=1\nOTHER=ignored\n')
        config = InjectorConfig.load(env_file=str(env_file))
        assert config.name == "billing"
        assert config.diagnostics is True

    def test_precedence(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("WIREBOX_NAME=from-file\nWIREBOX_LOG_LEVEL=WARNING\n")
        monkeypatch.setenv("WIREBOX_NAME", "from-env")

        config = InjectorConfig.load(env_file=str(env_file))
        assert config.name == "from-env"
        assert config.log_level == "WARNING"

        config = InjectorConfig.load(env_file=str(env_file), overrides={"name": "explicit"})
        assert config.name == "explicit"

    def test_missing_env_file_ignored(self, tmp_path):
        config = InjectorConfig.load(env_file=str(tmp_path / "missing.env"))
        assert config.name == "injector"

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("APP_DI_NAME", "custom")
        assert InjectorConfig.load(env_prefix="APP_DI_").name == "custom"

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigError, match="scope"):
            InjectorConfig.from_dict({"scope": "request"})

    def test_bad_log_level_rejected(self):
        with pytest.raises(ConfigError):
            InjectorConfig.from_dict({"log_level": "LOUD"})

    def test_bad_diagnostics_rejected(self):
        with pytest.raises(ConfigError):
            InjectorConfig.from_dict({"diagnostics": "maybe"})

    def test_unrelated_prefixed_variables_ignored(self, tmp_path, monkeypatch):
        monkeypatch.setenv("WIREBOX_HOME", "/opt/wirebox")
        env_file = tmp_path / ".env"
        env_file.write_text("WIREBOX_CACHE_DIR=/tmp/wirebox\nWIREBOX_NAME=billing\n")

        config = InjectorConfig.load(env_file=str(env_file))
        assert config.name == "billing"

    def test_unknown_override_rejected(self):
        with pytest.raises(ConfigError, match="home"):
            InjectorConfig.load(overrides={"home": "/opt/wirebox"})

    def test_numeric_name_stays_string(self, monkeypatch):
        monkeypatch.setenv("WIREBOX_NAME", "1")
        monkeypatch.setenv("WIREBOX_DIAGNOSTICS", "0")
        config = InjectorConfig.load()
        assert config.name == "1"
        assert config.diagnostics is False

    def test_bad_name_rejected(self):
        with pytest.raises(ConfigError, match="name"):
            InjectorConfig.from_dict({"name": ""})
        with pytest.raises(ConfigError, match="name"):
            InjectorConfig.from_dict({"name": 7})
