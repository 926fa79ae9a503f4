"""
Tests for settings loading, overrides, and the merge into LoggerConfig.
"""

import pytest
import yaml
from pydantic import ValidationError

from sinklog.config import LoggerOverrides, LogSettings, load_settings, merge_config, read_config
from sinklog.errors import ConfigurationMissingError
from sinklog.levels import DEFAULT_TAXONOMY
from sinklog.routing import Environment


# ═══════════════════════════════════════════════════════════════════
#  LogSettings
# ═══════════════════════════════════════════════════════════════════

class TestLogSettings:
    def test_unknown_level_rejected_at_load(self):
        with pytest.raises(ValidationError, match="Unknown log level"):
            LogSettings(level="fatal")

    def test_level_checked_against_own_taxonomy(self):
        s = LogSettings.model_validate({"level": "fatal", "loggerConfig": {"levels": {"fatal": 0}}})
        assert s.level == "fatal"

    def test_defaults_are_off(self):
        s = LogSettings()
        assert s.enable_log is False
        assert s.env is Environment.OTHER
        assert s.logger_config == DEFAULT_TAXONOMY

    def test_label_depends_on_environment(self):
        assert LogSettings(environment="development").resolved_label == ":app-dev"
        assert LogSettings(environment="production").resolved_label == ":app"
        assert LogSettings(label=":svc").resolved_label == ":svc"

    def test_camel_case_keys(self):
        s = LogSettings.from_dict({
            "enableLog": True,
            "pathError": "e.log",
            "maxSize": 2048,
            "enableColorPathLog": True,
            "loggerConfig": {"levels": {"fatal": 0}},
        })
        assert s.enable_log is True
        assert s.path_error == "e.log"
        assert s.size_limit == 2048
        assert s.enable_color_path_log is True
        assert s.logger_config.levels == {"fatal": 0}

    def test_unrelated_sections_ignored(self):
        s = LogSettings.from_dict({"enableLog": True, "grenacheClient": {"grape": "x"}})
        assert s.enable_log is True

    def test_negative_size_limit_rejected(self):
        with pytest.raises(ValidationError):
            LogSettings(size_limit=-1)


class TestLoadSettings:
    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "default.yaml"
        path.write_text(yaml.safe_dump({"enableLog": True, "appName": "express"}))
        s = load_settings(path, environment="production")
        assert s.enable_log is True
        assert s.app_name == "express"
        assert s.env is Environment.PRODUCTION

    def test_env_var_config_path(self, tmp_path, monkeypatch):
        path = tmp_path / "conf.yaml"
        path.write_text("enableLog: true\n")
        monkeypatch.setenv("SINKLOG_CONFIG", str(path))
        assert load_settings().enable_log is True

    def test_environment_precedence(self, tmp_path, monkeypatch):
        path = tmp_path / "conf.yaml"
        path.write_text("environment: production\n")
        assert load_settings(path).env is Environment.PRODUCTION
        monkeypatch.setenv("APP_ENV", "development")
        assert load_settings(path).env is Environment.DEVELOPMENT
        monkeypatch.setenv("SINKLOG_ENV", "staging")
        assert load_settings(path).env is Environment.OTHER
        assert load_settings(path, environment="production").env is Environment.PRODUCTION

    def test_missing_explicit_file_is_fatal(self, tmp_path):
        with pytest.raises(ConfigurationMissingError):
            load_settings(tmp_path / "nope.yaml")

    def test_missing_default_file_gives_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert read_config() == {}
        assert load_settings().enable_log is False

    def test_default_file_location(self, tmp_path, monkeypatch):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "default.yaml").write_text("enableLog: true\n")
        monkeypatch.chdir(tmp_path)
        assert load_settings().enable_log is True

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path).enable_log is False

    def test_non_mapping_file_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_settings(path)

    def test_raw_mapping(self):
        s = load_settings(raw={"enableLog": True}, environment="development")
        assert s.enable_log is True
        assert s.env is Environment.DEVELOPMENT


# ═══════════════════════════════════════════════════════════════════
#  Overrides + merge
# ═══════════════════════════════════════════════════════════════════

class TestLoggerOverrides:
    def test_aliases_accepted(self):
        o = LoggerOverrides.model_validate({"pathError": "./custom.log", "enableConsole": False})
        assert o.path_error == "./custom.log"
        assert o.enable_console is False

    def test_path_objects_coerced(self, tmp_path):
        o = LoggerOverrides(path_log=tmp_path / "x.log")
        assert o.path_log == str(tmp_path / "x.log")

    def test_unknown_option_rejected(self):
        with pytest.raises(ValidationError):
            LoggerOverrides.model_validate({"pathlog": "typo.log"})

    def test_unknown_color_rejected(self):
        with pytest.raises(ValidationError):
            LoggerOverrides(color="chartreuse")


class TestMergeConfig:
    @pytest.fixture
    def settings(self):
        return LogSettings(environment="development", enable_log=True, log_dir="logs")

    def test_absent_overrides_inherit(self, settings):
        cfg = merge_config(settings)
        assert cfg.label == ":app-dev"
        assert cfg.path_error.endswith("errors-app.log")
        assert cfg.enable_console is None
        assert cfg.taxonomy == DEFAULT_TAXONOMY
        assert cfg.default_color is None

    def test_label_appended_to_global(self, settings):
        cfg = merge_config(settings, LoggerOverrides(label=":grenache:client"))
        assert cfg.label == ":app-dev:grenache:client"

    def test_explicit_override_wins(self, settings):
        cfg = merge_config(settings, LoggerOverrides(
            path_error="./custom.log", enable_color=False, size_limit=10, color="blue",
        ))
        assert cfg.path_error == "./custom.log"
        assert cfg.enable_color is False
        assert cfg.size_limit == 10
        assert cfg.default_color == "blue"

    def test_false_override_is_not_absent(self):
        settings = LogSettings(enable_color_path_log=True)
        cfg = merge_config(settings, LoggerOverrides(enable_color_path_log=False))
        assert cfg.enable_color_path_log is False

    def test_taxonomy_replaced_whole(self, settings):
        cfg = merge_config(settings, LoggerOverrides.model_validate(
            {"loggerConfig": {"levels": {"fatal": 0, "info": 1}}}
        ))
        assert cfg.taxonomy.levels == {"fatal": 0, "info": 1}
        assert cfg.taxonomy.colors == {}

    def test_unknown_level_rejected(self, settings):
        with pytest.raises(ValueError, match="Unknown log level"):
            merge_config(settings, LoggerOverrides(level="fatal"))

    def test_override_level_checked_against_replaced_taxonomy(self, settings):
        cfg = merge_config(settings, LoggerOverrides.model_validate(
            {"level": "fatal", "loggerConfig": {"levels": {"fatal": 0}}}
        ))
        assert cfg.level == "fatal"

    def test_inherited_level_kept_with_replaced_taxonomy(self):
        settings = LogSettings(level="info")
        cfg = merge_config(settings, LoggerOverrides.model_validate(
            {"loggerConfig": {"levels": {"fatal": 0}}}
        ))
        assert cfg.level == "info"
        assert cfg.taxonomy.severity("info") is None

    def test_config_is_immutable(self, settings):
        cfg = merge_config(settings)
        with pytest.raises(AttributeError):
            cfg.label = "changed"
