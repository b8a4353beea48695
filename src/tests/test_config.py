"""
Tests for resolution settings (defaults, YAML loading, validation, swapping
the active settings) and logging configuration.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import logging

import pytest

from orrery.core.config import (
    Settings,
    configure_logging,
    get_settings,
    load_settings,
    use_settings,
)
from orrery.core.constants import DEFAULT_DIFF_DELTA, DEFAULT_MAX_FRAME_DEPTH
from orrery.core.exceptions import ConfigError


@pytest.fixture
def restore_settings():
    previous = get_settings()
    yield
    use_settings(previous)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestSettings:

    def test_defaults(self):
        s = Settings()
        assert s.max_frame_depth == DEFAULT_MAX_FRAME_DEPTH
        assert s.angular_velocity_delta == DEFAULT_DIFF_DELTA
        assert s.velocity_delta == DEFAULT_DIFF_DELTA
        assert s.log_level == "INFO"
        assert s.log_file is None

    def test_from_dict(self):
        s = Settings.from_dict({
            "max_frame_depth": 8,
            "velocity_delta": 0.001,
            "logging": {"level": "debug", "file": "out/orrery.log"},
        })
        assert s.max_frame_depth == 8
        assert s.velocity_delta == 0.001
        assert s.log_level == "DEBUG"
        assert s.log_file == "out/orrery.log"

    def test_from_empty_dict(self):
        assert Settings.from_dict({}) == Settings()

    @pytest.mark.parametrize("data", [
        {"max_depth": 3},
        {"logging": {"verbosity": "high"}},
    ])
    def test_unknown_keys(self, data):
        with pytest.raises(ConfigError, match="Unknown"):
            Settings.from_dict(data)

    def test_logging_section_must_be_mapping(self):
        with pytest.raises(ConfigError):
            Settings.from_dict({"logging": "DEBUG"})

    @pytest.mark.parametrize("kwargs", [
        {"max_frame_depth": 0},
        {"angular_velocity_delta": 0.0},
        {"velocity_delta": -1.0},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            Settings(**kwargs)

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)


class TestLoadSettings:

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "orrery.yaml"
        path.write_text("max_frame_depth: 12\nlogging:\n  level: WARNING\n")
        s = load_settings(path)
        assert s.max_frame_depth == 12
        assert s.log_level == "WARNING"

    def test_logs_path(self, tmp_path, caplog):
        path = tmp_path / "orrery.yaml"
        path.write_text("max_frame_depth: 12\n")
        with caplog.at_level(logging.INFO, logger="orrery.core.config"):
            load_settings(path)
        [record] = [r for r in caplog.records if r.msg == "Loading settings from: %s"]
        assert record.args == (path,)
        assert str(path) in record.getMessage()

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(str(path)) == Settings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_settings(tmp_path / "absent.yaml")

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError):
            load_settings(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("max_frame_depth: [1, 2\n")
        with pytest.raises(ConfigError):
            load_settings(path)


class TestActiveSettings:

    def test_use_settings_returns_previous(self, restore_settings):
        before = get_settings()
        previous = use_settings(Settings(max_frame_depth=5))
        assert previous is before
        assert get_settings().max_frame_depth == 5

    def test_overrides(self, restore_settings):
        use_settings(Settings(max_frame_depth=5), velocity_delta=0.5)
        assert get_settings().max_frame_depth == 5
        assert get_settings().velocity_delta == 0.5

    def test_override_current(self, restore_settings):
        use_settings(max_frame_depth=7)
        assert get_settings().max_frame_depth == 7
        assert get_settings().log_level == "INFO"


class TestConfigureLogging:

    def test_log_file(self, tmp_path, restore_logging):
        path = tmp_path / "logs" / "orrery.log"
        configure_logging("DEBUG", str(path))
        logging.getLogger("orrery.test").debug("frame tree refreshed")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert path.exists()
        assert "frame tree refreshed" in path.read_text()

    def test_level_from_settings(self, restore_settings, restore_logging):
        use_settings(log_level="WARNING")
        configure_logging()
        assert logging.getLogger().level == logging.WARNING
