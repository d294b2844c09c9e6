"""
Tests for configuration loading: defaults, YAML file, environment overrides
and validation errors.
"""
from datetime import timedelta
from pathlib import Path

import pytest

from telegram_autoresponder.core.config import load_config, read_env
from telegram_autoresponder.core.errors import ConfigError
from telegram_autoresponder.core.models import DEFAULT_RESPONSE_MESSAGE

REQUIRED_ENV = {"APP_ID": "12345", "APP_HASH": "abcdef", "PHONE": "+10000000000"}


def write_yaml(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_from_environment_only(tmp_path):
    config = load_config(tmp_path / "missing.yaml", environ=REQUIRED_ENV)

    assert config.app_id == 12345
    assert config.response_message == DEFAULT_RESPONSE_MESSAGE
    assert config.response_timeout_hours == 24
    assert config.cooldown == timedelta(hours=24)
    assert config.log_level == "info"
    assert config.password is None
    assert config.log_file is None


def test_yaml_file_values(tmp_path):
    path = write_yaml(tmp_path, (
        "app_id: 777\n"
        "app_hash: fromfile\n"
        "phone: '+15550000'\n"
        "response_message: Gone fishing\n"
        "response_timeout_hours: 6\n"
        "log_level: DEBUG\n"
        "log_file: logs/daemon.log\n"
    ))

    config = load_config(path, environ={})

    assert config.app_id == 777
    assert config.response_message == "Gone fishing"
    assert config.cooldown == timedelta(hours=6)
    assert config.log_level == "debug"
    assert config.debug is True
    assert config.log_file == Path("logs/daemon.log")


def test_empty_log_file_means_no_log_file(tmp_path):
    path = write_yaml(tmp_path, 'log_file: ""\n')

    config = load_config(path, environ=REQUIRED_ENV)

    assert config.log_file is None


def test_environment_overrides_file(tmp_path):
    path = write_yaml(tmp_path, "app_id: 777\napp_hash: fromfile\nphone: '+1'\nresponse_timeout_hours: 6\n")

    config = load_config(path, environ={"APP_HASH": "fromenv", "RESPONSE_TIMEOUT_HOURS": "48"})

    assert config.app_id == 777
    assert config.app_hash == "fromenv"
    assert config.response_timeout_hours == 48


def test_empty_env_values_are_ignored():
    assert read_env({"APP_HASH": "", "PHONE": "+1"}) == {"phone": "+1"}


def test_invalid_numeric_env_value():
    with pytest.raises(ConfigError, match="Invalid APP_ID"):
        read_env({"APP_ID": "abc"})


@pytest.mark.parametrize("missing", ["APP_ID", "APP_HASH", "PHONE"])
def test_missing_required_field(tmp_path, missing):
    environ = {k: v for k, v in REQUIRED_ENV.items() if k != missing}
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.yaml", environ=environ)


def test_zero_app_id_rejected(tmp_path):
    with pytest.raises(ConfigError, match="app_id is required"):
        load_config(tmp_path / "missing.yaml", environ={**REQUIRED_ENV, "APP_ID": "0"})


def test_cooldown_must_be_at_least_one_hour(tmp_path):
    environ = {**REQUIRED_ENV, "RESPONSE_TIMEOUT_HOURS": "0"}
    with pytest.raises(ConfigError, match="response_timeout_hours must be at least 1"):
        load_config(tmp_path / "missing.yaml", environ=environ)


def test_unknown_log_level_rejected(tmp_path):
    with pytest.raises(ConfigError, match="log_level"):
        load_config(tmp_path / "missing.yaml", environ={**REQUIRED_ENV, "LOG_LEVEL": "verbose"})


def test_malformed_yaml(tmp_path):
    path = write_yaml(tmp_path, "app_id: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to read config file"):
        load_config(path, environ=REQUIRED_ENV)


def test_non_mapping_yaml(tmp_path):
    path = write_yaml(tmp_path, "- just\n- a list\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(path, environ=REQUIRED_ENV)


def test_unknown_keys_are_ignored(tmp_path):
    path = write_yaml(tmp_path, "enable_daemon_mode: true\n")
    config = load_config(path, environ=REQUIRED_ENV)
    assert not hasattr(config, "enable_daemon_mode")
