from pathlib import Path

import pytest

from provision.config_loader import (
    CONFIG_FILE_ENV_VAR,
    _deep_update,
    build_install_config,
    load_installer_settings,
    resolve_config_path,
)
from provision.config_models import InstallOptions
from provision.errors import ConfigurationError


def test_deep_update_merges_nested_and_skips_none():
    source = {"a": 1, "nested": {"x": 1, "y": 2}}

    result = _deep_update(source, {"a": None, "nested": {"y": 3}, "b": 4})

    assert result == {"a": 1, "nested": {"x": 1, "y": 3}, "b": 4}


def test_resolve_config_path_precedence(monkeypatch, tmp_path):
    explicit = tmp_path / "explicit.yaml"
    monkeypatch.setenv(CONFIG_FILE_ENV_VAR, str(tmp_path / "env.yaml"))

    assert resolve_config_path(explicit) == explicit
    assert resolve_config_path() == tmp_path / "env.yaml"

    monkeypatch.delenv(CONFIG_FILE_ENV_VAR)
    monkeypatch.chdir(tmp_path)
    assert resolve_config_path() == tmp_path / "config.yaml"


def test_load_defaults_without_file(tmp_path):
    settings = load_installer_settings(tmp_path / "missing.yaml")

    assert settings.deployment_type == "voyager"
    assert settings.puppet_classes == "zulip::voyager"
    assert settings.virtualenv_needed is True
    assert settings.service_user == "zulip"
    assert settings.paths.zulip_conf == Path("/etc/zulip/zulip.conf")


def test_load_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("APT_OPTIONS", "-o Dpkg::Options::=--force-confdef")
    monkeypatch.setenv("ADDITIONAL_PACKAGES", "vim htop")
    monkeypatch.setenv("DEPLOYMENT_TYPE", "dockervoyager")
    monkeypatch.setenv("PUPPET_CLASSES", "zulip::dockervoyager")
    monkeypatch.setenv("VIRTUALENV_NEEDED", "no")
    monkeypatch.setenv("ZULIP_PATH", str(tmp_path))

    settings = load_installer_settings(tmp_path / "missing.yaml")

    assert settings.apt_options == "-o Dpkg::Options::=--force-confdef"
    assert settings.additional_packages == "vim htop"
    assert settings.deployment_type == "dockervoyager"
    assert settings.puppet_classes == "zulip::dockervoyager"
    assert settings.virtualenv_needed is False
    assert settings.zulip_path == tmp_path


def test_yaml_overrides_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DEPLOYMENT_TYPE", "from-env")
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "deployment_type: from-yaml\n"
        "paths:\n"
        "  conf_dir: /srv/zulip-conf\n",
        encoding="utf-8",
    )

    settings = load_installer_settings(config_file)

    assert settings.deployment_type == "from-yaml"
    assert settings.paths.conf_dir == Path("/srv/zulip-conf")
    assert settings.paths.zulip_conf == Path("/etc/zulip/zulip.conf")


def test_unparseable_yaml_is_ignored(tmp_path, mock_logger):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("deployment_type: [unclosed\n", encoding="utf-8")

    settings = load_installer_settings(config_file, mock_logger)

    assert settings.deployment_type == "voyager"
    mock_logger.warning.assert_called_once()


def test_non_mapping_yaml_is_ignored(tmp_path, mock_logger):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- a\n- b\n", encoding="utf-8")

    settings = load_installer_settings(config_file, mock_logger)

    assert settings.deployment_type == "voyager"
    mock_logger.warning.assert_called_once()


def test_invalid_yaml_value_raises(tmp_path, mock_logger):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("virtualenv_needed: sometimes\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_installer_settings(config_file, mock_logger)


def test_invalid_environment_raises(monkeypatch, tmp_path):
    monkeypatch.setenv("VIRTUALENV_NEEDED", "sometimes")

    with pytest.raises(ConfigurationError):
        load_installer_settings(tmp_path / "missing.yaml")


def test_build_install_config():
    options = InstallOptions(hostname="chat.example.org", no_init_db=True)
    settings = load_installer_settings("/nonexistent/config.yaml")

    config = build_install_config(options, settings)

    assert config.options is options
    assert config.stops_before_init_db is True
    assert config.puppet_class_list == ["zulip::voyager"]
    assert config.is_voyager is True


def test_relative_zulip_path_is_resolved(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ZULIP_PATH", ".")

    settings = load_installer_settings(tmp_path / "missing.yaml")

    assert settings.zulip_path == tmp_path.resolve()
    assert settings.zulip_path.is_absolute()


def test_log_file_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "install.log"))

    settings = load_installer_settings(tmp_path / "missing.yaml")

    assert settings.log_file == tmp_path / "install.log"
