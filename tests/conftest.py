# tests/conftest.py
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from provision.config_models import (
    CertMode,
    InstallConfig,
    InstallerSettings,
    InstallOptions,
    InstallPaths,
)

INSTALLER_ENV_VARS = (
    "APT_OPTIONS",
    "ADDITIONAL_PACKAGES",
    "DEPLOYMENT_TYPE",
    "PUPPET_CLASSES",
    "VIRTUALENV_NEEDED",
    "ZULIP_PATH",
    "SERVICE_USER",
    "LOG_LEVEL",
    "LOG_PREFIX",
    "LOG_FILE",
    "PATHS",
    "SYMBOLS",
    "ZULIP_INSTALL_CONFIG",
)


@pytest.fixture(autouse=True)
def clean_installer_env(monkeypatch):
    """Keep the developer's environment out of InstallerSettings."""
    for name in INSTALLER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_logger():
    return MagicMock(spec=logging.Logger)


@pytest.fixture
def paths(tmp_path: Path) -> InstallPaths:
    return InstallPaths.rooted_at(tmp_path / "root")


@pytest.fixture
def zulip_tree(tmp_path: Path) -> Path:
    """A minimal unpacked Zulip tree."""
    tree = tmp_path / "zulip-server"
    (tree / "zproject").mkdir(parents=True)
    (tree / "zproject" / "prod_settings_template.py").write_text(
        "# Zulip settings\n"
        "EXTERNAL_HOST = 'zulip.example.com'\n"
        "ZULIP_ADMINISTRATOR = 'zulip-admin@example.com'\n"
        "ALLOWED_HOSTS = []\n",
        encoding="utf-8",
    )
    (tree / "prod-static" / "serve").mkdir(parents=True)
    (tree / "prod-static" / "serve" / "app.js").write_text("//", encoding="utf-8")
    return tree


@pytest.fixture
def make_config(paths: InstallPaths, zulip_tree: Path):
    """Builds an InstallConfig; keyword arguments override InstallOptions fields."""

    def _make_config(settings_overrides=None, **option_overrides) -> InstallConfig:
        option_values = {
            "hostname": "chat.example.org",
            "email": "admin@example.org",
            "cert_mode": CertMode.NONE,
        }
        option_values.update(option_overrides)
        settings_values = {"zulip_path": zulip_tree, "paths": paths}
        settings_values.update(settings_overrides or {})
        return InstallConfig(
            options=InstallOptions(**option_values),
            settings=InstallerSettings(**settings_values),
        )

    return _make_config
