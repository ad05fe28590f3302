import subprocess
from unittest.mock import MagicMock, patch

import pytest

from common.debian.apt_manager import AptManager
from common.package_manager import is_installed_status
from common.rhel.yum_manager import YumManager
from provision.config_models import InstallerSettings


@pytest.mark.parametrize(
    "status, expected",
    [
        ("install ok installed", True),
        ("deinstall ok config-files", True),
        ("", True),
        (None, True),
        ("unknown ok not-installed", False),
        ("unknown ok not-installed\n", False),
    ],
)
def test_is_installed_status(status, expected):
    assert is_installed_status(status) is expected


@pytest.fixture
def apt_manager():
    """Fixture to initialize AptManager with mocked dependencies."""
    mock_logger = MagicMock()
    settings = InstallerSettings()
    with (
        patch("common.debian.apt_manager.run_command") as mock_run_cmd,
        patch("common.debian.apt_manager.command_exists", return_value=True),
    ):
        manager = AptManager(settings, logger=mock_logger)
        yield manager, mock_logger, mock_run_cmd, settings


def test_apt_manager_requires_apt_get():
    with patch("common.debian.apt_manager.command_exists", return_value=False):
        with pytest.raises(FileNotFoundError):
            AptManager(InstallerSettings(), logger=MagicMock())


def test_apt_upgrade_updates_first(apt_manager):
    manager, logger, mock_run_cmd, settings = apt_manager

    manager.upgrade(["--no-install-recommends"])

    assert [c.args[0] for c in mock_run_cmd.call_args_list] == [
        ["apt-get", "update"],
        ["apt-get", "-y", "dist-upgrade", "--no-install-recommends"],
    ]


def test_apt_install_passes_options_before_packages(apt_manager):
    manager, logger, mock_run_cmd, settings = apt_manager

    assert manager.install(["puppet", "git"], ["-o", "Foo=1"]) is True

    mock_run_cmd.assert_called_once_with(
        ["apt-get", "install", "-y", "-o", "Foo=1", "puppet", "git"],
        settings,
        current_logger=logger,
    )


def test_apt_install_failure_returns_false(apt_manager):
    manager, logger, mock_run_cmd, _ = apt_manager
    mock_run_cmd.side_effect = subprocess.CalledProcessError(100, "apt-get")

    assert manager.install(["puppet"], []) is False
    logger.error.assert_called_once()


def test_apt_package_status(apt_manager):
    manager, _, mock_run_cmd, _ = apt_manager
    mock_run_cmd.return_value = MagicMock(
        returncode=0, stdout="install ok installed"
    )

    assert manager.package_status("rabbitmq-server") == "install ok installed"
    assert manager.is_installed("rabbitmq-server") is True


def test_apt_package_status_unknown_package(apt_manager):
    """dpkg-query exits non-zero for packages it has never seen."""
    manager, _, mock_run_cmd, _ = apt_manager
    mock_run_cmd.return_value = MagicMock(returncode=1, stdout="")

    assert manager.package_status("rabbitmq-server") == ""


@pytest.fixture
def yum_manager():
    mock_logger = MagicMock()
    settings = InstallerSettings()
    with (
        patch("common.rhel.yum_manager.run_command") as mock_run_cmd,
        patch("common.rhel.yum_manager.command_exists", return_value=True),
    ):
        yield YumManager(settings, logger=mock_logger), mock_run_cmd


def test_yum_upgrade_is_noop(yum_manager):
    manager, mock_run_cmd = yum_manager

    manager.upgrade([])

    mock_run_cmd.assert_not_called()


def test_yum_package_status(yum_manager):
    manager, mock_run_cmd = yum_manager
    mock_run_cmd.return_value = MagicMock(returncode=1)

    assert manager.is_installed("rabbitmq-server") is False

    mock_run_cmd.return_value = MagicMock(returncode=0)
    assert manager.is_installed("rabbitmq-server") is True
