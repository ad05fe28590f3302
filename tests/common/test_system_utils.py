import subprocess
from unittest.mock import MagicMock

import pytest

from common.system_utils import (
    OsRelease,
    get_apt_policy,
    parse_os_release,
    read_mem_total_kb,
    read_os_release,
)
from provision.config_models import InstallerSettings

UBUNTU_FOCAL = """\
NAME="Ubuntu"
VERSION="20.04.6 LTS (Focal Fossa)"
ID=ubuntu
ID_LIKE=debian
VERSION_ID="20.04"
VERSION_CODENAME=focal
# trailing comment
"""


def test_parse_os_release_unquotes_values():
    values = parse_os_release(UBUNTU_FOCAL)

    assert values["ID"] == "ubuntu"
    assert values["VERSION_ID"] == "20.04"
    assert values["NAME"] == "Ubuntu"
    assert "# trailing comment" not in values


def test_read_os_release(tmp_path):
    os_release = tmp_path / "os-release"
    os_release.write_text(UBUNTU_FOCAL, encoding="utf-8")

    release = read_os_release(os_release)

    assert release == OsRelease(
        id="ubuntu",
        id_like="debian",
        version_id="20.04",
        version_codename="focal",
    )
    assert release.label == "ubuntu 20.04"


def test_read_os_release_missing_file(tmp_path, mock_logger):
    release = read_os_release(tmp_path / "absent", current_logger=mock_logger)

    assert release == OsRelease()
    mock_logger.warning.assert_called_once()


def test_read_mem_total_kb(tmp_path):
    meminfo = tmp_path / "meminfo"
    meminfo.write_text(
        "MemTotal:        2040920 kB\nMemFree:          140380 kB\n",
        encoding="utf-8",
    )

    assert read_mem_total_kb(meminfo) == 2040920


def test_read_mem_total_kb_without_total(tmp_path):
    meminfo = tmp_path / "meminfo"
    meminfo.write_text("MemFree: 1 kB\n", encoding="utf-8")

    with pytest.raises(ValueError):
        read_mem_total_kb(meminfo)


def test_get_apt_policy_returns_stdout(mocker):
    settings = InstallerSettings()
    mock_run = mocker.patch(
        "common.system_utils.run_command",
        return_value=MagicMock(returncode=0, stdout="policy output"),
    )

    assert get_apt_policy(settings) == "policy output"
    mock_run.assert_called_once_with(
        ["apt-cache", "policy"],
        settings,
        check=False,
        capture_output=True,
        current_logger=mocker.ANY,
    )


def test_get_apt_policy_without_apt_cache(mocker, mock_logger):
    mocker.patch(
        "common.system_utils.run_command",
        side_effect=FileNotFoundError(2, "No such file", "apt-cache"),
    )

    assert get_apt_policy(None, mock_logger) == ""
    mock_logger.warning.assert_called_once()


def test_get_apt_policy_handles_missing_stdout(mocker):
    mocker.patch(
        "common.system_utils.run_command",
        return_value=subprocess.CompletedProcess(["apt-cache"], 100, stdout=None),
    )

    assert get_apt_policy(None) == ""
