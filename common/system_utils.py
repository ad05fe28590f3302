# common/system_utils.py
# -*- coding: utf-8 -*-
"""
System-level utility functions for the installer.

This module reads host facts: the OS release, total memory and the apt
repository policy.
"""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict

from common.command_utils import log_installer, run_command
from provision.config_models import SYMBOLS_DEFAULT, InstallerSettings

module_logger = logging.getLogger(__name__)


class OsRelease(BaseModel):
    """The identifying fields of /etc/os-release."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    id_like: str = ""
    version_id: str = ""
    version_codename: str = ""

    @property
    def label(self) -> str:
        return f"{self.id} {self.version_id}".strip()


def parse_os_release(content: str) -> Dict[str, str]:
    """
    Parses the shell-style KEY=value lines of an os-release file.

    Quoted values are unquoted; comments and malformed lines are skipped.
    """
    values: Dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, raw_value = line.partition("=")
        try:
            parts = shlex.split(raw_value)
        except ValueError:
            continue
        values[key.strip()] = parts[0] if parts else ""
    return values


def read_os_release(
    os_release_path: Path,
    settings: Optional[InstallerSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> OsRelease:
    """
    Reads the OS identity. A missing file yields an empty OsRelease, which
    no supported-release check will accept.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = settings.symbols if settings else SYMBOLS_DEFAULT
    try:
        content = Path(os_release_path).read_text(encoding="utf-8")
    except FileNotFoundError:
        log_installer(
            f"{symbols.get('warning', '!')} {os_release_path} not found; cannot identify the OS.",
            "warning",
            logger_to_use,
            settings,
        )
        return OsRelease()

    values = parse_os_release(content)
    return OsRelease(
        id=values.get("ID", ""),
        id_like=values.get("ID_LIKE", ""),
        version_id=values.get("VERSION_ID", ""),
        version_codename=values.get("VERSION_CODENAME", ""),
    )


def read_mem_total_kb(meminfo_path: Path) -> int:
    """
    Returns MemTotal from a /proc/meminfo style file, in kB.

    Raises:
        ValueError: If no MemTotal line can be parsed.
    """
    content = Path(meminfo_path).read_text(encoding="utf-8")
    for line in content.splitlines():
        if line.startswith("MemTotal:"):
            fields = line.split()
            if len(fields) >= 2 and fields[1].isdigit():
                return int(fields[1])
    raise ValueError(f"Could not find MemTotal in {meminfo_path}")


def get_apt_policy(
    settings: Optional[InstallerSettings],
    current_logger: Optional[logging.Logger] = None,
) -> str:
    """
    Returns the output of `apt-cache policy`, or an empty string when it
    cannot be run. The caller decides what a missing component means.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = settings.symbols if settings else SYMBOLS_DEFAULT
    try:
        result: subprocess.CompletedProcess = run_command(
            ["apt-cache", "policy"],
            settings,
            check=False,
            capture_output=True,
            current_logger=logger_to_use,
        )
    except FileNotFoundError:
        log_installer(
            f"{symbols.get('warning', '!')} apt-cache command not found. Cannot read repository policy.",
            "warning",
            logger_to_use,
            settings,
        )
        return ""
    return result.stdout or ""
