# common/rhel/yum_manager.py
# -*- coding: utf-8 -*-
import logging
import subprocess
from typing import List, Optional

from common.command_utils import command_exists, run_command
from common.package_manager import NOT_INSTALLED_STATUS, PackageManager
from provision.config_models import InstallerSettings


class YumManager(PackageManager):
    """
    Package manager for CentOS and RHEL hosts. `yum install` already pulls
    in updates, so there is no separate upgrade step.
    """

    family = "rhel"

    def __init__(
        self,
        settings: InstallerSettings,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(settings, logger)
        if not command_exists("yum"):
            self.logger.critical(
                "'yum' command not found. This manager cannot function."
            )
            raise FileNotFoundError(
                "'yum' not found. Is this a RHEL-based system?"
            )

    def upgrade(self, options: List[str]) -> None:
        self.logger.info(
            "Skipping separate upgrade; 'yum install' updates as it goes."
        )

    def install(self, packages: List[str], options: List[str]) -> bool:
        self.logger.info(f"Installing packages: {', '.join(packages)}")
        try:
            run_command(
                ["yum", "install", "-y"] + list(options) + list(packages),
                self.settings,
                current_logger=self.logger,
            )
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            self.logger.error(f"Failed to install packages: {e}")
            return False
        self.logger.info("Packages installed successfully.")
        return True

    def package_status(self, package_name: str) -> str:
        """Maps `rpm -q` onto dpkg-style "installed" / "not-installed"."""
        result = run_command(
            ["rpm", "-q", package_name],
            self.settings,
            check=False,
            capture_output=True,
            current_logger=self.logger,
        )
        if result.returncode != 0:
            return f"unknown ok {NOT_INSTALLED_STATUS}"
        return "install ok installed"
