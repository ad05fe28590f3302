# common/debian/apt_manager.py
# -*- coding: utf-8 -*-
import logging
import subprocess
from typing import List, Optional

from common.command_utils import command_exists, run_command
from common.package_manager import PackageManager
from provision.config_models import InstallerSettings


class AptManager(PackageManager):
    """
    Package manager for Debian and Ubuntu hosts, driven through apt-get and
    dpkg-query.
    """

    family = "debian"

    def __init__(
        self,
        settings: InstallerSettings,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initializes the AptManager.
        Args:
            settings: The installer settings.
            logger: An optional logging object.
        """
        super().__init__(settings, logger)
        if not command_exists("apt-get"):
            self.logger.critical(
                "'apt-get' command not found. This manager cannot function."
            )
            raise FileNotFoundError(
                "'apt-get' not found. Is this a Debian-based system?"
            )

    def update(self) -> None:
        """Refreshes the package lists via 'apt-get update'."""
        self.logger.info("Updating apt package lists via 'apt-get update'...")
        run_command(
            ["apt-get", "update"],
            self.settings,
            current_logger=self.logger,
        )

    def upgrade(self, options: List[str]) -> None:
        """
        Runs 'apt-get update' then a full 'apt-get dist-upgrade'.

        Args:
            options: Extra apt-get options.

        Raises:
            subprocess.CalledProcessError: If either command fails.
        """
        self.update()
        self.logger.info("Upgrading the distribution via 'apt-get dist-upgrade'...")
        run_command(
            ["apt-get", "-y", "dist-upgrade"] + list(options),
            self.settings,
            current_logger=self.logger,
        )
        self.logger.info("Distribution upgrade completed.")

    def install(self, packages: List[str], options: List[str]) -> bool:
        """
        Installs packages using 'apt-get install -y'.

        Args:
            packages: Package names.
            options: Extra apt-get options.

        Returns:
            True if successful, False otherwise.
        """
        self.logger.info(f"Installing packages: {', '.join(packages)}")
        try:
            run_command(
                ["apt-get", "install", "-y"] + list(options) + list(packages),
                self.settings,
                current_logger=self.logger,
            )
        except (subprocess.CalledProcessError, FileNotFoundError) as e:
            self.logger.error(f"Failed to install packages: {e}")
            return False
        self.logger.info("Packages installed successfully.")
        return True

    def package_status(self, package_name: str) -> str:
        """
        Returns dpkg's status line for a package, e.g. "install ok installed"
        or "unknown ok not-installed". Returns an empty string when dpkg has
        no record of the package.
        """
        result = run_command(
            ["dpkg-query", "--showformat", "${Status}", "-W", package_name],
            self.settings,
            check=False,
            capture_output=True,
            current_logger=self.logger,
        )
        if result.returncode != 0:
            return ""
        return (result.stdout or "").strip()
