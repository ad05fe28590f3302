# common/package_manager.py
# -*- coding: utf-8 -*-
"""
Interface shared by the OS-family package managers.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from provision.config_models import InstallerSettings

NOT_INSTALLED_STATUS: str = "not-installed"


def is_installed_status(status: Optional[str]) -> bool:
    """
    Interprets a package status string.

    Only a status ending in "not-installed" means the package is absent;
    an empty status and every other state (half-installed, config-files,
    ...) count as installed.
    """
    return not (status or "").strip().endswith(NOT_INSTALLED_STATUS)


class PackageManager(ABC):
    """Installs packages and reports their status for one OS family."""

    family: str = ""

    def __init__(
        self,
        settings: InstallerSettings,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    def upgrade(self, options: List[str]) -> None:
        """Brings installed packages up to date. Raises on failure."""

    @abstractmethod
    def install(self, packages: List[str], options: List[str]) -> bool:
        """Installs packages. Returns False on failure."""

    @abstractmethod
    def package_status(self, package_name: str) -> str:
        """Returns the raw status of a package; never raises for absence."""

    def is_installed(self, package_name: str) -> bool:
        return is_installed_status(self.package_status(package_name))
