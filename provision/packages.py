# provision/packages.py
# -*- coding: utf-8 -*-
"""
Installs the OS packages the installer needs and prepares the production
virtualenv.
"""

import logging
import os
from typing import Dict, List, Optional

from common.command_utils import log_installer, run_command
from common.debian.apt_manager import AptManager
from common.package_manager import PackageManager
from common.rhel.yum_manager import YumManager
from common.system_utils import OsRelease
from provision import config as static_config
from provision.config_models import InstallConfig, InstallerSettings
from provision.errors import ConfigurationError, ExternalToolError

module_logger = logging.getLogger(__name__)


def get_package_manager(
    os_release: OsRelease,
    settings: InstallerSettings,
    current_logger: Optional[logging.Logger] = None,
) -> PackageManager:
    """Selects the package manager for the detected OS family."""
    if os_release.id in static_config.DEBIAN_FAMILY:
        return AptManager(settings, logger=current_logger)
    if os_release.id in static_config.RHEL_FAMILY:
        return YumManager(settings, logger=current_logger)
    raise ConfigurationError(
        f"No package manager known for OS '{os_release.id or 'unknown'}'."
    )


def prerequisite_packages(config: InstallConfig) -> List[str]:
    return list(static_config.BASE_PACKAGES) + config.additional_package_list


def install_prerequisites(
    config: InstallConfig,
    package_manager: PackageManager,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Upgrades (Debian family, unless --no-dist-upgrade) and installs the
    prerequisite packages.

    Raises:
        subprocess.CalledProcessError: If the upgrade fails.
        ExternalToolError: If the install fails.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = config.symbols
    options = (
        config.apt_option_list if package_manager.family == "debian" else []
    )

    if config.options.no_dist_upgrade:
        log_installer(
            f"{symbols.get('info', 'ℹ️')} Skipping distribution upgrade (--no-dist-upgrade).",
            "info",
            logger_to_use,
            config.settings,
        )
    else:
        package_manager.upgrade(options)

    packages = prerequisite_packages(config)
    log_installer(
        f"{symbols.get('package', '📦')} Installing prerequisites: {' '.join(packages)}",
        "info",
        logger_to_use,
        config.settings,
    )
    if not package_manager.install(packages, options):
        hint = "is network working"
        if package_manager.family == "debian":
            hint += " and (on Ubuntu) the universe repository enabled"
        raise ExternalToolError(f"\nInstalling packages failed; {hint}?\n")
    log_installer(
        f"{symbols.get('success', '✅')} Prerequisite packages installed.",
        "success",
        logger_to_use,
        config.settings,
    )


def helper_env(config: InstallConfig) -> Dict[str, str]:
    """Environment for delegated helpers; carries --cacert through."""
    env = dict(os.environ)
    if config.options.cacert is not None:
        env["CUSTOM_CA_CERTIFICATES"] = str(config.options.cacert)
    return env


def create_virtualenvs(
    config: InstallConfig,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Creates the production virtualenv when VIRTUALENV_NEEDED is set.

    Returns:
        True if the helper ran, False if it was not needed.
    """
    logger_to_use = current_logger if current_logger else module_logger
    if not config.settings.virtualenv_needed:
        log_installer(
            "Virtualenv not needed for this deployment; skipping.",
            "info",
            logger_to_use,
            config.settings,
        )
        return False
    run_command(
        [
            str(config.zulip_path / static_config.CREATE_PRODUCTION_VENV),
            str(config.zulip_path),
        ],
        config.settings,
        current_logger=logger_to_use,
        env=helper_env(config),
    )
    return True
