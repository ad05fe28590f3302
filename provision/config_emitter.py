# provision/config_emitter.py
# -*- coding: utf-8 -*-
"""
Writes the machine configuration (/etc/zulip/zulip.conf), the settings file
and the secrets.

zulip.conf is an INI file read by puppet and by the server's own scripts:

    [machine]
    puppet_classes = zulip::voyager
    deploy_type = voyager

    [rabbitmq]
    nodename = zulip@localhost

    [certbot]
    auto_renew = yes
"""

import configparser
import io
import logging
import shutil
from pathlib import Path
from typing import Dict, Optional

from common.command_utils import log_installer, run_command
from common.file_utils import force_symlink, rewrite_assignments
from common.package_manager import is_installed_status
from provision import config as static_config
from provision.config_models import CertMode, InstallConfig, InstallPaths

module_logger = logging.getLogger(__name__)


def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(interpolation=None)
    # Keep key case as written.
    parser.optionxform = str
    return parser


def render_zulip_conf(config: InstallConfig, rabbitmq_status: str) -> str:
    """
    Renders zulip.conf.

    Args:
        config: The run's configuration.
        rabbitmq_status: Raw package status of the message broker; see
            is_installed_status for how it is read.
    """
    parser = _new_parser()
    parser["machine"] = {
        "puppet_classes": config.settings.puppet_classes,
        "deploy_type": config.settings.deployment_type,
    }
    if is_installed_status(rabbitmq_status):
        parser["rabbitmq"] = {"nodename": static_config.RABBITMQ_NODENAME}
    if config.options.cert_mode == CertMode.CERTBOT:
        parser["certbot"] = {"auto_renew": "yes"}

    buffer = io.StringIO()
    parser.write(buffer)
    return buffer.getvalue()


def write_zulip_conf(
    config: InstallConfig,
    paths: InstallPaths,
    rabbitmq_status: str,
    current_logger: Optional[logging.Logger] = None,
) -> Path:
    logger_to_use = current_logger if current_logger else module_logger
    paths.conf_dir.mkdir(parents=True, exist_ok=True)
    paths.zulip_conf.write_text(
        render_zulip_conf(config, rabbitmq_status), encoding="utf-8"
    )
    log_installer(
        f"{config.symbols.get('success', '✅')} Wrote {paths.zulip_conf}",
        "success",
        logger_to_use,
        config.settings,
    )
    return paths.zulip_conf


def set_conf_value(
    conf_path: Path, section: str, key: str, value: str
) -> None:
    """Sets one key in an INI file, creating the section if needed (crudini --set)."""
    parser = _new_parser()
    parser.read(conf_path, encoding="utf-8")
    if not parser.has_section(section):
        parser.add_section(section)
    parser.set(section, key, value)
    with open(conf_path, "w", encoding="utf-8") as f:
        parser.write(f)


def materialize_settings(
    config: InstallConfig,
    paths: InstallPaths,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    """
    Installs /etc/zulip/settings.py from the template for app-frontend
    deployments, filling in the hostname and administrator email that were
    given on the command line. An existing file is kept when
    --no-overwrite-settings is set.

    Returns:
        True if the settings file was (re)written from the template.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = config.symbols
    if not config.wants_app_frontend:
        return False

    written = False
    if config.options.no_overwrite_settings and paths.settings_file.exists():
        log_installer(
            f"{symbols.get('info', 'ℹ️')} Keeping existing {paths.settings_file} (--no-overwrite-settings).",
            "info",
            logger_to_use,
            config.settings,
        )
    else:
        paths.conf_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(
            config.zulip_path / static_config.SETTINGS_TEMPLATE,
            paths.settings_file,
        )
        assignments: Dict[str, str] = {}
        if config.options.hostname:
            assignments["EXTERNAL_HOST"] = config.options.hostname
        if config.options.email:
            assignments["ZULIP_ADMINISTRATOR"] = config.options.email
        rewrite_assignments(
            paths.settings_file, assignments, config.settings, logger_to_use
        )
        written = True

    force_symlink(
        paths.settings_file,
        config.zulip_path / static_config.SETTINGS_LINK,
        config.settings,
        logger_to_use,
    )
    return written


def generate_secrets(
    config: InstallConfig,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    run_command(
        [str(config.zulip_path / static_config.GENERATE_SECRETS), "--production"],
        config.settings,
        current_logger=current_logger or module_logger,
    )
