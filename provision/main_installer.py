# provision/main_installer.py
# -*- coding: utf-8 -*-
"""
Main entry point and orchestrator for the Zulip server installer.

Parses the command line, loads settings, and runs the installation steps in
order: preconditions, packages, certificates, configuration files, the
puppet run, feature detection, service activation and first-run setup.
Any step failure aborts the whole run.
"""

import datetime
import logging
import shlex
import subprocess
import sys
from dataclasses import dataclass
from typing import List, Optional

from common.command_utils import log_installer
from common.core_utils import setup_logging
from common.package_manager import PackageManager
from common.system_utils import (
    OsRelease,
    get_apt_policy,
    read_mem_total_kb,
    read_os_release,
)
from provision import config as static_config
from provision.activation import (
    activate_services,
    finish_installation,
    initialize_database_command,
)
from provision.certificates import (
    CertificateProvisioner,
    get_certificate_provisioner,
)
from provision.cli_handler import (
    parse_install_args,
    print_next_steps,
    print_usage,
)
from provision.config_emitter import (
    generate_secrets,
    materialize_settings,
    set_conf_value,
    write_zulip_conf,
)
from provision.config_loader import (
    build_install_config,
    load_installer_settings,
)
from provision.config_models import InstallConfig, InstallPaths
from provision.convergence import ConvergenceEngine, PuppetApply
from provision.errors import InstallerError, UsageError
from provision.features import DetectedFeatures, detect_features
from provision.packages import (
    create_virtualenvs,
    get_package_manager,
    install_prerequisites,
)
from provision.preconditions import (
    check_cacert,
    check_certificates,
    check_memory,
    check_supported_os,
    check_universe_enabled,
)

logger = logging.getLogger(__name__)


@dataclass
class Capabilities:
    """External tools the installer drives, chosen once per run."""

    package_manager: PackageManager
    certificate_provisioner: CertificateProvisioner
    convergence_engine: ConvergenceEngine


def select_capabilities(
    config: InstallConfig,
    paths: InstallPaths,
    os_release: OsRelease,
    current_logger: Optional[logging.Logger] = None,
) -> Capabilities:
    return Capabilities(
        package_manager=get_package_manager(
            os_release, config.settings, current_logger
        ),
        certificate_provisioner=get_certificate_provisioner(
            config, paths, current_logger
        ),
        convergence_engine=PuppetApply(current_logger),
    )


def check_preconditions(
    config: InstallConfig,
    paths: InstallPaths,
    os_release: OsRelease,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """Host checks that follow OS selection; the OS itself is checked first."""
    logger_to_use = current_logger if current_logger else logger
    if os_release.id == "ubuntu":
        check_universe_enabled(
            os_release, get_apt_policy(config.settings, logger_to_use)
        )
    check_memory(read_mem_total_kb(paths.meminfo))
    check_certificates(config, paths)
    check_cacert(config)


def write_configuration(
    config: InstallConfig,
    paths: InstallPaths,
    package_manager: PackageManager,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    logger_to_use = current_logger if current_logger else logger
    rabbitmq_status = package_manager.package_status(
        static_config.RABBITMQ_PACKAGE
    )
    write_zulip_conf(config, paths, rabbitmq_status, logger_to_use)
    materialize_settings(config, paths, logger_to_use)
    generate_secrets(config, logger_to_use)
    if config.options.postgres_missing_dictionaries:
        set_conf_value(
            paths.zulip_conf, "postgresql", "missing_dictionaries", "true"
        )


def run_install(
    config: InstallConfig,
    paths: InstallPaths,
    capabilities: Capabilities,
    os_release: OsRelease,
    now: Optional[datetime.datetime] = None,
    current_logger: Optional[logging.Logger] = None,
) -> int:
    """
    Runs every installation step after option parsing.

    Returns:
        int: 0 on success, including the early stop before database
        initialization. Failures are raised, not returned.
    """
    logger_to_use = current_logger if current_logger else logger
    symbols = config.symbols

    check_preconditions(config, paths, os_release, logger_to_use)
    install_prerequisites(config, capabilities.package_manager, logger_to_use)
    capabilities.certificate_provisioner.provision(config)
    create_virtualenvs(config, logger_to_use)
    write_configuration(
        config, paths, capabilities.package_manager, logger_to_use
    )
    capabilities.convergence_engine.converge(config)

    features: DetectedFeatures = detect_features(
        paths,
        config.settings.deployment_type,
        remote_postgres=config.options.remote_postgres,
    )
    log_installer(
        f"{symbols.get('info', 'ℹ️')} Detected services: "
        f"{', '.join(sorted(s.value for s in features.services)) or 'none'}",
        "info",
        logger_to_use,
        config.settings,
    )
    activate_services(config, paths, features, now, logger_to_use)

    if config.stops_before_init_db:
        reason = "--no-init-db" if config.options.no_init_db else "--remote-postgres"
        user = config.settings.service_user
        print_next_steps(
            reason,
            f"su {user} -c "
            + shlex.quote(
                shlex.join(initialize_database_command(paths, quiet=False))
            ),
        )
        return 0

    finish_installation(config, paths, logger_to_use)
    log_installer(
        f"{symbols.get('sparkles', '✨')} Installation complete.",
        "success",
        logger_to_use,
        config.settings,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    try:
        options = parse_install_args(argv)
        settings = load_installer_settings()
    except UsageError as e:
        print(f"error: {e}", file=sys.stderr)
        print_usage(sys.stderr)
        return e.exit_code
    except InstallerError as e:
        print(str(e), file=sys.stderr)
        return e.exit_code

    setup_logging(
        log_level=settings.log_level,
        log_file=str(settings.log_file) if settings.log_file else None,
        log_prefix=settings.log_prefix,
        symbols=settings.symbols,
    )
    config = build_install_config(options, settings)
    paths = settings.paths
    log_installer(
        f"{config.symbols.get('rocket', '🚀')} Zulip installer {static_config.SCRIPT_VERSION} starting.",
        "info",
        logger,
        settings,
    )

    try:
        os_release = read_os_release(paths.os_release, settings, logger)
        check_supported_os(os_release, config, logger)
        capabilities = select_capabilities(config, paths, os_release, logger)
        return run_install(config, paths, capabilities, os_release)
    except InstallerError as e:
        print(str(e), file=sys.stderr)
        return e.exit_code
    except subprocess.CalledProcessError as e:
        log_installer(
            f"{config.symbols.get('critical', '🔥')} Aborting: command failed with exit status {e.returncode}.",
            "critical",
            logger,
            settings,
        )
        return 1
    except (OSError, ValueError) as e:
        log_installer(
            f"{config.symbols.get('critical', '🔥')} Aborting: {e}",
            "critical",
            logger,
            settings,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
