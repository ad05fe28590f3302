# provision/activation.py
# -*- coding: utf-8 -*-
"""
Brings each detected service up after the convergence run and performs the
first-run setup of the application server deployment.
"""

import datetime
import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from common.command_utils import log_installer, run_as_user, run_command
from common.file_utils import copy_tree_contents, force_symlink
from provision import config as static_config
from provision.config_models import InstallConfig, InstallPaths
from provision.errors import ExternalToolError
from provision.features import DetectedFeatures

module_logger = logging.getLogger(__name__)

NGINX_CONFIG_FAILED = f"""
Verifying the Zulip nginx configuration failed!

This is almost always a problem with your SSL certificates.  See:
  {static_config.SSL_DOC_URL}

Once fixed, just rerun scripts/setup/install; it'll pick up from here!
"""

RABBITMQ_NOT_RUNNING = f"""
RabbitMQ seems to not have started properly after the installation process.
Often, this can be caused by misconfigured /etc/hosts in virtualized environments.
For more information, see:
  {static_config.RABBITMQ_HOSTS_ISSUE_URL}
"""


def activate_nginx(
    config: InstallConfig, current_logger: Optional[logging.Logger] = None
) -> None:
    """
    Checks the nginx configuration and restarts nginx.

    Raises:
        ExternalToolError: If `nginx -t` rejects the configuration.
    """
    logger_to_use = current_logger if current_logger else module_logger
    result = run_command(
        ["nginx", "-t"],
        config.settings,
        check=False,
        capture_output=True,
        current_logger=logger_to_use,
    )
    if result.returncode != 0:
        if result.stderr:
            log_installer(
                result.stderr.strip(), "error", logger_to_use, config.settings
            )
        raise ExternalToolError(NGINX_CONFIG_FAILED)
    run_command(
        ["service", "nginx", "restart"],
        config.settings,
        current_logger=logger_to_use,
    )


def activate_rabbitmq(
    config: InstallConfig, current_logger: Optional[logging.Logger] = None
) -> None:
    """
    Confirms RabbitMQ is running, then configures its users and vhost.

    Raises:
        ExternalToolError: If `rabbitmqctl status` fails.
    """
    logger_to_use = current_logger if current_logger else module_logger
    result = run_command(
        ["rabbitmqctl", "status"],
        config.settings,
        check=False,
        capture_output=True,
        current_logger=logger_to_use,
    )
    if result.returncode != 0:
        raise ExternalToolError(RABBITMQ_NOT_RUNNING)
    run_command(
        [str(config.zulip_path / static_config.CONFIGURE_RABBITMQ)],
        config.settings,
        current_logger=logger_to_use,
    )


def initialize_postgres(
    config: InstallConfig, current_logger: Optional[logging.Logger] = None
) -> bool:
    """
    Creates the local database cluster and role.

    Returns:
        False if skipped because the operator asked to handle the database.
    """
    logger_to_use = current_logger if current_logger else module_logger
    if config.stops_before_init_db:
        log_installer(
            "Skipping database initialization; it is left to the operator.",
            "info",
            logger_to_use,
            config.settings,
        )
        return False
    run_command(
        [str(config.zulip_path / static_config.POSTGRES_INIT_DB)],
        config.settings,
        current_logger=logger_to_use,
    )
    return True


def make_deploy_path(
    deployments_dir: Path, now: Optional[datetime.datetime] = None
) -> Path:
    """Timestamped directory for a new deployment, e.g. 2020-04-01-12-00-00."""
    now = now or datetime.datetime.now()
    return Path(deployments_dir) / now.strftime(static_config.DEPLOY_PATH_FORMAT)


def activate_appserver(
    config: InstallConfig,
    paths: InstallPaths,
    now: Optional[datetime.datetime] = None,
    current_logger: Optional[logging.Logger] = None,
) -> Path:
    """
    Turns the unpacked tree into the current deployment.

    The tree is moved into a new timestamped deployment directory; its old
    location becomes a link to `deployments/next`, and both `next` and
    `current` point at the new deployment.

    Returns:
        Path: The new deployment directory.
    """
    logger_to_use = current_logger if current_logger else module_logger
    settings = config.settings
    symbols = config.symbols
    user = settings.service_user

    deploy_path = make_deploy_path(paths.deployments_dir, now)
    next_link = paths.deployments_dir / "next"
    current_link = paths.deployments_dir / "current"

    log_installer(
        f"{symbols.get('rocket', '🚀')} Deploying {config.zulip_path} to {deploy_path}",
        "info",
        logger_to_use,
        settings,
    )
    paths.deployments_dir.mkdir(parents=True, exist_ok=True)
    shutil.move(str(config.zulip_path), str(deploy_path))
    force_symlink(next_link, config.zulip_path, settings, logger_to_use)
    force_symlink(deploy_path, next_link, settings, logger_to_use)
    force_symlink(deploy_path, current_link, settings, logger_to_use)
    force_symlink(
        paths.settings_file,
        deploy_path / static_config.SETTINGS_LINK,
        settings,
        logger_to_use,
    )

    serve_dir = deploy_path / static_config.PROD_STATIC_SERVE
    serve_dir.mkdir(parents=True, exist_ok=True)
    copy_tree_contents(serve_dir, paths.prod_static_dir, settings, logger_to_use)

    run_command(
        [
            "chown",
            "-R",
            f"{user}:{user}",
            str(paths.service_home),
            str(paths.log_dir),
            str(paths.settings_file),
        ],
        settings,
        current_logger=logger_to_use,
    )

    if not (paths.prod_static_dir / static_config.GENERATED_STATIC_MARKER).exists():
        # A git checkout rather than a release tarball; build the assets.
        run_as_user(
            user,
            [
                str(current_link / static_config.UPDATE_PROD_STATIC),
                "--authors-not-required",
            ],
            settings,
            current_logger=logger_to_use,
        )
    return deploy_path


def fix_supervisor_socket(
    config: InstallConfig,
    paths: InstallPaths,
    current_logger: Optional[logging.Logger] = None,
) -> bool:
    if not paths.supervisor_socket.exists():
        return False
    user = config.settings.service_user
    run_command(
        ["chown", f"{user}:{user}", str(paths.supervisor_socket)],
        config.settings,
        current_logger=current_logger or module_logger,
    )
    return True


def activate_services(
    config: InstallConfig,
    paths: InstallPaths,
    features: DetectedFeatures,
    now: Optional[datetime.datetime] = None,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """Runs the activation step for every detected service, in a fixed order."""
    logger_to_use = current_logger if current_logger else module_logger
    if features.has_nginx:
        activate_nginx(config, logger_to_use)
    if features.has_rabbitmq:
        activate_rabbitmq(config, logger_to_use)
    if features.has_postgresql:
        initialize_postgres(config, logger_to_use)
    if features.has_appserver:
        activate_appserver(config, paths, now, logger_to_use)
    fix_supervisor_socket(config, paths, logger_to_use)


def initialize_database_command(
    paths: InstallPaths, quiet: bool = True
) -> List[str]:
    command = [
        str(paths.deployments_dir / "current" / static_config.INITIALIZE_DATABASE)
    ]
    if quiet:
        command.append("--quiet")
    return command


def finish_installation(
    config: InstallConfig,
    paths: InstallPaths,
    current_logger: Optional[logging.Logger] = None,
) -> subprocess.CompletedProcess:
    """Initializes the database and prints the realm creation link."""
    logger_to_use = current_logger if current_logger else module_logger
    user = config.settings.service_user
    run_as_user(
        user,
        initialize_database_command(paths),
        config.settings,
        current_logger=logger_to_use,
    )
    return run_as_user(
        user,
        [
            str(paths.deployments_dir / "current" / static_config.MANAGE_PY),
            "generate_realm_creation_link",
        ],
        config.settings,
        current_logger=logger_to_use,
    )
