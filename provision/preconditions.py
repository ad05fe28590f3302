# provision/preconditions.py
# -*- coding: utf-8 -*-
"""
Checks that the host can take a Zulip install before anything is changed.

Every check raises PreconditionError with operator-facing remediation text.
None of them mutate the system, so the installer can simply be rerun once
the problem is fixed.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

from common.command_utils import log_installer
from common.system_utils import OsRelease
from provision import config as static_config
from provision.config_models import (
    CertMode,
    InstallConfig,
    InstallPaths,
)
from provision.errors import PreconditionError

module_logger = logging.getLogger(__name__)

RED = "\033[0;31m"
RESET = "\033[0m"

RERUN_HINT = "Once fixed, just rerun scripts/setup/install; it'll pick up from here!"


def check_supported_os(
    os_release: OsRelease,
    config: Optional[InstallConfig] = None,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    if (os_release.id, os_release.version_id) in static_config.SUPPORTED_RELEASES:
        log_installer(
            f"Detected supported OS release: {os_release.label}",
            "info",
            current_logger or module_logger,
            config.settings if config else None,
        )
        return

    supported = "\n".join(
        f" - {name}" for name in static_config.SUPPORTED_RELEASES.values()
    )
    raise PreconditionError(
        f"""
Unsupported OS release: {os_release.label or 'unknown'}

Zulip in production is supported only on:
{supported}

For more information, see:
  {static_config.REQUIREMENTS_DOC_URL}

{RERUN_HINT}
"""
    )


def universe_enabled(os_release: OsRelease, policy_output: str) -> bool:
    """
    True if `apt-cache policy` lists the universe component for the running
    Ubuntu release.
    """
    codename = re.escape(os_release.version_codename)
    pattern = re.compile(
        rf"^\s*release\s.*\bo=Ubuntu,.*\bn={codename},.*\bc=universe\b",
        re.MULTILINE,
    )
    return bool(pattern.search(policy_output))


def check_universe_enabled(os_release: OsRelease, policy_output: str) -> None:
    if os_release.id != "ubuntu":
        return
    if universe_enabled(os_release, policy_output):
        return
    raise PreconditionError(
        f"""
You must enable the Ubuntu Universe repository before installing
Zulip.  You can do this with:

    sudo add-apt-repository universe
    sudo apt update

For more information, see:
  {static_config.REQUIREMENTS_DOC_URL}

{RERUN_HINT}
"""
    )


def check_memory(mem_kb: int) -> None:
    if mem_kb >= static_config.MIN_MEMORY_KB:
        return
    raise PreconditionError(
        f"{RED}\nInsufficient RAM.  Zulip requires at least 2GB of RAM "
        f"(found {mem_kb} kB).\n{RESET}"
        f"\n{RERUN_HINT}\n"
    )


def missing_certificate_files(
    config: InstallConfig, paths: InstallPaths
) -> List[Path]:
    """Required certificate files that are absent, or [] if none are required."""
    if not config.is_voyager or config.options.cert_mode != CertMode.NONE:
        return []
    return [
        path for path in (paths.ssl_key, paths.ssl_cert) if not path.exists()
    ]


def check_certificates(config: InstallConfig, paths: InstallPaths) -> None:
    missing = missing_certificate_files(config, paths)
    if not missing:
        return
    raise PreconditionError(
        f"""
No SSL certificate found.  One or both required files is missing:
    {paths.ssl_key}
    {paths.ssl_cert}

Suggested solutions:
 * For most sites, the --certbot option is recommended.
 * If you have your own key and cert, see docs linked below
   for how to install them.
 * For non-production testing, try the --self-signed-cert option.

For help and more details, see our SSL documentation:
  {static_config.SSL_DOC_URL}

{RERUN_HINT}
"""
    )


def check_cacert(config: InstallConfig) -> None:
    cacert = config.options.cacert
    if cacert is None or cacert.is_file():
        return
    raise PreconditionError(
        f"""
CA certificate bundle not found: {cacert}

Pass an existing file to --cacert, or omit the option.

{RERUN_HINT}
"""
    )
