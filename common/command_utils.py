# common/command_utils.py
# -*- coding: utf-8 -*-
"""
Utilities for executing shell commands and logging their output.
"""

import logging
import shlex
import shutil
import subprocess
from typing import Dict, List, Optional, Union

from provision.config_models import SYMBOLS_DEFAULT, InstallerSettings

module_logger = logging.getLogger(__name__)


def log_installer(
    message: str,
    level: str = "info",
    current_logger: Optional[logging.Logger] = None,
    settings: Optional[InstallerSettings] = None,
    exc_info: bool = False,
) -> None:
    """
    Logs a message at the requested level.

    Args:
        message (str): The log message to be recorded.
        level (str): The severity level of the log message. Defaults to "info". Common options
            include "debug", "info", "warning", "error", "critical" and "success"
            (which is logged at info level).
        current_logger (Optional[logging.Logger]): A logger instance to use for logging. If not provided,
            a module-level logger will be used.
        settings (Optional[InstallerSettings]): Optional installer settings that can influence logging behavior.
        exc_info (bool): Indicator to include exception details in the log. By default, this is set to False.
    """
    effective_logger = current_logger if current_logger else module_logger

    if level == "warning":
        effective_logger.warning(message, exc_info=exc_info)
    elif level == "error":
        effective_logger.error(message, exc_info=exc_info)
    elif level == "critical":
        effective_logger.critical(message, exc_info=exc_info)
    elif level == "debug":
        effective_logger.debug(message, exc_info=exc_info)
    else:
        effective_logger.info(message, exc_info=exc_info)


def _symbols(settings: Optional[InstallerSettings]) -> Dict[str, str]:
    return settings.symbols if settings and settings.symbols else SYMBOLS_DEFAULT


def run_command(
    command: Union[List[str], str],
    settings: Optional[InstallerSettings],
    check: bool = True,
    capture_output: bool = False,
    text: bool = True,
    current_logger: Optional[logging.Logger] = None,
    env: Optional[Dict[str, str]] = None,
) -> subprocess.CompletedProcess:
    """
    Executes a system command and logs the process details and results.

    Args:
        command (Union[List[str], str]): The system command to execute. A string is
            split with shlex; no shell is involved.
        settings (Optional[InstallerSettings]): Installer settings providing logging symbols.
        check (bool): Whether to raise a CalledProcessError on a non-zero exit code.
        capture_output (bool): Whether to capture standard output and standard error.
        text (bool): Whether output streams are decoded as text.
        current_logger (Optional[logging.Logger]): Logger to use instead of the module logger.
        env (Optional[Dict[str, str]]): Environment for the command; inherits the parent's if None.

    Returns:
        subprocess.CompletedProcess: The completed process.

    Raises:
        subprocess.CalledProcessError: If the command fails and check is True.
        FileNotFoundError: If the executable does not exist.
    """
    effective_logger = current_logger if current_logger else module_logger
    symbols = _symbols(settings)
    command_to_log_str: str
    command_to_run: List[str]

    if isinstance(command, str):
        log_installer(
            f"{symbols.get('warning', '!')} Splitting string command '{command}'. Consider list format.",
            "warning",
            effective_logger,
            settings,
        )
        command_to_run = shlex.split(command)
        command_to_log_str = command
    else:
        command_to_run = [str(part) for part in command]
        command_to_log_str = shlex.join(command_to_run)

    log_installer(
        f"{symbols.get('gear', '⚙️')} Executing: {command_to_log_str}",
        "info",
        effective_logger,
        settings,
    )
    try:
        result = subprocess.run(
            command_to_run,
            check=check,
            capture_output=capture_output,
            text=text,
            env=env,
        )
        if capture_output:
            if result.stdout and result.stdout.strip():
                log_installer(
                    f"   stdout: {result.stdout.strip()}",
                    "debug",
                    effective_logger,
                    settings,
                )
            if result.stderr and result.stderr.strip():
                log_installer(
                    f"   stderr: {result.stderr.strip()}",
                    "debug",
                    effective_logger,
                    settings,
                )
        return result
    except subprocess.CalledProcessError as e:
        cmd_executed_str = (
            shlex.join(e.cmd) if isinstance(e.cmd, list) else str(e.cmd)
        )
        log_installer(
            f"{symbols.get('error', '❌')} Command `{cmd_executed_str}` failed (rc {e.returncode}).",
            "error",
            effective_logger,
            settings,
        )
        if e.stdout and hasattr(e.stdout, "strip") and e.stdout.strip():
            log_installer(
                f"   stdout: {e.stdout.strip()}",
                "error",
                effective_logger,
                settings,
            )
        if e.stderr and hasattr(e.stderr, "strip") and e.stderr.strip():
            log_installer(
                f"   stderr: {e.stderr.strip()}",
                "error",
                effective_logger,
                settings,
            )
        raise
    except FileNotFoundError as e:
        log_installer(
            f"{symbols.get('error', '❌')} Command not found: {e.filename}. Ensure it's installed and in PATH.",
            "error",
            effective_logger,
            settings,
        )
        raise


def run_as_user(
    user: str,
    command: List[str],
    settings: Optional[InstallerSettings],
    check: bool = True,
    current_logger: Optional[logging.Logger] = None,
) -> subprocess.CompletedProcess:
    """
    Runs a command as an unprivileged account via `su <user> -c`.

    The command list is quoted into a single shell string, which is what
    `su -c` expects.
    """
    return run_command(
        ["su", user, "-c", shlex.join([str(part) for part in command])],
        settings,
        check=check,
        current_logger=current_logger,
    )


def command_exists(command_name: str) -> bool:
    """
    Check if a command exists in the system's PATH.

    Parameters:
        command_name (str): The name of the command to check for existence.

    Returns:
        bool: True if the command is found in the system's PATH, False otherwise.
    """
    return shutil.which(command_name) is not None
