# provision/convergence.py
# -*- coding: utf-8 -*-
"""
Runs the configuration-management tool that converges the installed
services to the state described by zulip.conf.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from common.command_utils import log_installer, run_command
from provision import config as static_config
from provision.config_models import InstallConfig
from provision.packages import helper_env

module_logger = logging.getLogger(__name__)


class ConvergenceEngine(ABC):
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or module_logger

    @abstractmethod
    def converge(self, config: InstallConfig) -> None:
        """Runs one convergence pass to completion. Raises on failure."""


class PuppetApply(ConvergenceEngine):
    """
    Applies the puppet classes listed in zulip.conf in the foreground;
    `-f` skips the confirmation prompt. The run is idempotent.
    """

    def converge(self, config: InstallConfig) -> None:
        symbols = config.symbols
        log_installer(
            f"{symbols.get('step', '➡️')} Applying puppet classes: {', '.join(config.puppet_class_list)}",
            "info",
            self.logger,
            config.settings,
        )
        run_command(
            [str(config.zulip_path / static_config.PUPPET_APPLY), "-f"],
            config.settings,
            current_logger=self.logger,
            env=helper_env(config),
        )
        log_installer(
            f"{symbols.get('success', '✅')} Puppet run completed.",
            "success",
            self.logger,
            config.settings,
        )
