# provision/certificates.py
# -*- coding: utf-8 -*-
"""
Obtains the TLS certificate for the server.

Exactly one provisioner runs per install: certbot issuance, a self-signed
certificate, or nothing (the precondition check has then already confirmed
that a certificate is in place).
"""

import logging
import socket
from abc import ABC, abstractmethod
from typing import Optional

from common.command_utils import log_installer, run_command
from provision import config as static_config
from provision.config_models import CertMode, InstallConfig, InstallPaths

module_logger = logging.getLogger(__name__)


class CertificateProvisioner(ABC):
    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or module_logger

    @abstractmethod
    def provision(self, config: InstallConfig) -> None:
        """Makes a certificate available. Raises on failure."""


class CertbotProvisioner(CertificateProvisioner):
    """Requests a certificate from Let's Encrypt via the setup-certbot helper."""

    def provision(self, config: InstallConfig) -> None:
        symbols = config.symbols
        log_installer(
            f"{symbols.get('step', '➡️')} Obtaining a certificate for {config.options.hostname} with Certbot...",
            "info",
            self.logger,
            config.settings,
        )
        run_command(
            [
                str(config.zulip_path / static_config.SETUP_CERTBOT),
                f"--hostname={config.options.hostname}",
                f"--email={config.options.email}",
            ],
            config.settings,
            current_logger=self.logger,
        )
        log_installer(
            f"{symbols.get('success', '✅')} Certbot certificate installed.",
            "success",
            self.logger,
            config.settings,
        )


class SelfSignedProvisioner(CertificateProvisioner):
    """
    Generates a self-signed certificate. An existing key and certificate are
    kept as they are, so running this twice is harmless.
    """

    def __init__(
        self, paths: InstallPaths, logger: Optional[logging.Logger] = None
    ):
        super().__init__(logger)
        self.paths = paths

    def certificate_exists(self) -> bool:
        return self.paths.ssl_key.exists() and self.paths.ssl_cert.exists()

    def provision(self, config: InstallConfig) -> None:
        symbols = config.symbols
        if self.certificate_exists():
            log_installer(
                f"{symbols.get('info', 'ℹ️')} Certificate already present at {self.paths.ssl_cert}; keeping it.",
                "info",
                self.logger,
                config.settings,
            )
            return

        hostname = config.options.hostname or socket.gethostname()
        log_installer(
            f"{symbols.get('gear', '⚙️')} Generating a self-signed certificate for {hostname}...",
            "info",
            self.logger,
            config.settings,
        )
        run_command(
            [
                str(config.zulip_path / static_config.GENERATE_SELF_SIGNED_CERT),
                "--exists-ok",
                hostname,
            ],
            config.settings,
            current_logger=self.logger,
        )


class NullProvisioner(CertificateProvisioner):
    def provision(self, config: InstallConfig) -> None:
        log_installer(
            "Using the existing certificate; nothing to provision.",
            "debug",
            self.logger,
            config.settings,
        )


def get_certificate_provisioner(
    config: InstallConfig,
    paths: InstallPaths,
    current_logger: Optional[logging.Logger] = None,
) -> CertificateProvisioner:
    if config.options.cert_mode == CertMode.CERTBOT:
        return CertbotProvisioner(current_logger)
    if config.options.cert_mode == CertMode.SELF_SIGNED:
        return SelfSignedProvisioner(paths, current_logger)
    return NullProvisioner(current_logger)
