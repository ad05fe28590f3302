# provision/errors.py
# -*- coding: utf-8 -*-
"""
Exception types raised by installer steps.

Steps raise; only the entry point turns these into messages on stderr and a
process exit status.
"""


class InstallerError(Exception):
    """Base class for fatal installer errors."""

    exit_code: int = 1


class UsageError(InstallerError):
    """Bad, missing or unknown command-line options; usage is shown."""


class ConfigurationError(InstallerError):
    """Options or settings that contradict each other."""


class PreconditionError(InstallerError):
    """The host is not ready; the operator can fix it and rerun."""


class ExternalToolError(InstallerError):
    """An external tool failed and we have a hint for the operator."""
