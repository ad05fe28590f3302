# provision/cli_handler.py
# -*- coding: utf-8 -*-
"""
Handles the command line interface of the installer: parsing the flags,
validating them into InstallOptions, and printing usage and next steps.
"""

import argparse
import logging
import sys
from typing import List, NoReturn, Optional, TextIO

from provision import config as static_config
from provision.config_models import CertMode, InstallOptions
from provision.errors import ConfigurationError, UsageError

module_logger = logging.getLogger(__name__)

PROG = "install"

USAGE_TEXT = f"""\
Usage:
  {PROG} --hostname={static_config.PLACEHOLDER_HOSTNAME} --email={static_config.PLACEHOLDER_EMAIL} [options...]
  {PROG} --help

Other options:
  --certbot
  --self-signed-cert
  --cacert=<path>
  --no-init-db
  --no-dist-upgrade
  --no-overwrite-settings
  --postgres-missing-dictionaries
  --remote-postgres

The --hostname and --email options are required,
unless --no-init-db is set and --certbot is not.
"""


class InstallArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports problems as UsageError instead of exiting 2."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)

    def format_usage(self) -> str:
        return USAGE_TEXT

    def format_help(self) -> str:
        return USAGE_TEXT


def build_parser() -> InstallArgumentParser:
    parser = InstallArgumentParser(prog=PROG, allow_abbrev=False)
    parser.add_argument("--hostname", dest="hostname", default=None)
    parser.add_argument("--email", dest="email", default=None)
    parser.add_argument("--certbot", action="store_true")
    parser.add_argument(
        "--self-signed-cert", dest="self_signed_cert", action="store_true"
    )
    parser.add_argument("--cacert", default=None)
    parser.add_argument("--no-init-db", dest="no_init_db", action="store_true")
    parser.add_argument(
        "--no-dist-upgrade", dest="no_dist_upgrade", action="store_true"
    )
    parser.add_argument(
        "--no-overwrite-settings",
        dest="no_overwrite_settings",
        action="store_true",
    )
    parser.add_argument(
        "--postgres-missing-dictionaries",
        dest="postgres_missing_dictionaries",
        action="store_true",
    )
    parser.add_argument(
        "--remote-postgres", dest="remote_postgres", action="store_true"
    )
    return parser


def validate_args(args: argparse.Namespace) -> InstallOptions:
    """
    Turns parsed flags into InstallOptions.

    Raises:
        ConfigurationError: --certbot together with --self-signed-cert.
        UsageError: placeholder values from the docs, or a missing
            hostname/email outside the --no-init-db exemption.
    """
    if args.certbot and args.self_signed_cert:
        raise ConfigurationError(
            "error: --self-signed-cert and --certbot are incompatible"
        )

    hostname = args.hostname or None
    email = args.email or None

    if (
        hostname == static_config.PLACEHOLDER_HOSTNAME
        or email == static_config.PLACEHOLDER_EMAIL
    ):
        # The docs' example command, pasted verbatim.
        raise UsageError(
            "The example hostname and email must be replaced with real values."
        )

    if not hostname or not email:
        if not args.no_init_db or args.certbot:
            raise UsageError("--hostname and --email are required.")

    if args.certbot:
        cert_mode = CertMode.CERTBOT
    elif args.self_signed_cert:
        cert_mode = CertMode.SELF_SIGNED
    else:
        cert_mode = CertMode.NONE

    return InstallOptions(
        hostname=hostname,
        email=email,
        cert_mode=cert_mode,
        cacert=args.cacert or None,
        no_init_db=args.no_init_db,
        no_dist_upgrade=args.no_dist_upgrade,
        no_overwrite_settings=args.no_overwrite_settings,
        postgres_missing_dictionaries=args.postgres_missing_dictionaries,
        remote_postgres=args.remote_postgres,
    )


def parse_install_args(argv: Optional[List[str]] = None) -> InstallOptions:
    """
    Parses and validates installer arguments. `--help` prints usage to
    stdout and raises SystemExit(0) before any validation.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    return validate_args(args)


def print_usage(stream: Optional[TextIO] = None) -> None:
    (stream or sys.stderr).write(USAGE_TEXT)


def print_next_steps(
    reason_flag: str,
    initialize_command: str,
    stream: Optional[TextIO] = None,
) -> None:
    """Tells the operator how to finish after an early stop."""
    (stream or sys.stdout).write(
        f"""
  Success!

  Stopping because {reason_flag} was passed.  To complete the installation, run:

    {initialize_command}
"""
    )
