import io

import pytest

from provision.cli_handler import (
    USAGE_TEXT,
    parse_install_args,
    print_next_steps,
    print_usage,
)
from provision.config_models import CertMode
from provision.errors import ConfigurationError, UsageError

REQUIRED = ["--hostname=chat.example.org", "--email=admin@example.org"]


def test_parse_minimal_arguments():
    options = parse_install_args(REQUIRED)

    assert options.hostname == "chat.example.org"
    assert options.email == "admin@example.org"
    assert options.cert_mode is CertMode.NONE
    assert options.no_init_db is False
    assert options.cacert is None


def test_parse_space_separated_values_and_flags(tmp_path):
    cacert = tmp_path / "ca.pem"
    options = parse_install_args(
        [
            "--hostname",
            "chat.example.org",
            "--email",
            "admin@example.org",
            "--self-signed-cert",
            f"--cacert={cacert}",
            "--no-dist-upgrade",
            "--no-overwrite-settings",
            "--postgres-missing-dictionaries",
            "--remote-postgres",
        ]
    )

    assert options.cert_mode is CertMode.SELF_SIGNED
    assert options.cacert == cacert
    assert options.no_dist_upgrade is True
    assert options.no_overwrite_settings is True
    assert options.postgres_missing_dictionaries is True
    assert options.remote_postgres is True


def test_certbot_sets_cert_mode():
    assert parse_install_args(REQUIRED + ["--certbot"]).cert_mode is CertMode.CERTBOT


def test_conflicting_certificate_flags_checked_first():
    """The conflict is reported even when hostname and email are missing."""
    with pytest.raises(ConfigurationError) as excinfo:
        parse_install_args(["--certbot", "--self-signed-cert"])

    assert "--self-signed-cert and --certbot are incompatible" in str(
        excinfo.value
    )


@pytest.mark.parametrize(
    "argv",
    [
        ["--hostname=zulip.example.com", "--email=admin@example.org"],
        ["--hostname=chat.example.org", "--email=zulip-admin@example.com"],
    ],
)
def test_placeholder_values_rejected(argv):
    with pytest.raises(UsageError, match="example hostname and email"):
        parse_install_args(argv)


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["--hostname=chat.example.org"],
        ["--email=admin@example.org"],
        ["--no-init-db", "--certbot"],
    ],
)
def test_missing_hostname_or_email(argv):
    with pytest.raises(UsageError):
        parse_install_args(argv)


def test_no_init_db_exempts_hostname_and_email():
    options = parse_install_args(["--no-init-db"])

    assert options.hostname is None
    assert options.email is None
    assert options.no_init_db is True


def test_unknown_option_is_usage_error():
    with pytest.raises(UsageError):
        parse_install_args(REQUIRED + ["--bogus"])


def test_abbreviated_option_is_rejected():
    with pytest.raises(UsageError):
        parse_install_args(REQUIRED + ["--self-signed"])


def test_help_exits_zero(capsys):
    with pytest.raises(SystemExit) as excinfo:
        parse_install_args(["--help"])

    assert excinfo.value.code == 0
    assert "--hostname=zulip.example.com" in capsys.readouterr().out


def test_print_usage():
    stream = io.StringIO()

    print_usage(stream)

    assert stream.getvalue() == USAGE_TEXT


def test_print_next_steps():
    stream = io.StringIO()

    print_next_steps("--no-init-db", "su zulip -c 'init'", stream)

    output = stream.getvalue()
    assert "Success!" in output
    assert "Stopping because --no-init-db was passed." in output
    assert "    su zulip -c 'init'" in output
