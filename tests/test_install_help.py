# tests/test_install_help.py
# -*- coding: utf-8 -*-
import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
INSTALL_SCRIPT_PATH = PROJECT_ROOT / "install.py"


def test_install_script_help_output():
    """
    Tests that 'python install.py --help' prints the usage text and exits
    successfully without touching the system.
    """
    if not INSTALL_SCRIPT_PATH.is_file():
        raise FileNotFoundError(
            f"install.py not found at {INSTALL_SCRIPT_PATH}"
        )

    command = [sys.executable, str(INSTALL_SCRIPT_PATH), "--help"]

    result = subprocess.run(
        command, capture_output=True, text=True, check=False, cwd=PROJECT_ROOT
    )

    assert result.returncode == 0, result.stderr
    assert "Usage:" in result.stdout, "install.py usage string missing."
    assert "--hostname=zulip.example.com" in result.stdout
    assert "--self-signed-cert" in result.stdout
    assert "unless --no-init-db is set and --certbot is not" in result.stdout


def test_install_script_rejects_unknown_option():
    result = subprocess.run(
        [sys.executable, str(INSTALL_SCRIPT_PATH), "--frobnicate"],
        capture_output=True,
        text=True,
        check=False,
        cwd=PROJECT_ROOT,
    )

    assert result.returncode == 1
    assert "error:" in result.stderr
    assert "Usage:" in result.stderr
