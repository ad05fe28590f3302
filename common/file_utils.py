# common/file_utils.py
# -*- coding: utf-8 -*-
"""
File system utility functions: symlink rewiring, in-place assignment
rewrites, and directory copies.
"""

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Dict, Optional

from provision.config_models import SYMBOLS_DEFAULT, InstallerSettings

from .command_utils import log_installer

module_logger = logging.getLogger(__name__)


def force_symlink(
    target: Path,
    link_path: Path,
    settings: Optional[InstallerSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Points `link_path` at `target`, replacing an existing symlink or file
    (`ln -nsf`). An existing link to a directory is replaced, not followed.

    The new link is created under a temporary name and renamed over the old
    one, so readers never observe a missing link.
    """
    logger_to_use = current_logger if current_logger else module_logger
    link_path = Path(link_path)
    tmp_link = link_path.with_name(f".{link_path.name}.tmp-{os.getpid()}")
    if tmp_link.is_symlink() or tmp_link.exists():
        tmp_link.unlink()
    os.symlink(str(target), str(tmp_link))
    os.replace(str(tmp_link), str(link_path))
    log_installer(
        f"Linked {link_path} -> {target}",
        "debug",
        logger_to_use,
        settings,
    )


def rewrite_assignments(
    file_path: Path,
    assignments: Dict[str, str],
    settings: Optional[InstallerSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> int:
    """
    Rewrites top-level `NAME = ...` lines of a Python settings file in place.

    Each matching line becomes `NAME = '<value>'`; lines for names not in
    `assignments` are untouched.

    Returns:
        int: The number of lines rewritten.
    """
    logger_to_use = current_logger if current_logger else module_logger
    symbols = settings.symbols if settings else SYMBOLS_DEFAULT
    if not assignments:
        return 0

    file_path = Path(file_path)
    lines = file_path.read_text(encoding="utf-8").splitlines(keepends=True)
    patterns = {
        name: re.compile(rf"^{re.escape(name)} =.*$") for name in assignments
    }
    rewritten = 0
    for index, line in enumerate(lines):
        for name, pattern in patterns.items():
            if pattern.match(line.rstrip("\n")):
                ending = "\n" if line.endswith("\n") else ""
                lines[index] = f"{name} = {assignments[name]!r}{ending}"
                rewritten += 1
                break
    file_path.write_text("".join(lines), encoding="utf-8")

    log_installer(
        f"{symbols.get('gear', '⚙️')} Rewrote {rewritten} assignment(s) in {file_path}",
        "info",
        logger_to_use,
        settings,
    )
    return rewritten


def copy_tree_contents(
    source_dir: Path,
    destination_dir: Path,
    settings: Optional[InstallerSettings] = None,
    current_logger: Optional[logging.Logger] = None,
) -> None:
    """
    Copies the contents of `source_dir` into `destination_dir` (`cp -rT`),
    creating the destination and overwriting files that already exist.
    """
    logger_to_use = current_logger if current_logger else module_logger
    shutil.copytree(
        str(source_dir),
        str(destination_dir),
        symlinks=True,
        dirs_exist_ok=True,
    )
    log_installer(
        f"Copied {source_dir} into {destination_dir}",
        "debug",
        logger_to_use,
        settings,
    )
