# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Execution of external programs.

Every program the agent runs goes through :func:`run`, so a missing
binary looks like any other failed command (status 127) and callers
can take their fallback paths without special-casing exceptions.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from collections.abc import Mapping, Sequence

logger = logging.getLogger(__name__)

COMMAND_NOT_FOUND = 127


def run(
    cmd: Sequence[str],
    *,
    input: str | None = None,
    env: Mapping[str, str] | None = None,
    capture: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run *cmd* and return the completed process.

    Args:
        cmd: Program and arguments.
        input: Text fed to the program's stdin.
        env: Full environment for the child, or None to inherit.
        capture: Capture stdout/stderr.  When False the child's output
            is sent to our stderr; stdout is reserved for the readiness
            line.

    Returns:
        The completed process.  Never raises for a non-zero status.
    """
    cmd = list(cmd)
    logger.debug("Executing: %s", " ".join(cmd))
    try:
        if capture:
            result = subprocess.run(
                cmd, input=input, env=env, capture_output=True, text=True,
            )
        else:
            result = subprocess.run(
                cmd, input=input, env=env, text=True,
                stdout=sys.stderr, stderr=sys.stderr,
            )
    except FileNotFoundError:
        return subprocess.CompletedProcess(
            cmd, COMMAND_NOT_FOUND, "", f"{cmd[0]}: command not found",
        )

    if result.returncode != 0:
        logger.debug(
            "Command failed (%s): %s %s",
            result.returncode,
            " ".join(cmd),
            (result.stderr or "").strip(),
        )
    return result


def succeeds(cmd: Sequence[str]) -> bool:
    """Return True if *cmd* exits zero."""
    return run(cmd).returncode == 0


def which(name: str) -> str | None:
    """Resolve *name* on the search path."""
    return shutil.which(name)


def is_mountpoint(path: str) -> bool:
    """Return True if *path* is currently a mount target."""
    return succeeds(["findmnt", "--noheadings", "--mountpoint", path])


def umount(path: str) -> bool:
    """Unmount *path*; returns False on failure."""
    return succeeds(["umount", path])
