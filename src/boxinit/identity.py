# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Reconcile the container-local account with the host identity.

The container runtime may already have created a placeholder entry for
the user (podman does with ``--userns keep-id``), so every operation
here first looks at the account databases and then either creates the
record or updates it in place.  When the shadow tools reject a request
(some refuse usernames with unusual characters) we fall back to
appending raw database records.
"""

from __future__ import annotations

import logging
import os
import secrets
from collections.abc import Callable
from dataclasses import dataclass

from . import commands
from .config import BootstrapConfig
from .constants import SUDOERS_DIR, SUDOERS_FILE
from .context import ExecutionContext

logger = logging.getLogger(__name__)

Warn = Callable[[str], None]


@dataclass(frozen=True)
class IdentityRecord:
    """The account we want to exist inside the container."""

    username: str
    uid: int
    gid: int
    home: str
    shell: str

    @classmethod
    def from_context(cls, ctx: ExecutionContext) -> IdentityRecord:
        """Build the record, taking the shell that was actually installed."""
        return cls(
            username=ctx.username,
            uid=ctx.uid,
            gid=ctx.gid,
            home=ctx.home,
            shell=ctx.effective_shell,
        )


def _warn(warn: Warn | None, msg: str) -> None:
    if warn:
        warn(msg)
    else:
        logger.warning(msg)


def _root_args(config: BootstrapConfig) -> list[str]:
    # shadow tools act on the live /etc unless pointed at another root
    if os.path.normpath(config.root) == "/":
        return []
    return ["--root", config.root]


def has_record(database: str, name: str) -> bool:
    """Return True if colon-separated *database* has an entry for *name*."""
    prefix = f"{name}:"
    try:
        with open(database) as f:
            return any(line.startswith(prefix) for line in f)
    except FileNotFoundError:
        return False


def append_record(database: str, line: str) -> None:
    """Append *line* to *database*, keeping records newline separated."""
    needs_newline = False
    try:
        with open(database, "rb") as f:
            f.seek(0, os.SEEK_END)
            if f.tell() > 0:
                f.seek(-1, os.SEEK_END)
                needs_newline = f.read(1) != b"\n"
    except FileNotFoundError:
        pass
    with open(database, "a") as f:
        if needs_newline:
            f.write("\n")
        f.write(line + "\n")


def ensure_group(record: IdentityRecord, config: BootstrapConfig) -> None:
    group_db = config.container_path("/etc/group")
    if has_record(group_db, record.username):
        return

    result = commands.run([
        "groupadd", *_root_args(config),
        "--non-unique", "--gid", str(record.gid),
        record.username,
    ])
    if result.returncode != 0:
        logger.debug("groupadd failed, writing group entry directly: %s", result.stderr.strip())
        append_record(group_db, f"{record.username}:x:{record.gid}:")


def ensure_user(
    record: IdentityRecord,
    config: BootstrapConfig,
    warn: Warn | None = None,
) -> None:
    passwd_db = config.container_path("/etc/passwd")

    if has_record(passwd_db, record.username):
        # Pre-seeded by the container runtime: bring it in line
        result = commands.run([
            "usermod", *_root_args(config),
            "--home", record.home,
            "--shell", record.shell,
            "--non-unique", "--uid", str(record.uid),
            "--gid", str(record.gid),
            record.username,
        ])
        if result.returncode != 0:
            _warn(warn, f"cannot update user {record.username}: {result.stderr.strip()}")
        return

    result = commands.run([
        "useradd", *_root_args(config),
        "--home-dir", record.home,
        "--no-create-home",
        "--shell", record.shell,
        "--non-unique", "--uid", str(record.uid),
        "--gid", str(record.gid),
        record.username,
    ])
    if result.returncode == 0:
        return

    logger.debug("useradd failed, writing passwd entry directly: %s", result.stderr.strip())
    append_record(
        passwd_db,
        f"{record.username}::{record.uid}:{record.gid}::{record.home}:{record.shell}",
    )
    shadow_db = config.container_path("/etc/shadow")
    if not has_record(shadow_db, record.username):
        append_record(shadow_db, f"{record.username}::1::::::")


def reconcile(
    record: IdentityRecord,
    config: BootstrapConfig,
    warn: Warn | None = None,
) -> None:
    """Create or update the group and user for *record*."""
    ensure_group(record, config)
    ensure_user(record, config, warn)


def configure_sudo(
    username: str,
    config: BootstrapConfig,
    warn: Warn | None = None,
) -> list[str]:
    """Grant *username* passwordless root through a sudoers fragment.

    Lines already present are not added again.  A fragment that can't
    be written is reported and the user is left without sudo.

    Returns:
        The lines that were appended.
    """
    sudoers_dir = config.container_path(SUDOERS_DIR)
    sudoers_file = config.container_path(SUDOERS_FILE)
    wanted = [
        "Defaults !fqdn",
        f"{username} ALL = (root) NOPASSWD:ALL",
    ]

    try:
        # Minimal images (Alpine) may lack sudoers.d
        os.makedirs(sudoers_dir, exist_ok=True)
        existing: set[str] = set()
        if os.path.exists(sudoers_file):
            with open(sudoers_file) as f:
                existing = {line.rstrip("\n") for line in f}

        added = [line for line in wanted if line not in existing]
        for line in added:
            append_record(sudoers_file, line)
        if os.path.exists(sudoers_file):
            os.chmod(sudoers_file, 0o440)
    except OSError as e:
        _warn(warn, f"cannot configure sudo in {SUDOERS_FILE}: {e}")
        return []
    return added


def reset_credentials(
    username: str,
    config: BootstrapConfig,
    warn: Warn | None = None,
) -> bool:
    """Leave root and *username* with no password.

    Both get the same random password through ``chpasswd`` first and
    then have it deleted with ``passwd --delete``.  Some toolchains
    refuse an empty password set directly but accept deleting one that
    was set the normal way.

    Returns:
        True if every step succeeded.
    """
    password = secrets.token_urlsafe(24)
    ok = True

    result = commands.run(
        ["chpasswd", *_root_args(config)],
        input=f"root:{password}\n{username}:{password}\n",
    )
    if result.returncode != 0:
        _warn(warn, f"cannot set temporary passwords: {result.stderr.strip()}")
        ok = False

    for account in ("root", username):
        result = commands.run(["passwd", *_root_args(config), "--delete", account])
        if result.returncode != 0:
            _warn(warn, f"cannot clear password for {account}: {result.stderr.strip()}")
            ok = False
    return ok
