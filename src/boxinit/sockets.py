# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Mirror host IPC sockets into the container as symlinks.

The host's ``/run`` is visible under the mirrored host root.  For each
socket found there we create a symlink at the same path in the
container, so clients like ``docker`` or ``virsh`` reach the host
daemon without knowing about the host-root prefix.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .constants import SOCKET_SKIP_NAMES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SocketLink:
    """A host socket and the container symlink pointing at it."""

    host_path: str
    container_path: str


def _is_socket(path: str) -> bool:
    try:
        return stat.S_ISSOCK(os.lstat(path).st_mode)
    except OSError:
        return False


def find_host_sockets(scan_root: str) -> Iterator[str]:
    """Yield every socket below *scan_root*.

    Entries named in :data:`SOCKET_SKIP_NAMES` are pruned: neither they
    nor anything below them is reported.  Symlinked directories are not
    followed.
    """
    for dirpath, dirnames, filenames in os.walk(scan_root):
        dirnames[:] = sorted(d for d in dirnames if d not in SOCKET_SKIP_NAMES)
        for name in sorted(filenames):
            if name in SOCKET_SKIP_NAMES:
                continue
            path = os.path.join(dirpath, name)
            if _is_socket(path):
                yield path


def mirror_sockets(
    host_root: str,
    subtree: str = "/run",
    container_root: str = "/",
    warn: Callable[[str], None] | None = None,
) -> list[SocketLink]:
    """Link host sockets found under ``host_root/subtree`` into the container.

    Args:
        host_root: Mirrored host root, e.g. ``/run/host``.
        subtree: Host directory to scan, relative to *host_root*.
        container_root: Root the links are created under.
        warn: Called with a message for each link that could not be made.

    Returns:
        The links that were created.  An existing socket or symlink at a
        container path is left alone and not reported.
    """
    host_root = host_root.rstrip("/") or "/"
    scan_root = os.path.join(host_root, subtree.lstrip("/"))
    if not os.path.isdir(scan_root):
        return []

    links: list[SocketLink] = []
    for host_socket in find_host_sockets(scan_root):
        relative = os.path.relpath(host_socket, host_root)
        container_socket = os.path.join(container_root, relative)

        if _is_socket(container_socket) or os.path.islink(container_socket):
            continue

        try:
            if os.path.isdir(container_socket):
                raise IsADirectoryError("a directory is in the way")
            # A leftover plain file would make symlink() fail
            if os.path.lexists(container_socket):
                os.remove(container_socket)
            os.makedirs(os.path.dirname(container_socket), exist_ok=True)
            os.symlink(host_socket, container_socket)
        except OSError as e:
            msg = f"cannot link host socket {host_socket} to {container_socket}: {e}"
            if warn:
                warn(msg)
            else:
                logger.warning(msg)
            continue

        links.append(SocketLink(host_path=host_socket, container_path=container_socket))
    return links
