# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bind bridge: expose host paths inside the container's mount namespace.

A bridge is a recursive bind mount with slave propagation, so mounts
appearing later on the host side follow into the container but nothing
mounted in the container leaks back.  Bridging is idempotent: a target
that is already a mountpoint is unmounted first, so stale binds from a
previous boot of the same rootfs never stack up under a fresh one.
"""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from . import commands
from .config import BootstrapConfig
from .constants import READ_ONLY_MOUNTS, READ_WRITE_MOUNTS

logger = logging.getLogger(__name__)

# Propagation applied to every bridge
DEFAULT_PROPAGATION = "rslave"


class MountMode(enum.Enum):
    """Access mode of a bridge."""

    READ_ONLY = "ro"
    READ_WRITE = "rw"


@dataclass(frozen=True)
class MountSpec:
    """One host path to bridge into the container.

    ``path`` is the location as seen from inside the container; it is
    what package-manager exclusions are written for.
    """

    source: str
    target: str
    mode: MountMode
    path: str = ""

    @property
    def container_path(self) -> str:
        return self.path or self.target


@dataclass(frozen=True)
class BridgeResult:
    """Outcome of a single bridge; failures are never fatal."""

    success: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.success


class MountSet:
    """Ordered, de-duplicated collection of :class:`MountSpec`.

    Order is significant: later bridges may depend on directories that
    earlier ones created.
    """

    def __init__(self, specs: Iterable[MountSpec] = ()) -> None:
        self._specs: dict[str, MountSpec] = {}
        for spec in specs:
            self.add(spec)

    def add(self, spec: MountSpec) -> None:
        # First registration of a container path wins
        self._specs.setdefault(spec.container_path, spec)

    def by_mode(self, mode: MountMode) -> list[MountSpec]:
        return [s for s in self._specs.values() if s.mode is mode]

    @property
    def read_only(self) -> list[MountSpec]:
        return self.by_mode(MountMode.READ_ONLY)

    @property
    def read_write(self) -> list[MountSpec]:
        return self.by_mode(MountMode.READ_WRITE)

    def paths(self) -> list[str]:
        """Container paths of every spec, in order."""
        return list(self._specs)

    def __iter__(self) -> Iterator[MountSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, path: object) -> bool:
        return path in self._specs

    def __repr__(self) -> str:
        return f"MountSet({self.paths()!r})"


def host_mounts(config: BootstrapConfig) -> MountSet:
    """Build the static read-only then read-write bridge set.

    Independent of the user being set up; only the host and container
    roots come from *config*.
    """
    specs: list[MountSpec] = []
    for paths, mode in (
        (READ_ONLY_MOUNTS, MountMode.READ_ONLY),
        (READ_WRITE_MOUNTS, MountMode.READ_WRITE),
    ):
        for path in paths:
            specs.append(MountSpec(
                source=config.host_path(path),
                target=config.container_path(path),
                mode=mode,
                path=path,
            ))
    return MountSet(specs)


def bridge(
    source: str,
    target: str,
    mode: MountMode | str | None = None,
) -> BridgeResult:
    """Bind-mount host *source* onto container *target*.

    Args:
        source: Existing host path (directory or regular file).
        target: Path inside the container; created if missing.
        mode: :class:`MountMode`, a raw mount option string appended to
            the propagation flag, or None for a plain read-write bridge.

    Returns:
        BridgeResult.  A missing *source* is a successful no-op.
    """
    source_is_dir = os.path.isdir(source)
    if not source_is_dir and not os.path.isfile(source):
        logger.debug("Bridge source %s absent, skipping", source)
        return BridgeResult(True)

    if os.path.lexists(target) and commands.is_mountpoint(target):
        # Binding over a stale mount would stack a second one on top
        if not commands.umount(target):
            return BridgeResult(False, f"cannot unmount stale bridge at {target}")

    try:
        if source_is_dir:
            os.makedirs(target, exist_ok=True)
        else:
            os.makedirs(os.path.dirname(target) or "/", exist_ok=True)
            if not os.path.lexists(target):
                open(target, "a").close()
    except OSError as e:
        kind = "directory" if source_is_dir else "file"
        return BridgeResult(False, f"cannot create mount target {kind} {target}: {e}")

    options = DEFAULT_PROPAGATION
    if isinstance(mode, MountMode):
        options = f"{options},{mode.value}"
    elif mode:
        options = f"{options},{mode}"

    result = commands.run(["mount", "--rbind", "-o", options, source, target])
    if result.returncode != 0:
        return BridgeResult(
            False, f"cannot bind {source} to {target}: {result.stderr.strip()}",
        )
    return BridgeResult(True)


def bridge_spec(spec: MountSpec) -> BridgeResult:
    """Bridge a single :class:`MountSpec`."""
    return bridge(spec.source, spec.target, spec.mode)


def unbridge(target: str) -> bool:
    """Unmount *target* if it is a mountpoint.

    Returns:
        True if nothing is mounted there afterwards.
    """
    if not commands.is_mountpoint(target):
        return True
    return commands.umount(target)
