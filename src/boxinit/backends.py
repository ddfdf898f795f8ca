# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Package manager backends and base dependency installation.

Each :class:`PackageBackend` describes one package manager: the
executable that identifies it, its optional sync and upgrade commands,
how to install packages, and which package provides each
:class:`Capability` on that distribution.  :data:`BACKENDS` lists them
in priority order and :func:`detect_backend` picks the first one
installed.
"""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from . import commands
from .config import BootstrapConfig
from .constants import VTE_PROFILE_SCRIPT
from .context import ExecutionContext
from .errors import DependencyInstallError, NoBackendFoundError

logger = logging.getLogger(__name__)


class Capability(enum.Enum):
    """What the interactive environment needs, independent of distro."""

    TERMINAL = "terminal integration"
    PROCESS = "process listing"
    SHADOW = "password and shadow tools"
    FILE_SEARCH = "file search"
    PROMPT = "secure input prompt"
    PRIVILEGE = "privilege escalation"
    CORE = "core utilities"
    MOUNT = "mount utilities"


# Programs that must exist for the install path to be skipped
REQUIRED_TOOLS = ("find", "mount", "passwd", "sudo", "useradd", "usermod")


@dataclass(frozen=True)
class PackageBackend:
    """One package manager and how to drive it."""

    name: str
    family: str
    install_cmd: tuple[str, ...]
    packages: Mapping[Capability, tuple[str, ...]] = field(compare=False)
    sync_cmd: tuple[str, ...] | None = None
    upgrade_cmd: tuple[str, ...] | None = None
    env: tuple[tuple[str, str], ...] = ()

    @property
    def executable(self) -> str:
        return self.install_cmd[0]

    def probe(self) -> bool:
        """Return True if this package manager is installed."""
        return commands.which(self.executable) is not None

    def _run(self, cmd: Sequence[str]) -> bool:
        env = {**os.environ, **dict(self.env)} if self.env else None
        return commands.run(cmd, env=env, capture=False).returncode == 0

    def sync(self) -> bool:
        """Refresh repository metadata, if this backend needs it."""
        if self.sync_cmd is None:
            return True
        return self._run(self.sync_cmd)

    def upgrade(self) -> bool:
        """Upgrade every installed package."""
        if self.upgrade_cmd is None:
            return True
        return self._run(self.upgrade_cmd)

    def install(self, package: str) -> bool:
        """Install a single package."""
        return self.install_packages([package])

    def install_packages(self, packages: Iterable[str]) -> bool:
        """Install *packages* in one transaction."""
        packages = list(packages)
        if not packages:
            return True
        return self._run([*self.install_cmd, *packages])

    def base_packages(self) -> list[str]:
        """Packages covering every capability, de-duplicated, in order."""
        return _dedupe(
            pkg for cap in Capability for pkg in self.packages.get(cap, ())
        )


def _dedupe(items: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for item in items:
        seen.setdefault(item, None)
    return list(seen)


_RPM_PACKAGES = {
    Capability.TERMINAL: ("vte-profile",),
    Capability.PROCESS: ("procps-ng",),
    Capability.SHADOW: ("shadow-utils", "passwd"),
    Capability.FILE_SEARCH: ("findutils",),
    Capability.PROMPT: ("pinentry",),
    Capability.PRIVILEGE: ("sudo",),
    # coreutils would conflict with coreutils-single on minimal images
    Capability.CORE: ("util-linux",),
    Capability.MOUNT: ("util-linux",),
}

# Priority order: first installed wins.
BACKENDS: tuple[PackageBackend, ...] = (
    PackageBackend(
        name="apk",
        family="alpine",
        install_cmd=("apk", "add", "--no-cache"),
        upgrade_cmd=("apk", "upgrade", "--no-cache"),
        packages={
            Capability.TERMINAL: ("vte3",),
            Capability.PROCESS: ("procps",),
            Capability.SHADOW: ("shadow",),
            Capability.FILE_SEARCH: ("findutils",),
            Capability.PROMPT: ("pinentry",),
            Capability.PRIVILEGE: ("sudo",),
            Capability.CORE: ("coreutils",),
            Capability.MOUNT: ("util-linux", "findmnt"),
        },
    ),
    PackageBackend(
        name="apt-get",
        family="debian",
        sync_cmd=("apt-get", "update"),
        install_cmd=("apt-get", "install", "-y", "--no-install-recommends"),
        upgrade_cmd=("apt-get", "upgrade", "-y"),
        env=(("DEBIAN_FRONTEND", "noninteractive"),),
        packages={
            Capability.TERMINAL: ("libvte-2.91-common",),
            Capability.PROCESS: ("procps",),
            Capability.SHADOW: ("passwd",),
            Capability.FILE_SEARCH: ("findutils",),
            Capability.PROMPT: ("pinentry-curses",),
            Capability.PRIVILEGE: ("sudo",),
            Capability.CORE: ("coreutils",),
            Capability.MOUNT: ("util-linux", "mount"),
        },
    ),
    PackageBackend(
        name="emerge",
        family="gentoo",
        sync_cmd=("emerge", "--sync"),
        install_cmd=("emerge", "--ask=n", "--noreplace", "--quiet-build"),
        upgrade_cmd=("emerge", "--ask=n", "--update", "--deep", "@world"),
        packages={
            Capability.TERMINAL: ("x11-libs/vte",),
            Capability.PROCESS: ("sys-process/procps",),
            Capability.SHADOW: ("sys-apps/shadow",),
            Capability.FILE_SEARCH: ("sys-apps/findutils",),
            Capability.PROMPT: ("app-crypt/pinentry",),
            Capability.PRIVILEGE: ("app-admin/sudo",),
            Capability.CORE: ("sys-apps/coreutils",),
            Capability.MOUNT: ("sys-apps/util-linux",),
        },
    ),
    PackageBackend(
        name="pacman",
        family="arch",
        sync_cmd=("pacman", "-Sy", "--noconfirm"),
        install_cmd=("pacman", "-S", "--needed", "--noconfirm"),
        upgrade_cmd=("pacman", "-Su", "--noconfirm"),
        packages={
            Capability.TERMINAL: ("vte-common",),
            Capability.PROCESS: ("procps-ng",),
            Capability.SHADOW: ("shadow",),
            Capability.FILE_SEARCH: ("findutils",),
            Capability.PROMPT: ("pinentry",),
            Capability.PRIVILEGE: ("sudo",),
            Capability.CORE: ("coreutils",),
            Capability.MOUNT: ("util-linux",),
        },
    ),
    PackageBackend(
        name="slackpkg",
        family="slackware",
        sync_cmd=("slackpkg", "-batch=on", "-default_answer=y", "update"),
        install_cmd=("slackpkg", "-batch=on", "-default_answer=y", "install"),
        upgrade_cmd=("slackpkg", "-batch=on", "-default_answer=y", "upgrade-all"),
        packages={
            Capability.TERMINAL: ("vte",),
            Capability.PROCESS: ("procps-ng",),
            Capability.SHADOW: ("shadow",),
            Capability.FILE_SEARCH: ("findutils",),
            Capability.PROMPT: ("pinentry",),
            Capability.PRIVILEGE: ("sudo",),
            Capability.CORE: ("coreutils",),
            Capability.MOUNT: ("util-linux",),
        },
    ),
    PackageBackend(
        name="swupd",
        family="clear",
        install_cmd=("swupd", "bundle-add"),
        upgrade_cmd=("swupd", "update"),
        # Clear Linux ships bundles, several capabilities share one
        packages={
            Capability.TERMINAL: ("desktop-gnomelibs",),
            Capability.PROCESS: ("sysadmin-basic",),
            Capability.SHADOW: ("os-core",),
            Capability.FILE_SEARCH: ("os-core",),
            Capability.PROMPT: ("gnupg",),
            Capability.PRIVILEGE: ("sudo",),
            Capability.CORE: ("os-core",),
            Capability.MOUNT: ("storage-utils",),
        },
    ),
    PackageBackend(
        name="xbps-install",
        family="void",
        sync_cmd=("xbps-install", "-Sy"),
        install_cmd=("xbps-install", "-y"),
        upgrade_cmd=("xbps-install", "-yu"),
        packages={
            Capability.TERMINAL: ("vte3",),
            Capability.PROCESS: ("procps-ng",),
            Capability.SHADOW: ("shadow",),
            Capability.FILE_SEARCH: ("findutils",),
            Capability.PROMPT: ("pinentry",),
            Capability.PRIVILEGE: ("sudo",),
            Capability.CORE: ("coreutils",),
            Capability.MOUNT: ("util-linux",),
        },
    ),
    PackageBackend(
        name="zypper",
        family="suse",
        sync_cmd=("zypper", "--non-interactive", "refresh"),
        install_cmd=("zypper", "--non-interactive", "install"),
        upgrade_cmd=("zypper", "--non-interactive", "update"),
        packages={
            Capability.TERMINAL: ("libvte-2_91-0",),
            Capability.PROCESS: ("procps",),
            Capability.SHADOW: ("shadow",),
            Capability.FILE_SEARCH: ("findutils",),
            Capability.PROMPT: ("pinentry",),
            Capability.PRIVILEGE: ("sudo",),
            Capability.CORE: ("coreutils",),
            Capability.MOUNT: ("util-linux",),
        },
    ),
    PackageBackend(
        name="dnf",
        family="fedora",
        install_cmd=("dnf", "install", "-y"),
        upgrade_cmd=("dnf", "upgrade", "-y"),
        packages=_RPM_PACKAGES,
    ),
    PackageBackend(
        name="microdnf",
        family="fedora",
        install_cmd=("microdnf", "install", "-y"),
        upgrade_cmd=("microdnf", "upgrade", "-y"),
        packages=_RPM_PACKAGES,
    ),
    PackageBackend(
        name="yum",
        family="fedora",
        install_cmd=("yum", "install", "-y"),
        upgrade_cmd=("yum", "update", "-y"),
        packages=_RPM_PACKAGES,
    ),
)


def detect_backend(
    backends: Sequence[PackageBackend] = BACKENDS,
) -> PackageBackend:
    """Return the first installed backend.

    Raises:
        NoBackendFoundError: None of *backends* is installed.
    """
    for backend in backends:
        if backend.probe():
            logger.debug("Using package backend %s", backend.name)
            return backend
    names = ", ".join(b.name for b in backends)
    raise NoBackendFoundError(f"no supported package manager found (looked for: {names})")


def missing_dependencies(ctx: ExecutionContext, config: BootstrapConfig) -> list[str]:
    """List what the interactive environment still lacks.

    Empty when every required tool, the terminal profile script and the
    user's shell are present.
    """
    missing = [tool for tool in REQUIRED_TOOLS if commands.which(tool) is None]
    if not os.path.exists(config.container_path(VTE_PROFILE_SCRIPT)):
        missing.append(VTE_PROFILE_SCRIPT)
    shell_name = os.path.basename(ctx.effective_shell)
    if commands.which(shell_name) is None:
        missing.append(shell_name)
    return missing


def ensure_base_dependencies(
    ctx: ExecutionContext,
    config: BootstrapConfig,
    warn: Callable[[str], None] | None = None,
    backends: Sequence[PackageBackend] = BACKENDS,
) -> PackageBackend | None:
    """Make sure the interactive shell environment is installed.

    When the requested shell cannot be installed, ``ctx.effective_shell``
    is switched to ``config.fallback_shell`` and that shell is installed
    with the rest of the batch instead.

    Returns:
        The backend used, or None if nothing needed installing.

    Raises:
        NoBackendFoundError: Something is missing and no backend exists.
        DependencyInstallError: Sync, upgrade or the batch install failed.
    """
    missing = missing_dependencies(ctx, config)
    if not missing and not ctx.additional_packages and not ctx.upgrade:
        logger.debug("Base dependencies already present")
        return None

    backend = detect_backend(backends)

    if not backend.sync():
        raise DependencyInstallError(f"{backend.name}: repository sync failed")

    if ctx.upgrade and not backend.upgrade():
        raise DependencyInstallError(f"{backend.name}: upgrade failed")

    if not missing:
        if not backend.install_packages(_dedupe(ctx.additional_packages)):
            raise DependencyInstallError(
                f"{backend.name}: could not install additional packages"
            )
        return backend

    shell_package = os.path.basename(ctx.effective_shell)
    if not backend.install(shell_package):
        fallback = config.fallback_shell
        msg = f"cannot install shell {shell_package}, falling back to {fallback}"
        if warn:
            warn(msg)
        else:
            logger.warning(msg)
        ctx.effective_shell = fallback
        shell_package = os.path.basename(fallback)

    batch = _dedupe([shell_package, *backend.base_packages(), *ctx.additional_packages])
    if not backend.install_packages(batch):
        raise DependencyInstallError(
            f"{backend.name}: could not install dependencies: {' '.join(batch)}"
        )
    return backend
