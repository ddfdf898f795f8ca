# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Keep package managers away from bridged paths.

A package transaction that unpacks into a live bind mount either writes
through to the host or fails half way.  For every packaging toolchain
whose metadata directory exists in the container we write a config
artifact telling it to leave the bridged paths alone:

- RPM: a ``%_netsharedpath`` macro listing every bridged path.
- dpkg: one ``path-exclude`` directive per bridge, plus an APT hook
  that drops the journal bridge around each dpkg run.
- pacman: alpm hooks that release the read-only bridges before a
  transaction and restore them afterwards.

Toolchains are detected by directory, not by executable, and more than
one may be present.  Every artifact is rewritten from scratch on each
run.
"""

from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Callable
from dataclasses import dataclass

from .bridge import MountSet
from .config import BootstrapConfig
from .constants import (
    ALPM_HOOKS_DIR,
    ALPM_SCRIPTS_DIR,
    ALPM_SYSTEMD_HOOK,
    ALWAYS_EXCLUDED,
    APT_CONFIG_DIR,
    APT_CONFIG_FILE,
    DPKG_CONFIG_DIR,
    DPKG_CONFIG_FILE,
    JOURNAL_MOUNT,
    RPM_MACROS_DIR,
    RPM_MACROS_FILE,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artifact:
    """A file to write, addressed by its path inside the container."""

    path: str
    content: str
    mode: int = 0o644


def net_shared_paths(mounts: MountSet) -> list[str]:
    """Bridged paths plus the always-excluded set, without duplicates."""
    paths: dict[str, None] = {}
    for path in [*mounts.paths(), *ALWAYS_EXCLUDED]:
        paths.setdefault(path, None)
    return list(paths)


# -----------------------------------------------------------------------------
# RPM
# -----------------------------------------------------------------------------

def rpm_artifacts(mounts: MountSet) -> list[Artifact]:
    content = f"%_netsharedpath {':'.join(net_shared_paths(mounts))}\n"
    return [Artifact(RPM_MACROS_FILE, content)]


# -----------------------------------------------------------------------------
# dpkg / APT
# -----------------------------------------------------------------------------

def dpkg_artifacts(mounts: MountSet) -> list[Artifact]:
    lines = []
    for spec in mounts:
        if os.path.isfile(spec.source):
            lines.append(f"path-exclude {spec.container_path}")
        else:
            lines.append(f"path-exclude {spec.container_path}/*")
    return [Artifact(DPKG_CONFIG_FILE, "".join(f"{line}\n" for line in lines))]


def apt_artifacts(config: BootstrapConfig) -> list[Artifact]:
    journal = shlex.quote(JOURNAL_MOUNT)
    host_journal = shlex.quote(config.host_path(JOURNAL_MOUNT))
    pre = f"if findmnt --noheadings --mountpoint {journal} >/dev/null; then umount {journal}; fi"
    post = (
        f"if [ -e {host_journal} ] && ! findmnt --noheadings --mountpoint {journal} >/dev/null; "
        f"then mount --rbind -o rslave,ro {host_journal} {journal}; fi"
    )
    content = (
        f'DPkg::Pre-Invoke {{"{pre}";}};\n'
        f'DPkg::Post-Invoke {{"{post}";}};\n'
    )
    return [Artifact(APT_CONFIG_FILE, content)]


# -----------------------------------------------------------------------------
# pacman (alpm)
# -----------------------------------------------------------------------------

_ALPM_HOOK = """\
[Trigger]
Operation = Install
Operation = Upgrade
Operation = Remove
Type = Package
Target = *

[Action]
Description = {description}
When = {when}
Exec = {script}
"""


def _alpm_pair(
    stem: str, when: str, description: str, script: str,
) -> list[Artifact]:
    script_path = f"{ALPM_SCRIPTS_DIR}/{stem}.sh"
    hook = _ALPM_HOOK.format(description=description, when=when, script=script_path)
    return [
        Artifact(f"{ALPM_HOOKS_DIR}/{stem}.hook", hook),
        Artifact(script_path, "#!/bin/sh\n" + script, 0o755),
    ]


def alpm_artifacts(mounts: MountSet, config: BootstrapConfig) -> list[Artifact]:
    read_only = [spec.container_path for spec in mounts.read_only]

    release = "".join(
        f"if findmnt --noheadings --mountpoint {shlex.quote(p)} >/dev/null; "
        f"then umount {shlex.quote(p)}; fi\n"
        for p in read_only
    )
    restore = "".join(
        f"if [ -e {shlex.quote(config.host_path(p))} ] && "
        f"! findmnt --noheadings --mountpoint {shlex.quote(p)} >/dev/null; "
        f"then mount --rbind -o rslave,ro {shlex.quote(config.host_path(p))} {shlex.quote(p)}; fi\n"
        for p in read_only
    )
    # systemd's alpm hook fails without a running systemd and aborts the
    # transaction; replace it with a no-op in that case.
    neutralize = (
        "if [ ! -d /run/systemd/system ]; then\n"
        f"\tprintf '#!/bin/sh\\nexit 0\\n' > {ALPM_SYSTEMD_HOOK}\n"
        "fi\n"
    )

    return [
        *_alpm_pair(
            "00_boxinit_pre", "PreTransaction",
            "Releasing read-only host bridges", release,
        ),
        *_alpm_pair(
            "01_boxinit_post", "PostTransaction",
            "Disabling systemd hook without systemd", neutralize,
        ),
        *_alpm_pair(
            "02_boxinit_post", "PostTransaction",
            "Restoring read-only host bridges", restore,
        ),
    ]


# -----------------------------------------------------------------------------
# Registration
# -----------------------------------------------------------------------------

def exclusion_artifacts(mounts: MountSet, config: BootstrapConfig) -> list[Artifact]:
    """Artifacts for every toolchain whose marker directory exists."""
    def present(path: str) -> bool:
        return os.path.isdir(config.container_path(path))

    artifacts: list[Artifact] = []
    if present(RPM_MACROS_DIR):
        artifacts += rpm_artifacts(mounts)
    if present(DPKG_CONFIG_DIR):
        artifacts += dpkg_artifacts(mounts)
        if present(APT_CONFIG_DIR):
            artifacts += apt_artifacts(config)
    if present(ALPM_SCRIPTS_DIR):
        artifacts += alpm_artifacts(mounts, config)
    return artifacts


def register_exclusions(
    mounts: MountSet,
    config: BootstrapConfig,
    warn: Callable[[str], None] | None = None,
) -> list[str]:
    """Write exclusion artifacts for the bridged *mounts*.

    An artifact that cannot be written is reported and skipped; the
    other artifacts are still written.

    Returns:
        Container paths of the files written.
    """
    written = []
    for artifact in exclusion_artifacts(mounts, config):
        target = config.container_path(artifact.path)
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with open(target, "w") as f:
                f.write(artifact.content)
            os.chmod(target, artifact.mode)
        except OSError as e:
            msg = f"cannot write package exclusions to {artifact.path}: {e}"
            if warn:
                warn(msg)
            else:
                logger.warning(msg)
            continue
        logger.debug("Wrote %s", artifact.path)
        written.append(artifact.path)
    return written
