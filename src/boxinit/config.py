# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Layered configuration for the bootstrap agent.

Configuration is read from (lowest to highest priority):
  1. /usr/lib/boxinit/boxinit.conf   (package defaults)
  2. /etc/boxinit/boxinit.conf       (system)
  3. BOXINIT_HOST_ROOT / BOXINIT_ROOT environment variables

Example file::

    [boxinit]
    host_root = /run/host
    init_command = /usr/lib/systemd/systemd --system
"""

from __future__ import annotations

import configparser
import logging
import os
import shlex
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from .constants import DEFAULT_HOST_ROOT, DEFAULT_INIT_COMMAND, DEFAULT_SHELL

logger = logging.getLogger(__name__)

CONFIG_PATHS = (
    "/usr/lib/boxinit/boxinit.conf",
    "/etc/boxinit/boxinit.conf",
)

_SECTION = "boxinit"


@dataclass(frozen=True)
class BootstrapConfig:
    """Resolved agent configuration."""

    host_root: str = DEFAULT_HOST_ROOT
    root: str = "/"
    init_command: tuple[str, ...] = (DEFAULT_INIT_COMMAND,)
    fallback_shell: str = DEFAULT_SHELL

    def host_path(self, path: str) -> str:
        """Location of host *path* under the mirrored host root."""
        return os.path.join(self.host_root, path.lstrip("/"))

    def container_path(self, path: str) -> str:
        """Location of container *path* under the container root."""
        return os.path.join(self.root, path.lstrip("/"))


def load_config(
    paths: Sequence[str] = CONFIG_PATHS,
    env: Mapping[str, str] | None = None,
) -> BootstrapConfig:
    """Load configuration from *paths* and the environment.

    Missing files are skipped.  A file that fails to parse is reported
    and ignored, so a broken config never blocks a container from
    booting.
    """
    if env is None:
        env = os.environ

    parser = configparser.ConfigParser()
    for path in paths:
        try:
            parser.read(path)
        except configparser.Error as e:
            logger.warning("Ignoring malformed config %s: %s", path, e)

    values: dict[str, str] = {}
    if parser.has_section(_SECTION):
        values.update(parser[_SECTION])

    if env.get("BOXINIT_HOST_ROOT"):
        values["host_root"] = env["BOXINIT_HOST_ROOT"]
    if env.get("BOXINIT_ROOT"):
        values["root"] = env["BOXINIT_ROOT"]

    defaults = BootstrapConfig()
    init_command = tuple(shlex.split(values.get("init_command", ""))) or defaults.init_command
    return BootstrapConfig(
        host_root=values.get("host_root", defaults.host_root),
        root=values.get("root", defaults.root),
        init_command=init_command,
        fallback_shell=values.get("fallback_shell", defaults.fallback_shell),
    )
