# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Context dataclasses passed through the bootstrap pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .bridge import BridgeResult, MountSet
from .config import BootstrapConfig
from .sockets import SocketLink

if TYPE_CHECKING:
    from .backends import PackageBackend
    from .output import Output


@dataclass
class ExecutionContext:
    """Who we are setting up and how the run should end.

    Built once from the command line.  Only ``effective_shell`` changes
    during a run: dependency installation replaces it with the fallback
    shell when the requested one cannot be installed, and identity
    reconciliation reads it from here.
    """

    username: str
    uid: int
    gid: int
    home: str
    shell: str
    init: bool = False
    init_hook: str | None = None
    pre_init_hook: str | None = None
    additional_packages: tuple[str, ...] = ()
    upgrade: bool = False
    effective_shell: str = ""

    def __post_init__(self) -> None:
        if not self.effective_shell:
            self.effective_shell = self.shell


@dataclass
class BootstrapContext:
    """State threaded through every bootstrap step.

    Steps read ``execution`` and ``config`` and record what they did in
    the fields below, so later steps (and tests) can consume explicit
    values instead of re-deriving them.
    """

    execution: ExecutionContext
    config: BootstrapConfig
    progress: Output | None = None

    # Built up by pipeline steps
    backend: PackageBackend | None = None
    mounts: MountSet = field(default_factory=MountSet)
    bridge_results: dict[str, BridgeResult] = field(default_factory=lambda: dict[str, BridgeResult]())
    socket_links: list[SocketLink] = field(default_factory=lambda: list[SocketLink]())
    completed_steps: list[str] = field(default_factory=lambda: list[str]())

    def info(self, msg: str) -> None:
        if self.progress:
            self.progress.info(msg)

    def dim(self, msg: str) -> None:
        if self.progress:
            self.progress.dim(msg)

    def warning(self, msg: str) -> None:
        if self.progress:
            self.progress.warning(msg)
