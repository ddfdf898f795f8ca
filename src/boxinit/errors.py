# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Fatal bootstrap errors.

Anything raised from here aborts the run with ``exit_code``.  Degraded
failures (a single bridge, socket link or skeleton file) are reported
as warnings and never raise.
"""

from __future__ import annotations

from .constants import EXIT_NO_BACKEND, EXIT_NOT_IN_CONTAINER


class BootstrapError(Exception):
    """Bootstrap cannot continue."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class NotInContainerError(BootstrapError):
    """No container runtime marker was found."""

    def __init__(self, message: str = "this must run inside a container"):
        super().__init__(message, EXIT_NOT_IN_CONTAINER)


class NoBackendFoundError(BootstrapError):
    """None of the known package managers is installed."""

    def __init__(self, message: str = "no supported package manager found"):
        super().__init__(message, EXIT_NO_BACKEND)


class DependencyInstallError(BootstrapError):
    """The mandatory dependency batch (or a requested upgrade) failed."""


class HookError(BootstrapError):
    """A user supplied hook exited non-zero."""
