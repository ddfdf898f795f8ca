# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Constants shared across the bootstrap agent."""

from __future__ import annotations

# Exit statuses
EXIT_INVALID_FLAG = 1
EXIT_MISSING_ARGUMENT = 2
EXIT_NOT_IN_CONTAINER = 126
EXIT_NO_BACKEND = 127

# Printed on stdout once bootstrap is complete; supervisors poll for it.
READINESS_SENTINEL = "container_setup_done"

# Conventional location of the host filesystem, mounted by the launcher
DEFAULT_HOST_ROOT = "/run/host"
DEFAULT_INIT_COMMAND = "/sbin/init"
DEFAULT_SHELL = "/bin/bash"

# Any of these existing means we are inside a container
CONTAINER_MARKERS = (
    "/run/.containerenv",
    "/.dockerenv",
)

# Host paths re-bridged read-only
READ_ONLY_MOUNTS = (
    "/etc/machine-id",
    "/var/lib/flatpak",
    "/var/lib/systemd/coredump",
    "/var/log/journal",
)

# Host paths re-bridged read-write
READ_WRITE_MOUNTS = (
    "/etc/host.conf",
    "/media",
    "/mnt",
    "/run/libvirt",
    "/run/media",
    "/run/netns",
    "/run/systemd/journal",
    "/run/systemd/resolve",
    "/run/systemd/seats",
    "/run/systemd/sessions",
    "/run/systemd/users",
    "/run/udev",
    "/var/lib/libvirt",
    "/var/mnt",
)

# Never touched by a package transaction, bridged or not
ALWAYS_EXCLUDED = (
    "/dev",
    "/proc",
    "/sys",
    "/tmp",
    "/etc/hosts",
    "/etc/resolv.conf",
    "/etc/localtime",
)

# Released before exec'ing a real init so it can own these paths
INIT_SENSITIVE_MOUNTS = (
    "/run/systemd/journal",
    "/run/systemd/resolve",
    "/run/systemd/seats",
    "/run/systemd/sessions",
    "/run/systemd/users",
    "/var/lib/systemd/coredump",
    "/var/log/journal",
)

# The journal bridge is dropped around dpkg runs
JOURNAL_MOUNT = "/var/log/journal"

# Session/identity scoped sockets that must not be mirrored
SOCKET_SKIP_NAMES = frozenset({
    "user",              # /run/user/<uid>: per-session runtime dirs
    "nscd",              # name service cache, leaks host identities
    "system_bus_socket", # D-Bus system bus, container runs its own
})

# Host theme resources bridged under ~/.local/share
SHARED_RESOURCES = ("themes", "icons", "fonts")

# Toolchain markers and exclusion artifacts
RPM_MACROS_DIR = "/usr/lib/rpm/macros.d"
RPM_MACROS_FILE = "/usr/lib/rpm/macros.d/macros.boxinit"
DPKG_CONFIG_DIR = "/etc/dpkg/dpkg.cfg.d"
DPKG_CONFIG_FILE = "/etc/dpkg/dpkg.cfg.d/00_boxinit"
APT_CONFIG_DIR = "/etc/apt/apt.conf.d"
APT_CONFIG_FILE = "/etc/apt/apt.conf.d/00_boxinit"
ALPM_SCRIPTS_DIR = "/usr/share/libalpm/scripts"
ALPM_HOOKS_DIR = "/usr/share/libalpm/hooks"
ALPM_SYSTEMD_HOOK = "/usr/share/libalpm/scripts/systemd-hook"

SUDOERS_DIR = "/etc/sudoers.d"
SUDOERS_FILE = "/etc/sudoers.d/boxinit"
SKEL_DIR = "/etc/skel"

# Terminal integration profile script shipped by vte
VTE_PROFILE_SCRIPT = "/etc/profile.d/vte.sh"
