# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pytest configuration for boxinit tests.

No test runs a real external program.  The ``system`` fixture swaps
``boxinit.commands`` for a :class:`FakeSystem` that keeps an in-memory
mount table and applies the shadow tools to account files under a
temporary container root.
"""

from __future__ import annotations

import os
import socket
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from boxinit import commands
from boxinit.config import BootstrapConfig


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "e2e: runs the whole bootstrap pipeline against a fake system"
    )


# Options of the shadow tools that take a value
_VALUE_OPTS = frozenset({
    "--root", "--gid", "--uid", "--home", "--home-dir", "--shell",
})


def _parse(cmd: list[str]) -> tuple[dict[str, str | bool], list[str]]:
    opts: dict[str, str | bool] = {}
    args: list[str] = []
    it = iter(cmd[1:])
    for arg in it:
        if arg in _VALUE_OPTS:
            opts[arg] = next(it)
        elif arg.startswith("--"):
            opts[arg] = True
        else:
            args.append(arg)
    return opts, args


class FakeSystem:
    """Stand-in for the programs ``boxinit.commands`` would run."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.calls: list[list[str]] = []
        self.inputs: list[str | None] = []
        self.mounts: list[tuple[str, str, str]] = []
        self.installed: set[str] = set()
        self.chowns: list[tuple[str, int, int]] = []
        self._failures: list[Callable[[list[str]], bool]] = []

    # -- configuration -------------------------------------------------------

    def fail(self, match: str | Callable[[list[str]], bool]) -> None:
        """Make commands fail: by program name or by predicate."""
        if isinstance(match, str):
            self._failures.append(lambda cmd, name=match: cmd[0] == name)
        else:
            self._failures.append(match)

    def install(self, *names: str) -> None:
        self.installed.update(names)

    # -- inspection ----------------------------------------------------------

    def ran(self, program: str) -> list[list[str]]:
        return [c for c in self.calls if c[0] == program]

    def mounted_at(self, target: str) -> list[tuple[str, str, str]]:
        return [m for m in self.mounts if m[1] == target]

    def db(self, name: str) -> list[str]:
        path = self.root / "etc" / name
        if not path.exists():
            return []
        return path.read_text().splitlines()

    def records(self, name: str, username: str) -> list[list[str]]:
        return [line.split(":") for line in self.db(name) if line.startswith(f"{username}:")]

    # -- replacements for boxinit.commands ----------------------------------

    def run(
        self,
        cmd: list[str],
        *,
        input: str | None = None,
        env: object = None,
        capture: bool = True,
    ) -> subprocess.CompletedProcess[str]:
        cmd = list(cmd)
        self.calls.append(cmd)
        self.inputs.append(input)
        for predicate in self._failures:
            if predicate(cmd):
                return subprocess.CompletedProcess(cmd, 1, "", f"{cmd[0]}: simulated failure")
        handler = getattr(self, "_" + cmd[0].replace("-", "_"), None)
        if handler is not None:
            return handler(cmd)
        return subprocess.CompletedProcess(cmd, 0, "", "")

    def which(self, name: str) -> str | None:
        return f"/usr/bin/{name}" if name in self.installed else None

    def chown(self, path: str, uid: int, gid: int, **_kwargs: object) -> None:
        self.chowns.append((str(path), uid, gid))

    # -- simulated programs --------------------------------------------------

    def _ok(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(cmd, 0, "", "")

    def _err(self, cmd: list[str], code: int, msg: str) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(cmd, code, "", msg)

    def _findmnt(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        if self.mounted_at(cmd[-1]):
            return self._ok(cmd)
        return self._err(cmd, 1, "")

    def _mount(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        # mount --rbind -o OPTIONS SOURCE TARGET
        self.mounts.append((cmd[-2], cmd[-1], cmd[3]))
        return self._ok(cmd)

    def _umount(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        for i in range(len(self.mounts) - 1, -1, -1):
            if self.mounts[i][1] == cmd[-1]:
                del self.mounts[i]
                return self._ok(cmd)
        return self._err(cmd, 32, f"umount: {cmd[-1]}: not mounted")

    def _append(self, name: str, line: str) -> None:
        with open(self.root / "etc" / name, "a") as f:
            f.write(line + "\n")

    def _groupadd(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        opts, args = _parse(cmd)
        if self.records("group", args[0]):
            return self._err(cmd, 9, f"groupadd: group '{args[0]}' already exists")
        self._append("group", f"{args[0]}:x:{opts['--gid']}:")
        return self._ok(cmd)

    def _useradd(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        opts, args = _parse(cmd)
        name = args[0]
        if self.records("passwd", name):
            return self._err(cmd, 9, f"useradd: user '{name}' already exists")
        self._append(
            "passwd",
            f"{name}:x:{opts['--uid']}:{opts['--gid']}::{opts['--home-dir']}:{opts['--shell']}",
        )
        self._append("shadow", f"{name}:!:19000:0:99999:7:::")
        return self._ok(cmd)

    def _usermod(self, cmd: list[str]) -> subprocess.CompletedProcess[str]:
        opts, args = _parse(cmd)
        name = args[0]
        path = self.root / "etc" / "passwd"
        lines = path.read_text().splitlines()
        for i, line in enumerate(lines):
            fields = line.split(":")
            if fields[0] == name:
                fields[2] = str(opts.get("--uid", fields[2]))
                fields[3] = str(opts.get("--gid", fields[3]))
                fields[5] = str(opts.get("--home", fields[5]))
                fields[6] = str(opts.get("--shell", fields[6]))
                lines[i] = ":".join(fields)
                path.write_text("\n".join(lines) + "\n")
                return self._ok(cmd)
        return self._err(cmd, 6, f"usermod: user '{name}' does not exist")


@pytest.fixture
def config(tmp_path: Path) -> BootstrapConfig:
    return BootstrapConfig(
        host_root=str(tmp_path / "host"),
        root=str(tmp_path / "root"),
    )


@pytest.fixture
def system(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> FakeSystem:
    root = tmp_path / "root"
    (root / "etc").mkdir(parents=True)
    (root / "etc" / "group").write_text("root:x:0:\n")
    (root / "etc" / "passwd").write_text("root:x:0:0:root:/root:/bin/sh\n")
    (root / "etc" / "shadow").write_text("root:*:19000:0:99999:7:::\n")
    (tmp_path / "host").mkdir()

    fake = FakeSystem(root)
    monkeypatch.setattr(commands, "run", fake.run)
    monkeypatch.setattr(commands, "which", fake.which)
    monkeypatch.setattr(os, "chown", fake.chown)
    return fake


def _make_socket(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(str(path))
    finally:
        sock.close()
    return path


@pytest.fixture
def make_socket() -> Callable[[Path], Path]:
    """Create a unix socket file at the given path."""
    return _make_socket
