"""Tests for host socket mirroring."""

from __future__ import annotations

import os
from pathlib import Path

from boxinit.sockets import SocketLink, find_host_sockets, mirror_sockets


def test_only_shareable_sockets_are_linked(tmp_path: Path, make_socket) -> None:
    host = tmp_path / "host"
    root = tmp_path / "root"
    docker = make_socket(host / "run" / "docker.sock")
    make_socket(host / "run" / "user")
    make_socket(host / "run" / "nscd")
    make_socket(host / "run" / "dbus" / "system_bus_socket")

    links = mirror_sockets(str(host), container_root=str(root))

    assert links == [SocketLink(str(docker), str(root / "run" / "docker.sock"))]
    assert os.readlink(root / "run" / "docker.sock") == str(docker)
    assert not (root / "run" / "user").exists()
    assert not (root / "run" / "dbus" / "system_bus_socket").exists()


def test_skipped_directories_are_pruned(tmp_path: Path, make_socket) -> None:
    host = tmp_path / "host"
    make_socket(host / "run" / "user" / "1000" / "bus")
    make_socket(host / "run" / "nscd" / "socket")
    podman = make_socket(host / "run" / "podman" / "podman.sock")

    assert list(find_host_sockets(str(host / "run"))) == [str(podman)]


def test_regular_files_are_ignored(tmp_path: Path) -> None:
    host = tmp_path / "host"
    (host / "run").mkdir(parents=True)
    (host / "run" / "docker.pid").write_text("42\n")

    assert mirror_sockets(str(host), container_root=str(tmp_path / "root")) == []


def test_existing_link_is_left_alone(tmp_path: Path, make_socket) -> None:
    host = tmp_path / "host"
    root = tmp_path / "root"
    make_socket(host / "run" / "docker.sock")
    (root / "run").mkdir(parents=True)
    os.symlink("/somewhere/else", root / "run" / "docker.sock")

    assert mirror_sockets(str(host), container_root=str(root)) == []
    assert os.readlink(root / "run" / "docker.sock") == "/somewhere/else"


def test_stale_file_is_replaced(tmp_path: Path, make_socket) -> None:
    host = tmp_path / "host"
    root = tmp_path / "root"
    libvirt = make_socket(host / "run" / "libvirt" / "libvirt-sock")
    stale = root / "run" / "libvirt" / "libvirt-sock"
    stale.parent.mkdir(parents=True)
    stale.write_text("")

    links = mirror_sockets(str(host), container_root=str(root))

    assert [link.container_path for link in links] == [str(stale)]
    assert os.readlink(stale) == str(libvirt)


def test_link_failure_warns_and_continues(tmp_path: Path, make_socket) -> None:
    host = tmp_path / "host"
    root = tmp_path / "root"
    make_socket(host / "run" / "a.sock")
    b = make_socket(host / "run" / "b.sock")
    (root / "run" / "a.sock").mkdir(parents=True)
    warnings: list[str] = []

    links = mirror_sockets(str(host), container_root=str(root), warn=warnings.append)

    assert [link.host_path for link in links] == [str(b)]
    assert len(warnings) == 1
    assert "a.sock" in warnings[0]


def test_missing_host_run_yields_nothing(tmp_path: Path) -> None:
    assert mirror_sockets(str(tmp_path / "nowhere")) == []
