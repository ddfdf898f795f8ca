"""Tests for package manager exclusion artifacts."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from boxinit.bridge import MountMode, MountSet, MountSpec, host_mounts
from boxinit.constants import ALWAYS_EXCLUDED, READ_ONLY_MOUNTS, READ_WRITE_MOUNTS
from boxinit.exclusions import net_shared_paths, register_exclusions


def _marker(config, path: str) -> None:
    Path(config.container_path(path)).mkdir(parents=True, exist_ok=True)


def _read(config, path: str) -> str:
    return Path(config.container_path(path)).read_text()


def test_nothing_written_without_markers(config) -> None:
    Path(config.root).mkdir()
    assert register_exclusions(host_mounts(config), config) == []


def test_rpm_net_shared_path_list(config) -> None:
    _marker(config, "/usr/lib/rpm/macros.d")
    mounts = host_mounts(config)

    written = register_exclusions(mounts, config)

    assert written == ["/usr/lib/rpm/macros.d/macros.boxinit"]
    content = _read(config, written[0])
    assert content.startswith("%_netsharedpath ")
    assert content.endswith("\n")
    listed = content[len("%_netsharedpath "):].rstrip("\n").split(":")
    assert "" not in listed
    assert len(listed) == len(set(listed))
    assert set(listed) == {*READ_ONLY_MOUNTS, *READ_WRITE_MOUNTS, *ALWAYS_EXCLUDED}


@pytest.mark.parametrize(
    "paths",
    [[], ["/opt/data"], ["/tmp", "/srv"], ["/dev", "/proc", "/var/mnt"]],
)
def test_net_shared_paths_is_union_without_duplicates(paths: list[str]) -> None:
    mounts = MountSet(MountSpec(f"/run/host{p}", p, MountMode.READ_WRITE) for p in paths)

    shared = net_shared_paths(mounts)

    assert shared[: len(paths)] == paths
    assert set(shared) == {*paths, *ALWAYS_EXCLUDED}
    assert len(shared) == len(set(shared))


def test_dpkg_excludes_each_bridge_only(config) -> None:
    _marker(config, "/etc/dpkg/dpkg.cfg.d")
    machine_id = Path(config.host_path("/etc/machine-id"))
    machine_id.parent.mkdir(parents=True)
    machine_id.write_text("abc\n")

    written = register_exclusions(host_mounts(config), config)

    assert written == ["/etc/dpkg/dpkg.cfg.d/00_boxinit"]
    lines = _read(config, written[0]).splitlines()
    assert len(lines) == len(READ_ONLY_MOUNTS) + len(READ_WRITE_MOUNTS)
    assert "path-exclude /etc/machine-id" in lines
    assert "path-exclude /var/log/journal/*" in lines
    assert "path-exclude /media/*" in lines
    assert not any(line.startswith("path-exclude /proc") for line in lines)


def test_apt_hook_drops_and_restores_journal(config) -> None:
    _marker(config, "/etc/dpkg/dpkg.cfg.d")
    _marker(config, "/etc/apt/apt.conf.d")

    written = register_exclusions(host_mounts(config), config)

    assert "/etc/apt/apt.conf.d/00_boxinit" in written
    pre, post = _read(config, "/etc/apt/apt.conf.d/00_boxinit").splitlines()
    assert pre.startswith("DPkg::Pre-Invoke")
    assert "umount /var/log/journal" in pre
    assert post.startswith("DPkg::Post-Invoke")
    assert f"mount --rbind -o rslave,ro {config.host_root}/var/log/journal /var/log/journal" in post


def test_alpm_hooks_and_scripts(config) -> None:
    _marker(config, "/usr/share/libalpm/scripts")

    written = register_exclusions(host_mounts(config), config)

    assert sorted(written) == sorted([
        "/usr/share/libalpm/hooks/00_boxinit_pre.hook",
        "/usr/share/libalpm/hooks/01_boxinit_post.hook",
        "/usr/share/libalpm/hooks/02_boxinit_post.hook",
        "/usr/share/libalpm/scripts/00_boxinit_pre.sh",
        "/usr/share/libalpm/scripts/01_boxinit_post.sh",
        "/usr/share/libalpm/scripts/02_boxinit_post.sh",
    ])

    pre_hook = _read(config, "/usr/share/libalpm/hooks/00_boxinit_pre.hook")
    assert "When = PreTransaction" in pre_hook
    assert "Exec = /usr/share/libalpm/scripts/00_boxinit_pre.sh" in pre_hook

    release = _read(config, "/usr/share/libalpm/scripts/00_boxinit_pre.sh")
    restore = _read(config, "/usr/share/libalpm/scripts/02_boxinit_post.sh")
    for path in READ_ONLY_MOUNTS:
        assert f"umount {path}" in release
        assert f"{config.host_root}{path} {path}" in restore
    for path in READ_WRITE_MOUNTS:
        assert path not in release

    neutralize = _read(config, "/usr/share/libalpm/scripts/01_boxinit_post.sh")
    assert "/run/systemd/system" in neutralize
    assert "/usr/share/libalpm/scripts/systemd-hook" in neutralize

    for name in ("00_boxinit_pre", "01_boxinit_post", "02_boxinit_post"):
        mode = os.stat(config.container_path(f"/usr/share/libalpm/scripts/{name}.sh")).st_mode
        assert mode & stat.S_IXUSR


def test_several_toolchains_each_get_artifacts(config) -> None:
    _marker(config, "/usr/lib/rpm/macros.d")
    _marker(config, "/etc/dpkg/dpkg.cfg.d")

    written = register_exclusions(host_mounts(config), config)

    assert "/usr/lib/rpm/macros.d/macros.boxinit" in written
    assert "/etc/dpkg/dpkg.cfg.d/00_boxinit" in written


def test_rerunning_overwrites_with_same_content(config) -> None:
    _marker(config, "/usr/lib/rpm/macros.d")
    _marker(config, "/etc/dpkg/dpkg.cfg.d")
    mounts = host_mounts(config)

    register_exclusions(mounts, config)
    first = {p: _read(config, p) for p in register_exclusions(mounts, config)}
    second = {p: _read(config, p) for p in register_exclusions(mounts, config)}

    assert first == second


def test_unwritable_artifact_does_not_stop_other_toolchains(config) -> None:
    _marker(config, "/usr/lib/rpm/macros.d")
    _marker(config, "/etc/dpkg/dpkg.cfg.d")
    Path(config.container_path("/usr/lib/rpm/macros.d/macros.boxinit")).mkdir()
    warnings: list[str] = []

    written = register_exclusions(host_mounts(config), config, warn=warnings.append)

    assert written == ["/etc/dpkg/dpkg.cfg.d/00_boxinit"]
    assert Path(config.container_path(written[0])).is_file()
    assert len(warnings) == 1
    assert "macros.boxinit" in warnings[0]
