# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap step: populate the home directory from /etc/skel."""

from __future__ import annotations

import os
import shutil

from ..constants import SKEL_DIR
from ..context import BootstrapContext
from . import bootstrap_pipeline


def chown_tree(path: str, uid: int, gid: int) -> None:
    """Recursively give *path* to uid:gid without following symlinks."""
    os.chown(path, uid, gid, follow_symlinks=False)
    if os.path.isdir(path) and not os.path.islink(path):
        for dirpath, dirnames, filenames in os.walk(path):
            for name in dirnames + filenames:
                os.chown(os.path.join(dirpath, name), uid, gid, follow_symlinks=False)


@bootstrap_pipeline.step(order=700)
async def propagate_skeleton(ctx: BootstrapContext) -> None:
    """Copy skeleton dotfiles the home directory doesn't have yet.

    Existing files are never overwritten: the home is usually the
    user's real host home.
    """
    skel = ctx.config.container_path(SKEL_DIR)
    home = ctx.config.container_path(ctx.execution.home)
    if not os.path.isdir(skel):
        return

    try:
        if not os.path.isdir(home):
            os.makedirs(home)
            os.chown(home, ctx.execution.uid, ctx.execution.gid)
    except OSError as e:
        ctx.warning(f"cannot create home directory {ctx.execution.home}: {e}")
        return

    for name in sorted(os.listdir(skel)):
        src = os.path.join(skel, name)
        dst = os.path.join(home, name)
        if os.path.lexists(dst):
            continue
        try:
            if os.path.isdir(src) and not os.path.islink(src):
                shutil.copytree(src, dst, symlinks=True)
            else:
                shutil.copy2(src, dst, follow_symlinks=False)
            chown_tree(dst, ctx.execution.uid, ctx.execution.gid)
        except OSError as e:
            ctx.warning(f"cannot copy {src} to {dst}: {e}")
            continue
        ctx.dim(f"Copied {name} into {ctx.execution.home}")
