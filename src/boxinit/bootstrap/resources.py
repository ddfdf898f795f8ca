# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap step: share host themes, icons and fonts with the user."""

import os

from ..bridge import MountMode, bridge
from ..constants import SHARED_RESOURCES
from ..context import BootstrapContext
from . import bootstrap_pipeline


@bootstrap_pipeline.step(order=800)
async def bridge_resources(ctx: BootstrapContext) -> None:
    """Bridge host /usr/share/{themes,icons,fonts} under ~/.local/share.

    GUI applications in the container then render with the host's look.
    """
    uid, gid = ctx.execution.uid, ctx.execution.gid
    local = ctx.config.container_path(os.path.join(ctx.execution.home, ".local"))
    share = os.path.join(local, "share")

    for resource in SHARED_RESOURCES:
        target = os.path.join(share, resource)
        try:
            os.makedirs(target, exist_ok=True)
            for path in (local, share, target):
                os.chown(path, uid, gid)
        except OSError as e:
            ctx.warning(f"cannot prepare {target}: {e}")
            continue

        result = bridge(
            ctx.config.host_path(f"/usr/share/{resource}"),
            target,
            MountMode.READ_ONLY,
        )
        ctx.bridge_results[target] = result
        if not result:
            ctx.warning(result.reason or f"cannot bridge host {resource}")
