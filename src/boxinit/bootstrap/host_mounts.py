# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap step: bridge selected host paths into the container."""

from ..bridge import bridge_spec, host_mounts
from ..context import BootstrapContext
from . import bootstrap_pipeline


@bootstrap_pipeline.step(order=300)
async def bridge_host_paths(ctx: BootstrapContext) -> None:
    """Bridge the read-only set, then the read-write set.

    Host paths that don't exist are skipped silently.  A failed bridge
    only costs that integration, so it is reported and we move on.
    """
    ctx.mounts = host_mounts(ctx.config)
    ctx.info(f"Bridging host paths from {ctx.config.host_root}")
    for spec in [*ctx.mounts.read_only, *ctx.mounts.read_write]:
        result = bridge_spec(spec)
        ctx.bridge_results[spec.container_path] = result
        if not result:
            ctx.warning(result.reason or f"cannot bridge {spec.container_path}")
