# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap step: link host daemon sockets into the container."""

from ..context import BootstrapContext
from ..sockets import mirror_sockets
from . import bootstrap_pipeline


@bootstrap_pipeline.step(order=350)
async def mirror_host_sockets(ctx: BootstrapContext) -> None:
    """Symlink sockets under the host's /run to the same container path."""
    ctx.socket_links = mirror_sockets(
        ctx.config.host_root,
        container_root=ctx.config.root,
        warn=ctx.warning,
    )
    for link in ctx.socket_links:
        ctx.dim(f"Linked {link.container_path} -> {link.host_path}")
