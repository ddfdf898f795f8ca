# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap step: stop package managers writing into bridged paths."""

from ..context import BootstrapContext
from ..exclusions import register_exclusions
from . import bootstrap_pipeline


@bootstrap_pipeline.step(order=400)
async def register_package_exclusions(ctx: BootstrapContext) -> None:
    """Write per-toolchain exclusions for the bridges made earlier."""
    for path in register_exclusions(ctx.mounts, ctx.config, warn=ctx.warning):
        ctx.dim(f"Wrote package exclusions to {path}")
