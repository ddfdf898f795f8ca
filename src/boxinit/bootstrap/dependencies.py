# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap step: install the interactive shell and its dependencies."""

from ..backends import ensure_base_dependencies
from ..context import BootstrapContext
from . import bootstrap_pipeline


@bootstrap_pipeline.step(order=200)
async def ensure_dependencies(ctx: BootstrapContext) -> None:
    """Install missing base packages through the detected backend.

    May replace ``ctx.execution.effective_shell`` with the fallback
    shell; every later step reads the shell from there.
    """
    requested = ctx.execution.effective_shell
    ctx.backend = ensure_base_dependencies(ctx.execution, ctx.config, warn=ctx.warning)
    if ctx.backend is None:
        ctx.dim("Base dependencies already installed")
    elif ctx.execution.effective_shell != requested:
        ctx.info(f"Using {ctx.execution.effective_shell} as login shell")
    else:
        ctx.info(f"Installed dependencies with {ctx.backend.name}")
