# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap steps: user supplied pre-init and init hooks."""

from __future__ import annotations

from .. import commands
from ..context import BootstrapContext
from ..errors import HookError
from . import bootstrap_pipeline


def run_hook(kind: str, hook: str | None) -> None:
    """Evaluate *hook* with ``sh -c``; a non-zero exit is fatal."""
    if not hook:
        return
    result = commands.run(["sh", "-c", hook], capture=False)
    if result.returncode != 0:
        raise HookError(f"{kind} hook exited with status {result.returncode}: {hook}")


@bootstrap_pipeline.step(order=150)
async def run_pre_init_hooks(ctx: BootstrapContext) -> None:
    """Run ``--pre-init-hooks`` before any package is touched."""
    if ctx.execution.pre_init_hook:
        ctx.info("Running pre-init hooks")
    run_hook("pre-init", ctx.execution.pre_init_hook)


@bootstrap_pipeline.step(order=900)
async def run_init_hook(ctx: BootstrapContext) -> None:
    """Run the trailing command line once everything is bridged."""
    if ctx.execution.init_hook:
        ctx.info("Running init hooks")
    run_hook("init", ctx.execution.init_hook)
