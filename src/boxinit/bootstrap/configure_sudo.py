# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap step: configure passwordless sudo."""

from ..context import BootstrapContext
from ..identity import configure_sudo
from . import bootstrap_pipeline


@bootstrap_pipeline.step(order=550)
async def configure_passwordless_sudo(ctx: BootstrapContext) -> None:
    """Configure passwordless sudo for the user."""
    ctx.info(f"Configuring passwordless sudo for '{ctx.execution.username}'")
    configure_sudo(ctx.execution.username, ctx.config, warn=ctx.warning)
