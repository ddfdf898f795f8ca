# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap step: clear root and user passwords."""

from ..context import BootstrapContext
from ..identity import reset_credentials
from . import bootstrap_pipeline


@bootstrap_pipeline.step(order=600)
async def clear_passwords(ctx: BootstrapContext) -> None:
    reset_credentials(ctx.execution.username, ctx.config, warn=ctx.warning)
