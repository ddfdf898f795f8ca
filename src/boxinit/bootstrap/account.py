# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap step: create or update the user's group and account."""

from ..context import BootstrapContext
from ..identity import IdentityRecord, reconcile
from . import bootstrap_pipeline


@bootstrap_pipeline.step(order=500)
async def reconcile_identity(ctx: BootstrapContext) -> None:
    """Match the container account to the host uid/gid/home/shell."""
    record = IdentityRecord.from_context(ctx.execution)
    ctx.info(f"Setting up user '{record.username}' (uid={record.uid}, gid={record.gid})")
    reconcile(record, ctx.config, warn=ctx.warning)
