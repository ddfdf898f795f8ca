# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap step: refuse to run outside a container."""

import os

from ..constants import CONTAINER_MARKERS
from ..context import BootstrapContext
from ..errors import NotInContainerError
from . import bootstrap_pipeline


@bootstrap_pipeline.step(order=100)
async def check_container(ctx: BootstrapContext) -> None:
    """Abort unless a container runtime marker file exists.

    This agent rewrites /etc/passwd, sudoers and mounts; on a host it
    would do real damage.
    """
    markers = [ctx.config.container_path(m) for m in CONTAINER_MARKERS]
    if not any(os.path.exists(m) for m in markers):
        raise NotInContainerError(
            f"not running inside a container (none of {', '.join(CONTAINER_MARKERS)} exist)"
        )
