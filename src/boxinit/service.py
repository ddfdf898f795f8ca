# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Bootstrap orchestration.

Runs the bootstrap pipeline, announces readiness on stdout, then enters
the terminal phase: either idle until the container is stopped, or
release the init-sensitive bridges and replace this process with the
init system.  Neither branch hands control back to the pipeline.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from typing import NoReturn

from .bootstrap import bootstrap_pipeline
from .bridge import unbridge
from .config import BootstrapConfig
from .constants import INIT_SENSITIVE_MOUNTS
from .context import BootstrapContext, ExecutionContext
from .errors import BootstrapError
from .output import Output, ready
from .pipeline import Pipeline

logger = logging.getLogger(__name__)


class BootstrapService:
    """Sequences the bootstrap of one container boot."""

    def __init__(
        self,
        config: BootstrapConfig,
        progress: Output | None = None,
        pipeline: Pipeline[BootstrapContext] = bootstrap_pipeline,
    ):
        """Initialize the service.

        Args:
            config: Resolved agent configuration.
            progress: Where step progress and warnings are reported.
            pipeline: Steps to run; the full bootstrap by default.
        """
        self._config = config
        self._progress = progress
        self._pipeline = pipeline

    async def bootstrap(self, execution: ExecutionContext) -> BootstrapContext:
        """Run every bootstrap step, then emit the readiness sentinel.

        Raises:
            BootstrapError: A fatal step failed; readiness is not signalled.
        """
        ctx = BootstrapContext(
            execution=execution,
            config=self._config,
            progress=self._progress,
        )
        await self._pipeline.run(ctx, on_step=ctx.completed_steps.append)
        ready()
        return ctx

    async def run(self, execution: ExecutionContext) -> int:
        """Bootstrap and enter the terminal phase.

        Returns:
            Exit status once the idle wait is interrupted.  With the init
            flag set this never returns.
        """
        ctx = await self.bootstrap(execution)
        if execution.init:
            self.hand_off_to_init(ctx)
        return await self.idle()

    async def idle(self) -> int:
        """Keep the container alive until SIGTERM or SIGINT."""
        loop = asyncio.get_running_loop()
        shutdown_event = asyncio.Event()

        def handle_signal() -> None:
            logger.debug("Shutting down")
            shutdown_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, handle_signal)

        await shutdown_event.wait()
        return 0

    def release_init_mounts(self, ctx: BootstrapContext) -> None:
        """Unmount bridges a real init system wants to own."""
        for path in INIT_SENSITIVE_MOUNTS:
            if not unbridge(self._config.container_path(path)):
                ctx.warning(f"cannot unmount {path} before starting init")

    def hand_off_to_init(self, ctx: BootstrapContext) -> NoReturn:
        """Replace this process with the init system."""
        self.release_init_mounts(ctx)
        argv = list(self._config.init_command)
        logger.debug("Executing init: %s", " ".join(argv))
        try:
            os.execvp(argv[0], argv)
        except OSError as e:
            raise BootstrapError(f"cannot execute init {argv[0]}: {e}")
