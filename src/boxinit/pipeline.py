# SPDX-FileCopyrightText: 2026 KDE Community
#
# SPDX-License-Identifier: GPL-3.0-or-later

"""Sequenced async bootstrap phases.

Phases register themselves on a shared :class:`Pipeline` from their own
modules, so adding a phase never touches the orchestrator.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Generic, NamedTuple, TypeVar, overload

logger = logging.getLogger(__name__)

_Ctx = TypeVar("_Ctx")

_StepFn = Callable[[_Ctx], Awaitable[None]]

_DEFAULT_ORDER = 500


class _Entry(NamedTuple):
    order: int
    seq: int
    fn: Callable[..., Awaitable[None]]


class Pipeline(Generic[_Ctx]):
    """Phases keyed by an integer *order*, run lowest first.

    Ties keep the order in which the phases were registered.  A phase
    that raises ends the run; later phases are skipped, which is how a
    fatal bootstrap error keeps the readiness line from being printed.

    Example::

        bootstrap = Pipeline[BootstrapContext]("bootstrap")

        @bootstrap.step(order=100)
        async def check_container(ctx: BootstrapContext) -> None: ...
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: list[_Entry] = []

    @overload
    def step(self, fn: _StepFn[_Ctx]) -> _StepFn[_Ctx]: ...
    @overload
    def step(self, *, order: int) -> Callable[[_StepFn[_Ctx]], _StepFn[_Ctx]]: ...

    def step(
        self,
        fn: _StepFn[_Ctx] | None = None,
        *,
        order: int = _DEFAULT_ORDER,
    ) -> _StepFn[_Ctx] | Callable[[_StepFn[_Ctx]], _StepFn[_Ctx]]:
        """Decorator adding a phase, with or without ``order=``."""
        def _register(f: _StepFn[_Ctx]) -> _StepFn[_Ctx]:
            self._entries.append(_Entry(order, len(self._entries), f))
            return f

        if fn is None:
            return _register
        return _register(fn)

    def _ordered(self) -> list[_Entry]:
        return sorted(self._entries, key=lambda e: (e.order, e.seq))

    def step_names(self) -> list[str]:
        return [e.fn.__name__ for e in self._ordered()]

    async def run(
        self,
        ctx: _Ctx,
        on_step: Callable[[str], None] | None = None,
    ) -> None:
        """Run each phase on *ctx*.

        *on_step* receives a phase's name once that phase has returned.
        """
        for entry in self._ordered():
            name = entry.fn.__name__
            logger.debug("%s: %s (order %d)", self.name, name, entry.order)
            await entry.fn(ctx)
            if on_step is not None:
                on_step(name)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        phases = ", ".join(f"{e.fn.__name__}({e.order})" for e in self._ordered())
        return f"Pipeline({self.name!r}, [{phases}])"
