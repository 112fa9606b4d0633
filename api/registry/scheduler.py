"""
Background loop that runs the registration tick on a fixed delay.

The loop lives on its own asyncio task, separate from request handling.
`stop()` lets an in-flight tick finish for at most `shutdown_grace_s`, then
cancels it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from core.errors import RegistryProtocolError

logger = logging.getLogger(__name__)

Tick = Callable[[], Awaitable[Any]]


class RegistrationScheduler:
    def __init__(self, tick: Tick, *, interval_s: float = 5.0, shutdown_grace_s: float = 10.0) -> None:
        self._tick = tick
        self.interval_s = interval_s
        self.shutdown_grace_s = shutdown_grace_s
        self._stopping = asyncio.Event()
        self._task: asyncio.Task | None = None
        self.ticks = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return None
        self._stopping.clear()
        self._task = asyncio.create_task(self._run(), name="registration-scheduler")
        logger.info("registration_scheduler_started interval_s=%s", self.interval_s)

    async def _run_once(self) -> None:
        self.ticks += 1
        try:
            outcome = await self._tick()
        except RegistryProtocolError as exc:
            self.failures += 1
            logger.warning("registration_tick_failed tick=%s error=%s", self.ticks, exc)
        except Exception:
            # Keep the loop alive; the next tick starts from scratch.
            self.failures += 1
            logger.exception("registration_tick_crashed tick=%s", self.ticks)
        else:
            logger.debug("registration_tick_ok tick=%s outcome=%s", self.ticks, outcome)

    async def _run(self) -> None:
        while not self._stopping.is_set():
            await self._run_once()
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_s)
            except asyncio.TimeoutError:
                continue

    async def stop(self) -> None:
        self._stopping.set()
        task, self._task = self._task, None
        if task is None or task.done():
            return None

        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=self.shutdown_grace_s)
        except asyncio.TimeoutError:
            logger.warning("registration_tick_abandoned grace_s=%s", self.shutdown_grace_s)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("registration_scheduler_stopped")
