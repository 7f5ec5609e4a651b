"""Periodic distribution queue runner."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from preekbot.config import DistributionConfig

if TYPE_CHECKING:
    from preekbot.application.use_cases.process_queue import ProcessQueueUseCase
    from preekbot.application.use_cases.promote_scheduled import (
        PromoteScheduledUseCase,
    )

logger = logging.getLogger(__name__)


class QueueRunner:
    """Runs promote + process passes at a fixed interval.

    A stop signal prevents new passes from starting; a pass in progress
    finishes its tickets.
    """

    def __init__(
        self,
        promote_usecase: PromoteScheduledUseCase,
        process_usecase: ProcessQueueUseCase,
        config: DistributionConfig,
    ) -> None:
        """Initialize the runner.

        Args:
            promote_usecase: Moves due scheduled tickets to the queue.
            process_usecase: Drains queued tickets.
            config: Distribution configuration (batch size, interval).
        """
        self._promote_usecase = promote_usecase
        self._process_usecase = process_usecase
        self._config = config
        # set() = stopped, clear() = running
        self._stop_event = asyncio.Event()
        self._stop_event.set()

    async def run_once(self, limit: int | None = None) -> tuple[int, int]:
        """Run a single promote + process pass.

        Args:
            limit: Ticket limit (defaults to batch_size).

        Returns:
            (promoted count, processed count)
        """
        promoted = 0
        try:
            promoted = await self._promote_usecase.execute()
        except Exception:
            # 昇格に失敗しても QUEUED のチケットは処理する
            logger.exception("Promoting scheduled tickets failed")

        processed = await self._process_usecase.execute(
            limit or self._config.batch_size
        )
        if promoted or processed:
            logger.info(
                "Queue pass finished: promoted=%d, processed=%d", promoted, processed
            )
        return promoted, processed

    async def start(self, limit: int | None = None) -> None:
        """Run passes until stop() is called."""
        if not self._stop_event.is_set():
            logger.warning("QueueRunner.start() called while already running; ignoring.")
            return
        self._stop_event.clear()
        logger.info(
            "QueueRunner started (interval=%.1fs)", self._config.interval_seconds
        )

        while not self._stop_event.is_set():
            try:
                await self.run_once(limit)
            except Exception as e:
                logger.error(
                    "Queue pass failed (interval=%.1fs): %s",
                    self._config.interval_seconds,
                    e,
                )

            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=self._config.interval_seconds
                )
                break
            except asyncio.TimeoutError:
                pass

        logger.info("QueueRunner stopped")

    async def stop(self) -> None:
        """Signal the runner to stop after the current pass."""
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        return not self._stop_event.is_set()
