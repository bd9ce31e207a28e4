import asyncio
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from flight_booking.config import settings
from flight_booking.database import SessionLocal, session_scope
from flight_booking.promotions.service import PromotionService

logger = logging.getLogger(__name__)

class PromotionStatusSweeper:
    """Periodically recomputes promotion statuses from their validity windows"""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        interval_seconds: Optional[int] = None
    ):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds or settings.PROMO_SWEEP_INTERVAL_SECONDS
        self.is_running = False
        self.last_result = None
        self._task: Optional[asyncio.Task] = None

    def sweep_once(self):
        with session_scope(self.session_factory) as db:
            return PromotionService(db).refresh_statuses()

    async def run(self):
        """Sweep immediately, then every ``interval_seconds`` until stopped"""
        self.is_running = True
        while self.is_running:
            try:
                self.last_result = await asyncio.to_thread(self.sweep_once)
            except Exception as e:
                logger.error(f"Error updating promotion statuses: {e}")
            await asyncio.sleep(self.interval_seconds)

    def start(self) -> asyncio.Task:
        if not self._task or self._task.done():
            self._task = asyncio.create_task(self.run())
            logger.info(f"Promotion status sweeper started (every {self.interval_seconds}s)")
        return self._task

    async def stop(self):
        self.is_running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Promotion status sweeper stopped")

promotion_sweeper = PromotionStatusSweeper()
