"""
Background provider health checks

Runs ProviderHealthService on an interval and logs changes of the system
verdict. Only the latest snapshot is kept; there is no history.
Enabled with HEALTH_CHECK_ENABLED.
"""
import asyncio
import logging
from typing import List, Optional

from shipquote.services.provider_health import ProviderHealthService, SystemState, SystemStatus

logger = logging.getLogger(__name__)

HEALTH_CHECK_INTERVAL_SECONDS = 60


class HealthCheckRunner:
    """
    Manages the periodic health check loop.
    """

    def __init__(self, health_service: ProviderHealthService, interval_seconds: float = HEALTH_CHECK_INTERVAL_SECONDS):
        self.health_service = health_service
        self.interval_seconds = interval_seconds
        self._running = False
        self._tasks: List[asyncio.Task] = []
        self._latest: Optional[SystemStatus] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def latest(self) -> Optional[SystemStatus]:
        return self._latest

    async def start(self):
        """Start the health check loop."""
        if self._running:
            logger.warning("[HEALTH] Health checks already running")
            return

        self._running = True
        logger.info(f"[HEALTH] Starting health checks every {self.interval_seconds}s")
        self._tasks = [asyncio.create_task(self._health_check_loop())]

    async def stop(self):
        """Stop the health check loop."""
        self._running = False

        for task in self._tasks:
            task.cancel()

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
            self._tasks = []

        logger.info("[HEALTH] Health checks stopped")

    async def _health_check_loop(self):
        while self._running:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"[HEALTH] Health check error: {e}")

            await asyncio.sleep(self.interval_seconds)

    async def run_once(self) -> SystemStatus:
        """Run a single health check and record the snapshot."""
        status = await self.health_service.get_system_status()
        previous = self._latest.status if self._latest else None
        self._latest = status

        if previous is not None and previous != status.status:
            log = logger.warning if status.status != SystemState.ONLINE else logger.info
            log(f"[HEALTH] System status changed: {previous.value} -> {status.status.value}")

        return status
