import asyncio
import contextlib

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer

from accounts.permissions import ADMIN, roles_for
from certificates.services.metrics import get_metrics

METRIC_KEYS = (
    "pending",
    "ready",
    "failed",
    "stale_pending",
    "ready_by_tier",
    "failed_by_tier",
    "avg_seconds",
    "avg_seconds_by_tier",
    "total_seconds",
    "certificates_per_sec",
    "elapsed_seconds",
)
COUNTER_KEYS = ("pending", "ready", "failed", "stale_pending")


class CertificateMetricsConsumer(AsyncJsonWebsocketConsumer):
    """
    Pushes certificate generation counters to connected admin clients every
    few seconds so the dashboard does not have to poll.
    """

    interval = 3

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated or not await self._is_admin(user):
            await self.close()
            return
        await self.accept()
        self._running = True
        await self.send_metrics()
        self._task = asyncio.create_task(self._loop())

    @database_sync_to_async
    def _is_admin(self, user):
        return ADMIN in roles_for(user)

    async def disconnect(self, close_code):
        self._running = False
        if hasattr(self, "_task"):
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

    async def _loop(self):
        while self._running:
            await asyncio.sleep(self.interval)
            await self.send_metrics()

    async def send_metrics(self):
        metrics = await asyncio.to_thread(get_metrics)
        if metrics is None:
            payload = {key: ("-" if key in COUNTER_KEYS else None) for key in METRIC_KEYS}
        else:
            payload = {key: metrics[key] for key in METRIC_KEYS}
        await self.send_json({"type": "metrics", **payload})
