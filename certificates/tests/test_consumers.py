from unittest.mock import AsyncMock, MagicMock, patch

from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser
from django.test import SimpleTestCase

from certificates.consumers import CertificateMetricsConsumer
from certificates.routing import websocket_urlpatterns

METRICS = {
    "pending": 2,
    "ready": 5,
    "failed": 1,
    "stale_pending": 0,
    "ready_by_tier": {"Excellence": 2, "Merit": 3, "Participation": 0},
    "failed_by_tier": {"Excellence": 0, "Merit": 1, "Participation": 0},
    "avg_seconds": 3.2,
    "avg_seconds_by_tier": {"Excellence": 3.5, "Merit": 3.0, "Participation": None},
    "total_seconds": 16.0,
    "certificates_per_sec": 0.4,
    "elapsed_seconds": 12.5,
}


class MetricsConsumerTests(SimpleTestCase):
    def _communicator(self, user):
        communicator = WebsocketCommunicator(URLRouter(websocket_urlpatterns), "/ws/certificates/metrics/")
        communicator.scope["user"] = user
        return communicator

    async def test_anonymous_is_refused(self):
        communicator = self._communicator(AnonymousUser())
        connected, _ = await communicator.connect()
        self.assertFalse(connected)

    @patch("certificates.consumers.get_metrics", return_value=METRICS)
    @patch.object(CertificateMetricsConsumer, "_is_admin", new_callable=AsyncMock, return_value=True)
    async def test_admin_receives_counters(self, mock_is_admin, mock_metrics):
        communicator = self._communicator(MagicMock(is_authenticated=True))
        connected, _ = await communicator.connect()
        self.assertTrue(connected)
        message = await communicator.receive_json_from()
        self.assertEqual(message["type"], "metrics")
        self.assertEqual(message["ready"], 5)
        self.assertEqual(message["certificates_per_sec"], 0.4)
        self.assertEqual(message["failed_by_tier"]["Merit"], 1)
        await communicator.disconnect()

    @patch("certificates.consumers.get_metrics", return_value=None)
    @patch.object(CertificateMetricsConsumer, "_is_admin", new_callable=AsyncMock, return_value=True)
    async def test_redis_down_sends_placeholders(self, mock_is_admin, mock_metrics):
        communicator = self._communicator(MagicMock(is_authenticated=True))
        await communicator.connect()
        message = await communicator.receive_json_from()
        self.assertEqual(message["pending"], "-")
        self.assertIsNone(message["avg_seconds"])
        self.assertIsNone(message["ready_by_tier"])
        await communicator.disconnect()
