from unittest.mock import MagicMock, call, patch

import redis
from django.test import SimpleTestCase

from certificates.services import metrics


class MetricsCounterTests(SimpleTestCase):
    def setUp(self):
        self.cli = MagicMock()
        self.pipe = self.cli.pipeline.return_value
        patcher = patch("certificates.services.metrics._client", return_value=self.cli)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_failure_is_counted_once_per_certificate(self):
        self.cli.hsetnx.side_effect = [1, 0]
        metrics.mark_failed(7, "Merit")
        metrics.mark_failed(7, "Merit")
        self.pipe.hincrby.assert_called_once_with(metrics.FAILED, "Merit", 1)
        self.pipe.zrem.assert_called_once_with(metrics.QUEUED, 7)

    def test_successful_retry_moves_failure_to_ready(self):
        self.pipe.execute.side_effect = [[b"FAILED:Merit", 1, 0], [None, None, None, None]]
        metrics.mark_ready(7, "Merit", 2.5)
        self.pipe.hincrby.assert_has_calls(
            [call(metrics.FAILED, "Merit", -1), call(metrics.READY, "Merit", 1), call(metrics.TIMING, "Merit:count", 1)]
        )
        self.pipe.hincrbyfloat.assert_called_once_with(metrics.TIMING, "Merit:sum", 2.5)

    def test_ready_is_not_counted_twice(self):
        self.pipe.execute.return_value = [b"READY:Excellence", 0, 0]
        metrics.mark_ready(7, "Excellence", 1.0)
        self.pipe.hincrby.assert_not_called()

    def test_requeue_withdraws_previous_outcome(self):
        self.pipe.execute.return_value = [b"READY:Excellence", 1, 1]
        metrics.mark_pending(7)
        self.cli.hincrby.assert_called_once_with(metrics.READY, "Excellence", -1)
        self.pipe.zadd.assert_called_once()

    def test_first_queue_has_nothing_to_withdraw(self):
        self.pipe.execute.return_value = [None, 0, 1]
        metrics.mark_pending(7)
        self.cli.hincrby.assert_not_called()

    def test_get_metrics_reports_per_tier(self):
        self.cli.zcard.return_value = 2
        self.cli.zcount.return_value = 1
        self.cli.hgetall.side_effect = [
            {b"Excellence": b"3", b"Merit": b"1"},
            {b"Merit": b"1"},
            {b"Excellence:sum": b"9.0", b"Excellence:count": b"3", b"Merit:sum": b"4.0", b"Merit:count": b"1"},
        ]
        self.cli.get.return_value = None

        result = metrics.get_metrics()
        self.assertEqual(result["pending"], 2)
        self.assertEqual(result["stale_pending"], 1)
        self.assertEqual(result["ready"], 4)
        self.assertEqual(result["failed"], 1)
        self.assertEqual(result["ready_by_tier"], {"Excellence": 3, "Merit": 1, "Participation": 0})
        self.assertEqual(result["failed_by_tier"], {"Excellence": 0, "Merit": 1, "Participation": 0})
        self.assertEqual(result["avg_seconds"], 3.25)
        self.assertEqual(result["avg_seconds_by_tier"], {"Excellence": 3.0, "Merit": 4.0, "Participation": None})
        self.assertIsNone(result["elapsed_seconds"])
        self.assertIsNone(result["certificates_per_sec"])


class MetricsUnavailableTests(SimpleTestCase):
    @patch("certificates.services.metrics._client")
    def test_redis_down_gives_none(self, mock_client):
        mock_client.return_value.zcard.side_effect = redis.ConnectionError("refused")
        self.assertIsNone(metrics.get_metrics())
