import threading
import unittest
from unittest.mock import patch

from redis import exceptions as redis_exceptions

from backend.queue import InMemoryAnalysisQueue, RedisAnalysisQueue


class InMemoryAnalysisQueueTests(unittest.TestCase):
    def test_fifo_order(self):
        queue = InMemoryAnalysisQueue()
        for feedback_id in ("a", "b", "c"):
            self.assertTrue(queue.enqueue(feedback_id))
        self.assertEqual(
            [queue.dequeue(block=False) for _ in range(4)], ["a", "b", "c", None]
        )

    def test_pending_id_is_not_queued_twice(self):
        queue = InMemoryAnalysisQueue()
        self.assertTrue(queue.enqueue("a"))
        self.assertFalse(queue.enqueue("a"))
        self.assertEqual(len(queue), 1)

        self.assertEqual(queue.dequeue(block=False), "a")
        # Taken by a worker, so it can be queued again.
        self.assertTrue(queue.enqueue("a"))

    def test_concurrent_drains_take_each_id_once(self):
        queue = InMemoryAnalysisQueue()
        ids = [f"feedback-{i}" for i in range(500)]
        for feedback_id in ids:
            queue.enqueue(feedback_id)

        taken = []
        errors = []
        start = threading.Barrier(8)

        def drain():
            start.wait()
            try:
                while True:
                    feedback_id = queue.dequeue(block=False)
                    if feedback_id is None:
                        return
                    taken.append(feedback_id)
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=drain) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertEqual(sorted(taken), sorted(ids))
        self.assertEqual(len(queue), 0)


@patch("backend.queue.redis.Redis.from_url")
class RedisAnalysisQueueTests(unittest.TestCase):
    def test_enqueue_marks_pending_then_pushes(self, mock_from_url):
        client = mock_from_url.return_value
        client.sadd.side_effect = [1, 0]
        queue = RedisAnalysisQueue("redis://localhost:6379/0")

        self.assertTrue(queue.enqueue("a"))
        self.assertFalse(queue.enqueue("a"))

        client.sadd.assert_called_with("triage:analysis:pending", "a")
        client.rpush.assert_called_once_with("triage:analysis", "a")

    def test_dequeue_clears_pending(self, mock_from_url):
        client = mock_from_url.return_value
        client.lpop.return_value = b"a"
        queue = RedisAnalysisQueue("redis://localhost:6379/0", queue_key="q")

        self.assertEqual(queue.dequeue(block=False), "a")
        client.srem.assert_called_once_with("q:pending", "a")

    def test_blocking_dequeue_timeout(self, mock_from_url):
        client = mock_from_url.return_value
        client.blpop.return_value = None
        queue = RedisAnalysisQueue("redis://localhost:6379/0")

        self.assertIsNone(queue.dequeue(block=True, timeout=2))
        client.blpop.assert_called_once_with("triage:analysis", timeout=2)
        client.srem.assert_not_called()

    def test_connection_error_reconnects(self, mock_from_url):
        client = mock_from_url.return_value
        client.lpop.side_effect = redis_exceptions.ConnectionError("reset")
        queue = RedisAnalysisQueue("redis://localhost:6379/0")

        self.assertIsNone(queue.dequeue(block=False))
        self.assertEqual(mock_from_url.call_count, 2)


if __name__ == "__main__":
    unittest.main()
