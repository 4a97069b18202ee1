import unittest
from unittest.mock import patch

from backend.config import Settings
from backend.db import FeedbackRecord, InMemoryDbClient
from backend.queue import InMemoryAnalysisQueue
from backend.worker import drain_queue, process_next
from models.gemini import GeminiApiError


class WorkerTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.queue = InMemoryAnalysisQueue()
        self.settings = Settings(gemini_api_key="test-key")

    @patch("backend.worker.analyze_feedback")
    def test_process_next_analyzes_queued_feedback(self, mock_analyze):
        feedback = self.db.save_feedback(FeedbackRecord(content="Checkout fails"))
        self.queue.enqueue(feedback.id)

        processed = process_next(
            db=self.db, queue=self.queue, settings=self.settings, block=False
        )

        self.assertTrue(processed)
        mock_analyze.assert_called_once_with(
            self.db, feedback.id, "Checkout fails", settings=self.settings
        )

    def test_process_next_no_items(self):
        processed = process_next(
            db=self.db, queue=self.queue, settings=self.settings, block=False
        )
        self.assertFalse(processed)

    @patch("backend.worker.analyze_feedback")
    def test_process_next_skips_unknown_feedback(self, mock_analyze):
        self.queue.enqueue("missing")
        processed = process_next(
            db=self.db, queue=self.queue, settings=self.settings, block=False
        )
        self.assertTrue(processed)
        mock_analyze.assert_not_called()

    @patch("backend.worker.analyze_feedback")
    def test_drain_queue_continues_after_failure(self, mock_analyze):
        mock_analyze.side_effect = [GeminiApiError("Gemini API error: 503"), None]
        for content in ("first", "second"):
            feedback = self.db.save_feedback(FeedbackRecord(content=content))
            self.queue.enqueue(feedback.id)

        processed = drain_queue(db=self.db, queue=self.queue, settings=self.settings)

        self.assertEqual(processed, 2)
        self.assertEqual(mock_analyze.call_count, 2)
        self.assertEqual(len(self.queue), 0)


if __name__ == "__main__":
    unittest.main()
