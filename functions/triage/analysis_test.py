import unittest
from unittest.mock import patch

from backend.config import Settings
from backend.db import AnalysisRecord, FeedbackRecord, InMemoryDbClient
from models.gemini import GeminiApiError, GeminiInvalidResponseException
from triage import analysis
from triage.errors import TriageError


def _classification(**labels):
    values = {"sentiment": "negative", "urgency": "high", "impact": "critical"}
    values.update(labels)
    return analysis.FeedbackClassification(**values)


class AnalyzeFeedbackTest(unittest.TestCase):

    def setUp(self):
        self.db = InMemoryDbClient()
        self.settings = Settings(gemini_api_key="test-key")
        self.feedback = self.db.save_feedback(
            FeedbackRecord(content="Export keeps timing out")
        )

    @patch("models.gemini.call_embed", return_value=[0.5, 0.5])
    @patch("models.gemini.call_predict_with_schema")
    def test_stores_labels_and_embedding(self, mock_classify, mock_embed):
        mock_classify.return_value = _classification()

        record = analysis.analyze_feedback(
            self.db, self.feedback.id, self.feedback.content, settings=self.settings
        )

        self.assertEqual(
            (record.sentiment, record.urgency, record.impact),
            ("negative", "high", "critical"),
        )
        self.assertEqual(self.db.get_analysis(self.feedback.id).embedding, [0.5, 0.5])
        mock_embed.assert_called_once_with(
            "Export keeps timing out",
            model=self.settings.embedding_model,
            api_key="test-key",
        )

    @patch("models.gemini.call_embed", side_effect=GeminiApiError("Gemini API error: 500"))
    @patch("models.gemini.call_predict_with_schema")
    def test_embedding_failure_is_tolerated(self, mock_classify, mock_embed):
        mock_classify.return_value = _classification(sentiment="neutral")

        record = analysis.analyze_feedback(
            self.db, self.feedback.id, self.feedback.content, settings=self.settings
        )

        self.assertEqual(record.sentiment, "neutral")
        self.assertIsNone(record.embedding)

    @patch("models.gemini.call_predict_with_schema")
    def test_invalid_classification_stores_nothing(self, mock_classify):
        mock_classify.side_effect = GeminiInvalidResponseException("Malformed JSON")

        with self.assertRaises(GeminiInvalidResponseException):
            analysis.analyze_feedback(
                self.db, self.feedback.id, self.feedback.content, settings=self.settings
            )
        self.assertIsNone(self.db.get_analysis(self.feedback.id))

    def test_missing_inputs_raise(self):
        with self.assertRaisesRegex(TriageError, "Missing feedbackId or content"):
            analysis.analyze_feedback(self.db, "", "text", settings=self.settings)
        with self.assertRaisesRegex(TriageError, "Missing feedbackId or content"):
            analysis.analyze_feedback(
                self.db, self.feedback.id, None, settings=self.settings
            )

    def test_unknown_feedback_raises(self):
        with self.assertRaisesRegex(TriageError, "Feedback missing not found"):
            analysis.analyze_feedback(self.db, "missing", "text", settings=self.settings)

    @patch("models.gemini.call_embed", return_value=[1.0])
    @patch("models.gemini.call_predict_with_schema")
    def test_reanalysis_keeps_cluster_assignment(self, mock_classify, mock_embed):
        mock_classify.return_value = _classification()
        first = analysis.analyze_feedback(
            self.db, self.feedback.id, self.feedback.content, settings=self.settings
        )
        first.cluster_id = "cluster-1"
        mock_classify.return_value = _classification(urgency="low")

        second = analysis.analyze_feedback(
            self.db, self.feedback.id, self.feedback.content, settings=self.settings
        )

        self.assertEqual(second.id, first.id)
        self.assertEqual(second.cluster_id, "cluster-1")
        self.assertEqual(len(self.db.list_analyses()), 1)

    @patch("models.gemini.call_embed", return_value=[1.0])
    @patch("models.gemini.call_predict_with_schema")
    def test_analyze_pending_counts_failures(self, mock_classify, mock_embed):
        other = self.db.save_feedback(FeedbackRecord(content="Second"))
        self.db.save_analysis(
            AnalysisRecord(
                feedback_id=self.db.save_feedback(FeedbackRecord(content="done")).id,
                sentiment="positive",
                urgency="low",
                impact="nice_to_have",
            )
        )
        mock_classify.side_effect = [
            _classification(),
            GeminiApiError("Gemini API error: 429"),
        ]

        succeeded, failed = analysis.analyze_pending(self.db, settings=self.settings)

        self.assertEqual((succeeded, failed), (1, 1))
        self.assertEqual(mock_classify.call_count, 2)
        remaining = self.db.list_unanalyzed_feedback()
        self.assertEqual(len(remaining), 1)
        self.assertIn(remaining[0].id, (self.feedback.id, other.id))


if __name__ == "__main__":
    unittest.main()
