import unittest

from backend.db import AnalysisRecord, FeedbackRecord, InMemoryDbClient
from shared.types import SortKey
from triage import reporting


def _row(content, created_at, sentiment=None, urgency=None, impact=None):
    feedback = FeedbackRecord(content=content, created_at=created_at)
    analysis = None
    if sentiment:
        analysis = AnalysisRecord(
            feedback_id=feedback.id,
            sentiment=sentiment,
            urgency=urgency,
            impact=impact,
        )
    return reporting.FeedbackRow(feedback=feedback, analysis=analysis)


class SortFeedbackRowsTest(unittest.TestCase):

    def setUp(self):
        self.rows = [
            _row("pending", 4.0),
            _row("happy", 1.0, "positive", "low", "nice_to_have"),
            _row("angry", 2.0, "negative", "high", "critical"),
            _row("meh", 3.0, "neutral", "medium", "feature_request"),
        ]

    def _contents(self, sort_by):
        return [
            r.feedback.content
            for r in reporting.sort_feedback_rows(self.rows, sort_by)
        ]

    def test_sort_by_date(self):
        self.assertEqual(
            self._contents(SortKey.DATE), ["pending", "meh", "angry", "happy"]
        )

    def test_sort_by_labels_puts_unanalyzed_last(self):
        expected = ["angry", "meh", "happy", "pending"]
        self.assertEqual(self._contents(SortKey.URGENCY), expected)
        self.assertEqual(self._contents(SortKey.SENTIMENT), expected)
        self.assertEqual(self._contents(SortKey.IMPACT), expected)

    def test_unknown_label_sorts_with_unanalyzed(self):
        self.rows.append(_row("odd", 5.0, "ecstatic", "urgent", "huge"))
        self.assertEqual(self._contents(SortKey.URGENCY)[-2:], ["pending", "odd"])


class AnalyticsTest(unittest.TestCase):

    def test_counts(self):
        db = InMemoryDbClient()
        for content, labels in [
            ("a", ("negative", "high", "critical")),
            ("b", ("positive", "high", "feature_request")),
            ("c", ("positive", "low", "nice_to_have")),
            ("d", None),
        ]:
            feedback = db.save_feedback(FeedbackRecord(content=content))
            if labels:
                sentiment, urgency, impact = labels
                db.save_analysis(
                    AnalysisRecord(
                        feedback_id=feedback.id,
                        sentiment=sentiment,
                        urgency=urgency,
                        impact=impact,
                    )
                )

        analytics = reporting.build_analytics(db)

        self.assertEqual(analytics["total_feedback"], 4)
        self.assertEqual(analytics["high_priority"], 2)
        self.assertEqual(analytics["positive"], 2)
        self.assertEqual(
            analytics["sentiment"], {"positive": 2, "neutral": 0, "negative": 1}
        )
        self.assertEqual(analytics["urgency"], {"high": 2, "medium": 0, "low": 1})


if __name__ == "__main__":
    unittest.main()
