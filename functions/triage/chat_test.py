import unittest
from unittest.mock import patch

from backend.config import Settings
from backend.db import AnalysisRecord, FeedbackRecord, InMemoryDbClient
from models.gemini import GeminiApiError
from triage import chat
from triage.errors import ConversationNotFound, TriageError


class ChatWithFeedbackTest(unittest.TestCase):

    def setUp(self):
        self.db = InMemoryDbClient()
        self.settings = Settings(gemini_api_key="test-key")

    def test_conversation_title_truncates(self):
        self.assertEqual(chat.conversation_title("short"), "short")
        self.assertEqual(chat.conversation_title("x" * 60), "x" * 50 + "...")

    def test_feedback_context_marks_unanalyzed(self):
        analyzed = self.db.save_feedback(
            FeedbackRecord(content="Crash on save", created_at=2.0)
        )
        self.db.save_analysis(
            AnalysisRecord(
                feedback_id=analyzed.id,
                sentiment="negative",
                urgency="high",
                impact="critical",
            )
        )
        self.db.save_feedback(
            FeedbackRecord(content="Add tags", source="csv", created_at=1.0)
        )

        context = chat.build_feedback_context(self.db)

        self.assertEqual(
            context.splitlines(),
            [
                'Feedback: "Crash on save" | Source: manual | Sentiment: negative'
                " | Urgency: high | Impact: critical",
                'Feedback: "Add tags" | Source: csv | Sentiment: N/A'
                " | Urgency: N/A | Impact: N/A",
            ],
        )

    @patch("models.gemini.call_chat", return_value="Here is a summary")
    def test_new_conversation_is_titled_from_message(self, mock_chat):
        reply, conversation = chat.chat_with_feedback(
            self.db, "  Summarize everything  ", settings=self.settings, user_id="u1"
        )

        self.assertEqual(reply, "Here is a summary")
        self.assertEqual(conversation.title, "Summarize everything")
        self.assertEqual(conversation.user_id, "u1")
        messages = self.db.list_chat_messages(conversation.id)
        self.assertEqual(
            [(m.role, m.content) for m in messages],
            [("user", "Summarize everything"), ("assistant", "Here is a summary")],
        )
        self.assertEqual(messages[0].created_at, messages[1].created_at)
        self.assertEqual(
            mock_chat.call_args.args[0],
            [{"role": "user", "content": "Summarize everything"}],
        )

    def test_empty_message_raises(self):
        with self.assertRaisesRegex(TriageError, "Missing message"):
            chat.chat_with_feedback(self.db, "  ", settings=self.settings)

    def test_unknown_conversation_raises(self):
        with self.assertRaises(ConversationNotFound) as ctx:
            chat.chat_with_feedback(
                self.db, "hello", "nope", settings=self.settings
            )
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.conversation_id, "nope")

    @patch("models.gemini.call_chat", side_effect=GeminiApiError("Gemini API error: 429"))
    def test_failed_reply_keeps_history_unchanged(self, mock_chat):
        conversation = chat.start_conversation(self.db, "Existing")

        with self.assertRaises(GeminiApiError):
            chat.chat_with_feedback(
                self.db, "hello", conversation.id, settings=self.settings
            )

        self.assertEqual(self.db.list_chat_messages(conversation.id), [])


if __name__ == "__main__":
    unittest.main()
