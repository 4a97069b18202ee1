"""Exceptions raised by the triage services."""


class TriageError(Exception):
    """A request could not be completed."""

    status_code = 500


class ConversationNotFound(TriageError):
    status_code = 404

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation {conversation_id} not found")
        self.conversation_id = conversation_id
