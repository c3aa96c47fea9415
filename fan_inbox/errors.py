"""
Error types raised by the inbox core.
"""
from typing import Optional


class InboxError(Exception):
    """Base class for failures surfaced to request handlers."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConversationNotFound(InboxError, LookupError):
    code = "NOT_FOUND"

    def __init__(self, conversation_id: str):
        super().__init__(f"Conversation {conversation_id} not found")
        self.conversation_id = conversation_id


class ValidationIssue(InboxError, ValueError):
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InternalError(InboxError):
    """Unexpected failure while reading, normalizing or writing conversations."""
