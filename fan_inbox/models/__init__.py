from .conversation import InlineMessages, MessageStorage, RawConversation, ReferencedMessages

__all__ = [
    "InlineMessages",
    "MessageStorage",
    "RawConversation",
    "ReferencedMessages",
]
