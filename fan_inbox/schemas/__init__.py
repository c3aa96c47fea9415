from .conversation import (
    Attachment,
    Conversation,
    ConversationDetail,
    ConversationStatus,
    Fan,
    FanSummary,
    Message,
    MessageCreate,
    MessageDirection,
    PpvAttachment,
    SubscriptionTier,
    TagsUpdate,
    TipAttachment,
)

__all__ = [
    "Attachment",
    "Conversation",
    "ConversationDetail",
    "ConversationStatus",
    "Fan",
    "FanSummary",
    "Message",
    "MessageCreate",
    "MessageDirection",
    "PpvAttachment",
    "SubscriptionTier",
    "TagsUpdate",
    "TipAttachment",
]
