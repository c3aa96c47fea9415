"""
Canonical conversation shapes exposed to consumers.
"""
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class SubscriptionTier(str, Enum):
    FREE = "Free"
    BASIC = "Basic"
    VIP = "VIP"


class ConversationStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"


class MessageDirection(str, Enum):
    CREATOR = "creator"
    FAN = "fan"


class CanonicalModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class TipAttachment(CanonicalModel):
    type: Literal["tip"] = "tip"
    amount: float = Field(gt=0)


class PpvAttachment(CanonicalModel):
    type: Literal["ppv"] = "ppv"
    price: float = Field(gt=0)
    label: str


Attachment = Annotated[Union[TipAttachment, PpvAttachment], Field(discriminator="type")]


class Message(CanonicalModel):
    id: str
    body: str
    from_: MessageDirection = Field(alias="from")
    sent_at: str
    attachments: List[Attachment] = []


class Fan(CanonicalModel):
    id: str
    name: str
    avatar: str
    total_spent: float = Field(0, ge=0)
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE
    member_since: str
    tags: List[str] = []
    is_online: bool = False


class Conversation(CanonicalModel):
    id: str
    fan: Fan
    last_message: Optional[Message] = None
    unread_count: int = Field(0, ge=0)
    total_messages: int = Field(0, ge=0)
    status: ConversationStatus = ConversationStatus.ACTIVE


class FanSummary(CanonicalModel):
    id: str
    name: str
    avatar: str
    tags: List[str] = []


class ConversationDetail(CanonicalModel):
    conversation_id: str
    fan: FanSummary
    messages: List[Message] = []


# Request bodies. Fields are optional so that missing values reach the
# inbox service and are reported as validation issues there.

class MessageCreate(BaseModel):
    body: Optional[str] = None
    from_: Optional[str] = Field(None, alias="from")

    class Config:
        populate_by_name = True


class TagsUpdate(BaseModel):
    tags: Optional[List[str]] = None
