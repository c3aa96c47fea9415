"""
Normalization of raw conversation records into canonical shapes.

Raw records come from several generations of exports and disagree on field
names (`Name` vs `name`, `TotalSpent` vs `total_spent`) and on timestamp
encodings (epoch seconds, ISO-8601, free-form date strings). Everything in
here is side-effect free; list queries filter and sort the canonical output.
"""
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

from dateutil import parser as date_parser
from pydantic import TypeAdapter, ValidationError

from .logging_config import normalizer_logger, timed
from .models.conversation import RawConversation
from .schemas.conversation import (
    Attachment,
    Conversation,
    ConversationStatus,
    Fan,
    Message,
    MessageDirection,
    SubscriptionTier,
)

ISO_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}T")
AVATAR_URL = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"
UNKNOWN_FAN_NAME = "Unknown"
TRUTHY_STRINGS = {"true", "1", "yes", "on"}
EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

SORT_REVENUE = "revenue"
SORT_UNREAD = "unread"
SORT_RECENT = "recent"
STATUS_ALL = "all"

_attachment_adapter = TypeAdapter(Attachment)


# ============================================================
# TIMESTAMPS
# ============================================================

def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2023-11-14T22:13:20.000Z"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utc_now() -> str:
    return format_timestamp(datetime.now(timezone.utc))


def normalize_timestamp(value: Any) -> str:
    """
    Convert a raw timestamp to ISO-8601.

    Numbers are epoch seconds, ISO-looking strings pass through unchanged and
    other strings are parsed leniently. Anything unusable becomes the current
    time so the record stays renderable.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return format_timestamp(datetime.fromtimestamp(value, tz=timezone.utc))
        except (OverflowError, OSError, ValueError):
            pass
    elif isinstance(value, str):
        if ISO_PREFIX.match(value):
            return value
        try:
            return format_timestamp(date_parser.parse(value))
        except (ValueError, OverflowError):
            pass

    normalizer_logger.debug("Unparseable timestamp, using current time", raw=repr(value))
    return utc_now()


def parse_timestamp(value: Optional[str]) -> datetime:
    """Parse a canonical timestamp for ordering; unparseable values sort first."""
    if not value:
        return EARLIEST
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        return EARLIEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ============================================================
# FIELD HELPERS
# ============================================================

def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _as_amount(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0
    return amount if amount >= 0 else 0


def _as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUTHY_STRINGS
    return value is True or (isinstance(value, (int, float)) and value == 1)


def _as_count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 0
    return max(count, 0)


def avatar_fallback(name: str) -> str:
    seed = re.sub(r"\s+", "", name.lower())
    return AVATAR_URL.format(seed=quote(seed))


def _tier(value: Any) -> SubscriptionTier:
    if isinstance(value, str):
        for tier in SubscriptionTier:
            if tier.value.lower() == value.strip().lower():
                return tier
    return SubscriptionTier.FREE


def _status(value: Any) -> ConversationStatus:
    if isinstance(value, str) and value.strip().lower() == ConversationStatus.EXPIRED.value:
        return ConversationStatus.EXPIRED
    return ConversationStatus.ACTIVE


def _direction(value: Any) -> MessageDirection:
    if value == MessageDirection.CREATOR.value:
        return MessageDirection.CREATOR
    return MessageDirection.FAN


# ============================================================
# RECORD NORMALIZATION
# ============================================================

def normalize_attachments(raw: Any) -> List[Any]:
    """Keep well-formed tip and ppv attachments, drop everything else."""
    if not isinstance(raw, list):
        return []

    attachments = []
    for item in raw:
        try:
            attachments.append(_attachment_adapter.validate_python(item))
        except ValidationError:
            normalizer_logger.debug("Dropping malformed attachment", attachment=repr(item))
    return attachments


def normalize_message(raw: Dict[str, Any]) -> Message:
    return Message(
        id=str(_first_present(raw, "msg_id", "id") or ""),
        body=str(raw.get("body") or ""),
        from_=_direction(raw.get("from")),
        sent_at=normalize_timestamp(raw.get("sent_at")),
        attachments=normalize_attachments(raw.get("attachments")),
    )


def normalize_fan(raw: Dict[str, Any]) -> Fan:
    name = next(
        (str(raw[key]) for key in ("Name", "name") if raw.get(key) not in (None, "")),
        UNKNOWN_FAN_NAME,
    )
    tags = raw.get("tags")

    return Fan(
        id=str(_first_present(raw, "fanId", "fan_id", "id") or ""),
        name=name,
        avatar=raw.get("avatar") or avatar_fallback(name),
        total_spent=_as_amount(_first_present(raw, "TotalSpent", "total_spent", "totalSpent")),
        subscription_tier=_tier(raw.get("subscription_tier")),
        member_since=normalize_timestamp(raw.get("member_since")),
        tags=[str(tag) for tag in tags] if isinstance(tags, list) else [],
        is_online=_as_flag(raw.get("is_online")),
    )


def normalize_conversation(conversation: RawConversation) -> Conversation:
    record = conversation.record
    last_message = record.get("last_message")

    return Conversation(
        id=conversation.conversation_id,
        fan=normalize_fan(record.get("fan_data") or {}),
        last_message=normalize_message(last_message) if last_message else None,
        unread_count=_as_count(_first_present(record, "unread", "unread_count")),
        total_messages=_as_count(record.get("total_messages")),
        status=_status(_first_present(record, "Status", "status")),
    )


# ============================================================
# LIST QUERIES
# ============================================================

def _last_activity(conversation: Conversation) -> datetime:
    if conversation.last_message is None:
        return EARLIEST
    return parse_timestamp(conversation.last_message.sent_at)


def query_conversations(
    conversations: Iterable[Conversation],
    status: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
) -> List[Conversation]:
    """
    Filter by status, then by free-text search, then sort.

    Sorting is stable, so conversations with equal keys keep their
    incoming relative order.
    """
    results = list(conversations)

    if status and status != STATUS_ALL:
        results = [c for c in results if c.status.value == status]

    if search:
        query = search.lower()
        results = [
            c for c in results
            if query in c.fan.name.lower()
            or (c.last_message is not None and query in c.last_message.body.lower())
        ]

    if sort == SORT_REVENUE:
        results.sort(key=lambda c: c.fan.total_spent, reverse=True)
    elif sort == SORT_UNREAD:
        results.sort(key=lambda c: c.unread_count, reverse=True)
    else:
        results.sort(key=_last_activity, reverse=True)

    return results


@timed(normalizer_logger)
def normalize_conversations(
    raw_conversations: Iterable[RawConversation],
    status: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
) -> List[Conversation]:
    conversations = [normalize_conversation(raw) for raw in raw_conversations]
    return query_conversations(conversations, status=status, search=search, sort=sort)


@timed(normalizer_logger)
def normalize_messages(raw_messages: Iterable[Dict[str, Any]]) -> List[Message]:
    """Canonical messages in chronological order, regardless of storage order."""
    messages = [normalize_message(raw) for raw in raw_messages]
    messages.sort(key=lambda m: parse_timestamp(m.sent_at))
    return messages
