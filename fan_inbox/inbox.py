"""
Inbox service: the operations request handlers call.

Reads go through the cache first and fall back to normalizing the raw store.
Writes go to the store and then invalidate the cache. Because list views are
cached per status/search/sort permutation and those keys are not tracked
individually, every write flushes the whole cache.

A service-level lock serializes cache-miss computation with writes, so a read
that started before a write can never store its stale view after the flush.
"""
import threading
import time
import uuid
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, List, Optional, Tuple

from .cache import TTLCache, detail_cache_key, list_cache_key
from .config import get_settings
from .data_store import ConversationStore
from .errors import InboxError, InternalError, ValidationIssue
from .logging_config import api_logger
from .normalizer import (
    SORT_RECENT,
    normalize_conversation,
    normalize_conversations,
    normalize_messages,
    utc_now,
)
from .schemas.conversation import (
    Conversation,
    ConversationDetail,
    FanSummary,
    Message,
    MessageDirection,
)

DIRECTIONS = {d.value for d in MessageDirection}


@contextmanager
def _operation(name: str, **context):
    """Re-raise unexpected failures as InternalError; inbox errors pass through."""
    try:
        yield
    except InboxError:
        raise
    except Exception as e:
        api_logger.error(f"{name} failed", error=e, operation=name, **context)
        raise InternalError(f"{name} failed") from e


def _new_message_id() -> str:
    return f"msg_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


class InboxService:
    def __init__(self, store: ConversationStore, cache: TTLCache):
        self.store = store
        self.cache = cache
        self._lock = threading.RLock()

    def list_conversations(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> Tuple[List[Conversation], bool]:
        """Return (conversations, served_from_cache)."""
        sort = sort or SORT_RECENT
        key = list_cache_key(status, search, sort)
        with _operation("list_conversations", status=status, search=search, sort=sort), self._lock:
            cached = self.cache.get(key)
            if cached is not None:
                return cached, True

            conversations = normalize_conversations(
                self.store.list_all(), status=status, search=search, sort=sort
            )
            self.cache.set(key, conversations)
            return conversations, False

    def get_conversation_detail(self, conversation_id: str) -> Tuple[ConversationDetail, bool]:
        """Return (detail, served_from_cache). Raises ConversationNotFound."""
        key = detail_cache_key(conversation_id)
        with _operation("get_conversation_detail", conversation_id=conversation_id), self._lock:
            cached = self.cache.get(key)
            if cached is not None:
                return cached, True

            raw = self.store.get(conversation_id)
            conversation = normalize_conversation(raw)
            detail = ConversationDetail(
                conversation_id=conversation_id,
                fan=FanSummary(
                    id=conversation.fan.id,
                    name=conversation.fan.name,
                    avatar=conversation.fan.avatar,
                    tags=conversation.fan.tags,
                ),
                messages=normalize_messages(self.store.messages_for(raw)),
            )
            self.cache.set(key, detail)
            return detail, False

    def append_message(self, conversation_id: str, body: Any, direction: Any) -> Message:
        """Store a new message. Raises ValidationIssue or ConversationNotFound."""
        if not isinstance(body, str) or not body.strip():
            raise ValidationIssue("Message body is required", field="body")
        if not isinstance(direction, str) or direction not in DIRECTIONS:
            raise ValidationIssue("Valid from field is required (creator or fan)", field="from")

        with _operation("append_message", conversation_id=conversation_id), self._lock:
            self.store.get(conversation_id)
            message = {
                "msg_id": _new_message_id(),
                "body": body,
                "from": direction,
                "sent_at": utc_now(),
                "attachments": [],
            }
            self.store.append_message(conversation_id, message)
            self._invalidate(conversation_id)

            return Message(
                id=message["msg_id"],
                body=message["body"],
                from_=direction,
                sent_at=message["sent_at"],
                attachments=[],
            )

    def replace_tags(self, conversation_id: str, tags: Any) -> Conversation:
        """Replace the fan's tags wholesale. Raises ValidationIssue or ConversationNotFound."""
        if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
            raise ValidationIssue("Tags array is required", field="tags")

        with _operation("replace_tags", conversation_id=conversation_id), self._lock:
            raw = self.store.replace_tags(conversation_id, tags)
            self._invalidate(conversation_id)
            return normalize_conversation(raw)

    def reset_store(self) -> None:
        with _operation("reset_store"), self._lock:
            self.store.reset()
            self.cache.clear_all()

    def _invalidate(self, conversation_id: str) -> None:
        self.cache.delete(detail_cache_key(conversation_id))
        self.cache.clear_all()


@lru_cache()
def get_inbox() -> InboxService:
    """Process-wide inbox service, seeded on first use."""
    settings = get_settings()
    store = ConversationStore.from_file(settings.seed_path)
    cache = TTLCache(ttl_seconds=settings.cache_ttl_seconds)
    return InboxService(store, cache)
