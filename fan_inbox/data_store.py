"""
In-memory conversation store.

Seeded once from a JSON document and mutated only by appending messages and
replacing fan tags. Nothing is persisted; `reset()` restores the seed.
"""
import copy
import json
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import ConversationNotFound
from .logging_config import store_logger
from .models.conversation import InlineMessages, RawConversation, ReferencedMessages

DEFAULT_SEED_PATH = Path(__file__).parent / "data" / "raw_mock_data.json"


def load_seed(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Read the seed document from disk."""
    seed_path = Path(path) if path else DEFAULT_SEED_PATH
    with open(seed_path, encoding="utf-8") as f:
        return json.load(f)


def _to_raw_conversation(raw: Dict[str, Any]) -> RawConversation:
    record = copy.deepcopy(raw)
    conversation_id = record["conversation_id"]
    inline = record.pop("inline_messages", None)
    refs = record.pop("message_refs", None)

    if isinstance(inline, list):
        storage = InlineMessages(messages=inline)
    elif refs:
        storage = ReferencedMessages(key=refs if isinstance(refs, str) else conversation_id)
    else:
        storage = InlineMessages()

    return RawConversation(conversation_id=conversation_id, record=record, storage=storage)


class ConversationStore:
    """Authoritative holder of raw conversation and message records."""

    def __init__(self, seed: Dict[str, Any]):
        self._seed = copy.deepcopy(seed)
        self._lock = threading.RLock()
        self._conversations: List[RawConversation] = []
        self._referenced: Dict[str, List[Dict[str, Any]]] = {}
        self._load()

    @classmethod
    def from_file(cls, path: Optional[Union[str, Path]] = None) -> "ConversationStore":
        return cls(load_seed(path))

    def _load(self) -> None:
        self._conversations = [
            _to_raw_conversation(raw) for raw in self._seed.get("raw_conversations", [])
        ]
        self._referenced = copy.deepcopy(self._seed.get("referenced_messages", {}))

    def list_all(self) -> List[RawConversation]:
        """All conversation records, in seed order. Not copies."""
        with self._lock:
            return list(self._conversations)

    def find_by_id(self, conversation_id: str) -> Optional[RawConversation]:
        with self._lock:
            for conversation in self._conversations:
                if conversation.conversation_id == conversation_id:
                    return conversation
        return None

    def get(self, conversation_id: str) -> RawConversation:
        conversation = self.find_by_id(conversation_id)
        if conversation is None:
            raise ConversationNotFound(conversation_id)
        return conversation

    def messages_for(self, conversation: RawConversation) -> List[Dict[str, Any]]:
        """Raw messages of a conversation, in storage order."""
        with self._lock:
            storage = conversation.storage
            if isinstance(storage, InlineMessages):
                return list(storage.messages)
            if isinstance(storage, ReferencedMessages):
                return list(self._referenced.get(storage.key, []))
            raise TypeError(f"Unknown message storage: {storage!r}")

    def append_message(self, conversation_id: str, message: Dict[str, Any]) -> Dict[str, Any]:
        """Append a raw message and update the conversation summary fields."""
        with self._lock:
            conversation = self.get(conversation_id)
            storage = conversation.storage
            if isinstance(storage, InlineMessages):
                storage.messages.append(message)
            elif isinstance(storage, ReferencedMessages):
                self._referenced.setdefault(storage.key, []).append(message)
            else:
                raise TypeError(f"Unknown message storage: {storage!r}")

            record = conversation.record
            record["last_message"] = {
                "msg_id": message.get("msg_id"),
                "body": message.get("body"),
                "from": message.get("from"),
                "sent_at": message.get("sent_at"),
                "attachments": list(message.get("attachments") or []),
            }
            record["total_messages"] = (record.get("total_messages") or 0) + 1

        store_logger.info(
            "Message appended",
            conversation_id=conversation_id,
            storage=type(storage).__name__,
            total_messages=record["total_messages"],
        )
        return message

    def replace_tags(self, conversation_id: str, tags: List[str]) -> RawConversation:
        """Overwrite the fan's tag list wholesale."""
        with self._lock:
            conversation = self.get(conversation_id)
            conversation.fan_data["tags"] = list(tags)

        store_logger.info("Tags replaced", conversation_id=conversation_id, tag_count=len(tags))
        return conversation

    def reset(self) -> None:
        """Restore the seed content."""
        with self._lock:
            self._load()
        store_logger.info("Store reset", conversations=len(self._conversations))

    def stats(self) -> Dict[str, int]:
        with self._lock:
            inline = sum(1 for c in self._conversations if isinstance(c.storage, InlineMessages))
            return {
                "conversations": len(self._conversations),
                "inline": inline,
                "referenced": len(self._conversations) - inline,
            }
