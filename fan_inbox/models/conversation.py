"""
Raw conversation records as they are held by the in-memory store.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union


@dataclass
class InlineMessages:
    """Message history embedded in the conversation record itself."""
    messages: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class ReferencedMessages:
    """Message history kept in the store's side table under `key`."""
    key: str


MessageStorage = Union[InlineMessages, ReferencedMessages]


@dataclass
class RawConversation:
    conversation_id: str
    record: Dict[str, Any]
    storage: MessageStorage

    @property
    def fan_data(self) -> Dict[str, Any]:
        return self.record.setdefault("fan_data", {})
