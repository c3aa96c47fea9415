"""
Tests for the in-memory conversation store.
"""
import pytest

from fan_inbox.data_store import ConversationStore
from fan_inbox.errors import ConversationNotFound
from fan_inbox.models.conversation import InlineMessages, ReferencedMessages


def _message(msg_id="msg_new", body="hi", sender="creator"):
    return {
        "msg_id": msg_id,
        "body": body,
        "from": sender,
        "sent_at": "2024-06-01T00:00:00.000Z",
        "attachments": [],
    }


class TestStoreReads:
    """Test listing and lookup."""

    def test_list_all_keeps_seed_order(self, store):
        ids = [c.conversation_id for c in store.list_all()]
        assert ids == ["conv_1", "conv_2", "conv_3", "conv_4", "conv_5", "conv_6"]

    def test_storage_strategy_is_explicit(self, store):
        assert isinstance(store.find_by_id("conv_1").storage, InlineMessages)
        assert store.find_by_id("conv_2").storage == ReferencedMessages(key="conv_2")
        assert isinstance(store.find_by_id("conv_4").storage, InlineMessages)

    def test_storage_markers_removed_from_record(self, store):
        record = store.find_by_id("conv_1").record
        assert "inline_messages" not in record
        assert "message_refs" not in store.find_by_id("conv_2").record

    def test_find_by_id_missing(self, store):
        assert store.find_by_id("conv_404") is None

    def test_get_missing_raises(self, store):
        with pytest.raises(ConversationNotFound):
            store.get("conv_404")

    def test_messages_for_each_strategy(self, store):
        assert len(store.messages_for(store.find_by_id("conv_1"))) == 3
        assert len(store.messages_for(store.find_by_id("conv_3"))) == 4
        assert store.messages_for(store.find_by_id("conv_4")) == []

    def test_conversation_without_messages_is_inline(self):
        store = ConversationStore({
            "raw_conversations": [{"conversation_id": "c", "fan_data": {}}],
            "referenced_messages": {},
        })
        assert store.find_by_id("c").storage == InlineMessages()

    def test_named_reference_key(self):
        store = ConversationStore({
            "raw_conversations": [{"conversation_id": "c", "fan_data": {}, "message_refs": "batch_7"}],
            "referenced_messages": {"batch_7": [_message()]},
        })
        conversation = store.find_by_id("c")
        assert conversation.storage.key == "batch_7"
        assert len(store.messages_for(conversation)) == 1


class TestStoreMutations:
    """Test append, tag replacement and reset."""

    def test_append_inline(self, store):
        store.append_message("conv_1", _message())
        conversation = store.find_by_id("conv_1")
        assert len(conversation.storage.messages) == 4
        assert conversation.record["total_messages"] == 4
        assert conversation.record["last_message"]["msg_id"] == "msg_new"
        assert conversation.record["last_message"]["body"] == "hi"

    def test_append_referenced_goes_to_side_table(self, store):
        store.append_message("conv_2", _message())
        conversation = store.find_by_id("conv_2")
        messages = store.messages_for(conversation)
        assert len(messages) == 3
        assert messages[-1]["msg_id"] == "msg_new"
        assert conversation.record["total_messages"] == 3

    def test_append_to_empty_conversation(self, store):
        store.append_message("conv_4", _message())
        conversation = store.find_by_id("conv_4")
        assert conversation.record["total_messages"] == 1
        assert conversation.record["last_message"]["from"] == "creator"

    def test_append_missing_conversation(self, store):
        with pytest.raises(ConversationNotFound):
            store.append_message("conv_404", _message())

    def test_replace_tags_overwrites(self, store):
        conversation = store.replace_tags("conv_2", ["vip"])
        assert conversation.fan_data["tags"] == ["vip"]

    def test_replace_tags_copies_input(self, store):
        tags = ["a"]
        store.replace_tags("conv_1", tags)
        tags.append("b")
        assert store.find_by_id("conv_1").fan_data["tags"] == ["a"]

    def test_replace_tags_missing_conversation(self, store):
        with pytest.raises(ConversationNotFound):
            store.replace_tags("conv_404", ["vip"])

    def test_reset_restores_seed(self, store):
        store.append_message("conv_1", _message())
        store.append_message("conv_3", _message())
        store.replace_tags("conv_1", [])
        store.reset()

        conv_1 = store.find_by_id("conv_1")
        assert conv_1.record["total_messages"] == 3
        assert conv_1.fan_data["tags"] == ["regular"]
        assert len(store.messages_for(conv_1)) == 3
        assert len(store.messages_for(store.find_by_id("conv_3"))) == 4

    def test_mutation_does_not_touch_seed(self, store, seed):
        store.append_message("conv_2", _message())
        store.replace_tags("conv_1", ["changed"])
        fresh = ConversationStore(seed)
        assert fresh.find_by_id("conv_1").fan_data["tags"] == ["regular"]
        assert len(fresh.messages_for(fresh.find_by_id("conv_2"))) == 2

    def test_stats(self, store):
        assert store.stats() == {"conversations": 6, "inline": 3, "referenced": 3}
