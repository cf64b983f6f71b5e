"""
Tests for streamed expert chat conversations.
"""

import pytest

from agri_assist.core.chat import ChatConversation, StreamFold, StreamStatus
from agri_assist.core.strings import t
from agri_assist.core.types import ChatMessage, Language
from tests.conftest import FakeGenerativeClient


class TestStreamFold:
    """Test folding of ordered chunks."""

    def test_text_grows_in_order(self):
        fold = StreamFold()
        assert fold.feed("Hello") == "Hello"
        assert fold.feed(", ") == "Hello, "
        assert fold.feed("world") == "Hello, world"
        fold.complete()
        assert fold.status is StreamStatus.COMPLETE

    def test_no_chunks_after_terminal_state(self):
        fold = StreamFold()
        fold.fail(RuntimeError("boom"))
        assert fold.status is StreamStatus.ERROR
        with pytest.raises(RuntimeError):
            fold.feed("late")


class TestChatConversation:
    """Test the send/stream lifecycle of a conversation."""

    def test_starts_with_greeting(self):
        chat = ChatConversation(Language.HI_IN, client=FakeGenerativeClient())
        assert chat.messages == [ChatMessage(role="model", text=t(Language.HI_IN, "expert_chat_welcome"))]

    def test_partial_updates_then_final(self):
        client = FakeGenerativeClient(chunks=["Hello", ", ", "world"])
        chat = ChatConversation(Language.EN_US, client=client)
        seen = []

        final = chat.send("hi", on_update=lambda message: seen.append(message.text))

        assert seen == ["Hello", "Hello, ", "Hello, world"]
        assert final == ChatMessage(role="model", text="Hello, world")
        assert [m.role for m in chat.messages] == ["model", "user", "model"]
        assert chat.messages[1].text == "hi"
        assert chat.is_streaming is False

    def test_outgoing_carries_system_prompt_and_history(self):
        client = FakeGenerativeClient(chunks=["Answer"])
        chat = ChatConversation(Language.EN_US, client=client)
        chat.send("first")
        chat.send("second")

        second = client.stream_calls[1]
        assert second[0] == {"role": "system", "content": t(Language.EN_US, "expert_chat_system_prompt")}
        assert second[1:] == [
            {"role": "user", "content": "first"},
            {"role": "assistant", "content": "Answer"},
            {"role": "user", "content": "second"},
        ]

    def test_greeting_is_not_sent(self):
        client = FakeGenerativeClient(chunks=["ok"])
        chat = ChatConversation(Language.EN_US, client=client)
        chat.send("hi")
        contents = [m["content"] for m in client.stream_calls[0]]
        assert t(Language.EN_US, "expert_chat_welcome") not in contents

    def test_error_after_first_chunk_leaves_only_fallback(self):
        """A stream failure replaces the partial answer with the apology message."""
        client = FakeGenerativeClient(chunks=["Hel", "lo"], stream_error_after=1)
        chat = ChatConversation(Language.ES_ES, client=client)

        final = chat.send("hola")

        fallback = t(Language.ES_ES, "error_chat")
        assert final.text == fallback
        assert [m.text for m in chat.messages[1:]] == ["hola", fallback]
        assert all(m.text != "Hel" for m in chat.messages)
        assert chat.is_streaming is False

    def test_failed_turn_is_not_in_history(self):
        client = FakeGenerativeClient(chunks=["partial"], stream_error_after=1)
        chat = ChatConversation(Language.EN_US, client=client)
        chat.send("lost question")

        client.stream_error_after = None
        chat.send("next")
        assert [m["content"] for m in client.stream_calls[1][1:]] == ["next"]

    def test_blank_message_is_ignored(self):
        client = FakeGenerativeClient(chunks=["x"])
        chat = ChatConversation(Language.EN_US, client=client)
        assert chat.send("   ") is None
        assert len(chat.messages) == 1
        assert client.stream_calls == []

    def test_send_while_streaming_is_ignored(self):
        client = FakeGenerativeClient(chunks=["x"])
        chat = ChatConversation(Language.EN_US, client=client)
        chat.is_streaming = True
        assert chat.send("hi") is None
        assert client.stream_calls == []
