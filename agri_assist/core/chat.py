"""
Expert chat conversations with streamed answers.

A conversation is bound to one language. It starts with a language-specific
system instruction and a greeting that is shown to the user but never sent to
the model. Streamed chunks are folded, in arrival order, into the last message.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .strings import t
from .types import ChatMessage, Language

logger = logging.getLogger(__name__)


class StreamStatus(str, Enum):
    STREAMING = "streaming"
    COMPLETE = "complete"
    ERROR = "error"


class StreamFold:
    """
    Accumulates an ordered chunk sequence into a monotonically growing string.

    Once the fold reaches COMPLETE or ERROR it accepts no more chunks.
    """

    def __init__(self):
        self.text = ""
        self.status = StreamStatus.STREAMING
        self.error: Optional[Exception] = None

    def feed(self, chunk: str) -> str:
        if self.status is not StreamStatus.STREAMING:
            raise RuntimeError(f"Cannot feed a stream in state {self.status.value}")
        self.text += chunk
        return self.text

    def complete(self) -> None:
        self.status = StreamStatus.COMPLETE

    def fail(self, error: Exception) -> None:
        self.status = StreamStatus.ERROR
        self.error = error


class ChatConversation:
    """
    One expert chat conversation.

    Attributes:
        language: Language the conversation was created for
        messages: Ordered, append-only list of messages shown to the user
        is_streaming: True while an answer is being streamed
    """

    def __init__(self, language: Language, client: Any = None, client_factory: Optional[Callable[[], Any]] = None):
        self.language = Language(language)
        self.system_instruction = t(self.language, "expert_chat_system_prompt")
        self.messages: List[ChatMessage] = [ChatMessage(role="model", text=t(self.language, "expert_chat_welcome"))]
        self.is_streaming = False
        self._client = client
        self._client_factory = client_factory
        self._history: List[Dict[str, str]] = []

    @property
    def client(self) -> Any:
        if self._client is None:
            if self._client_factory is not None:
                self._client = self._client_factory()
            else:
                from .llm_handler import get_generative_client

                self._client = get_generative_client()
        return self._client

    def _outgoing(self, text: str) -> List[Dict[str, str]]:
        return [{"role": "system", "content": self.system_instruction}, *self._history, {"role": "user", "content": text}]

    def send(self, text: str, on_update: Optional[Callable[[ChatMessage], None]] = None) -> Optional[ChatMessage]:
        """
        Send a user turn and stream the model answer into the last message.

        A blank message, or a call made while another answer is streaming, is ignored.
        If the stream fails, the in-progress answer is replaced by the fixed
        apology message for the conversation language.

        Args:
            text: User message
            on_update: Called with the last message after every change

        Returns:
            The final model message, or None if the call was ignored
        """
        if not text or not text.strip() or self.is_streaming:
            return None

        self.messages.append(ChatMessage(role="user", text=text))
        self.is_streaming = True
        fold = StreamFold()
        try:
            self.messages.append(ChatMessage(role="model", text=""))
            for chunk in self.client.stream(self._outgoing(text)):
                self.messages[-1] = ChatMessage(role="model", text=fold.feed(chunk))
                if on_update:
                    on_update(self.messages[-1])
            fold.complete()
        except Exception as e:
            logger.error(f"Error sending chat message: {e}")
            fold.fail(e)
            self.messages.pop()
            self.messages.append(ChatMessage(role="model", text=t(self.language, "error_chat")))
            if on_update:
                on_update(self.messages[-1])
            return self.messages[-1]
        finally:
            self.is_streaming = False

        self._history.append({"role": "user", "content": text})
        self._history.append({"role": "assistant", "content": fold.text})
        return self.messages[-1]
