"""
UI state for each Agri Assist screen.

Each view owns its input, its typed result, an error message and an in-flight
flag. ``submit`` is a no-op while a request is in flight, turns every failure
into a user-visible message, and always leaves the view ready for a retry.
Views that accept voice input merge the transcript of a SpeechCaptureSession
into their input field.
"""

import logging
from typing import Callable, List, Optional, TypeVar

from .chat import ChatConversation
from .community import CommunityBoard
from .config import ConfigError
from .errors import AgriAssistError, MalformedResponseError
from .market import split_summary
from .media import ImageTooLargeError, load_image
from .orchestrator import PromptOrchestrator
from .settings import LanguageSettings
from .speech import SpeechCaptureSession
from .strings import t
from .types import (
    ChatMessage,
    CommunityPost,
    CropInfoResult,
    DiagnosisResult,
    ImageInput,
    Language,
    MarketPriceReport,
    PlantIdentificationResult,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseView:
    """Shared request lifecycle and voice input merging."""

    input_field = "prompt"
    # True: the transcript replaces the input; False: it is appended to what was typed
    replace_with_transcript = False

    def __init__(self, orchestrator: PromptOrchestrator, settings: LanguageSettings):
        self.orchestrator = orchestrator
        self.settings = settings
        self.is_loading = False
        self.error: Optional[str] = None
        self.speech: Optional[SpeechCaptureSession] = None
        self._speech_base = ""
        self._speech_offset = 0
        self._was_listening = False
        self._detach_speech: Optional[Callable[[], None]] = None

    @property
    def language(self) -> Language:
        return self.settings.language

    def _run(self, call: Callable[[], T]) -> Optional[T]:
        if self.is_loading:
            return None
        self.is_loading = True
        self.error = None
        try:
            return call()
        except MalformedResponseError as e:
            self._on_malformed(e)
            self.error = str(e) or t(self.language, "error_unknown")
        except (AgriAssistError, ConfigError) as e:
            self.error = str(e) or t(self.language, "error_unknown")
        except Exception as e:
            logger.exception(f"Unexpected error in {type(self).__name__}")
            self.error = str(e) or t(self.language, "error_unknown")
        finally:
            self.is_loading = False
        return None

    def _on_malformed(self, error: MalformedResponseError) -> None:
        pass

    # Voice input

    def attach_speech(self, session: SpeechCaptureSession) -> None:
        """Merge the session's transcript into this view's input field."""
        self.detach_speech()
        self.speech = session
        self._was_listening = session.is_listening
        self._anchor_speech()
        self._detach_speech = session.subscribe(self._on_speech)

    def detach_speech(self) -> None:
        if self._detach_speech is not None:
            self._detach_speech()
            self._detach_speech = None
        self.speech = None

    def _anchor_speech(self) -> None:
        self._speech_base = "" if self.replace_with_transcript else getattr(self, self.input_field).strip()
        self._speech_offset = len(self.speech.transcript) if self.speech else 0

    def _on_speech(self, session: SpeechCaptureSession) -> None:
        if session.is_listening and not self._was_listening:
            self._anchor_speech()
        self._was_listening = session.is_listening

        heard = session.transcript[self._speech_offset :].strip()
        if not heard:
            return
        merged = f"{self._speech_base} {heard}" if self._speech_base else heard
        setattr(self, self.input_field, merged)


class _ImageView(BaseView):
    def __init__(self, orchestrator: PromptOrchestrator, settings: LanguageSettings):
        super().__init__(orchestrator, settings)
        self.prompt = ""
        self.image: Optional[ImageInput] = None

    def set_image(self, path: str) -> bool:
        """Load an image file; on failure the previous image is kept and an error is set."""
        try:
            image = load_image(path)
        except ImageTooLargeError:
            self.error = t(self.language, "error_file_size")
            return False
        except (AgriAssistError, OSError) as e:
            self.error = str(e)
            return False
        self.image = image
        self.error = None
        return True


class DiagnoserView(_ImageView):
    """Plant disease diagnosis from symptoms and/or a photo."""

    def __init__(self, orchestrator: PromptOrchestrator, settings: LanguageSettings):
        super().__init__(orchestrator, settings)
        self.result: Optional[DiagnosisResult] = None

    def submit(self) -> Optional[DiagnosisResult]:
        if self.is_loading:
            return None
        self.result = None
        self.result = self._run(lambda: self.orchestrator.diagnose(self.prompt, self.language, self.image))
        return self.result

    def reset(self) -> None:
        self.prompt = ""
        self.image = None
        self.result = None
        self.error = None
        self.is_loading = False


class IdentifierView(_ImageView):
    """Plant identification from a photo."""

    def __init__(self, orchestrator: PromptOrchestrator, settings: LanguageSettings):
        super().__init__(orchestrator, settings)
        self.result: Optional[PlantIdentificationResult] = None

    def submit(self) -> Optional[PlantIdentificationResult]:
        if self.is_loading:
            return None
        self.result = None
        self.result = self._run(lambda: self.orchestrator.identify(self.prompt, self.language, self.image))
        return self.result

    def reset(self) -> None:
        self.prompt = ""
        self.image = None
        self.result = None
        self.error = None
        self.is_loading = False


class CropInfoView(BaseView):
    """Markdown growing guide for a crop."""

    input_field = "crop_name"
    replace_with_transcript = True

    def __init__(self, orchestrator: PromptOrchestrator, settings: LanguageSettings):
        super().__init__(orchestrator, settings)
        self.crop_name = ""
        self.result: Optional[CropInfoResult] = None

    def submit(self) -> Optional[CropInfoResult]:
        if self.is_loading:
            return None
        self.result = None
        self.result = self._run(lambda: self.orchestrator.crop_info(self.crop_name, self.language))
        return self.result


class MarketPricesView(BaseView):
    """
    Market prices for a crop.

    When the answer has no price table, the prose summary is still kept so it can
    be shown next to the error.
    """

    input_field = "crop_name"
    replace_with_transcript = True

    def __init__(self, orchestrator: PromptOrchestrator, settings: LanguageSettings):
        super().__init__(orchestrator, settings)
        self.crop_name = ""
        self.summary = ""
        self.report: Optional[MarketPriceReport] = None

    def _on_malformed(self, error: MalformedResponseError) -> None:
        if error.raw_text:
            self.summary = split_summary(error.raw_text)

    def submit(self) -> Optional[MarketPriceReport]:
        if self.is_loading:
            return None
        self.report = None
        self.summary = ""
        self.report = self._run(lambda: self.orchestrator.market_prices(self.crop_name, self.language))
        if self.report is not None:
            self.summary = self.report.summary
        return self.report


class CommunityHubView(BaseView):
    """Ask the community question board; answered posts are persisted."""

    input_field = "question"

    def __init__(self, orchestrator: PromptOrchestrator, settings: LanguageSettings, board: Optional[CommunityBoard] = None):
        super().__init__(orchestrator, settings)
        self.board = board if board is not None else CommunityBoard(settings.store)
        self.question = ""

    @property
    def posts(self) -> List[CommunityPost]:
        return self.board.posts

    def submit(self) -> Optional[CommunityPost]:
        if self.is_loading:
            return None

        def ask() -> CommunityPost:
            answer = self.orchestrator.community_answer(self.question, self.language)
            return self.board.add(answer.question, answer.answer)

        post = self._run(ask)
        if post is not None:
            self.question = ""
        return post


class ExpertChatView(BaseView):
    """
    Streaming expert chat.

    The conversation is recreated, with a fresh greeting, whenever the language
    setting changes.
    """

    input_field = "input"

    def __init__(self, orchestrator: PromptOrchestrator, settings: LanguageSettings):
        super().__init__(orchestrator, settings)
        self.input = ""
        self.conversation: ChatConversation = orchestrator.create_chat(settings.language)
        self._unsubscribe_language = settings.subscribe(self._on_language_change)

    @property
    def messages(self) -> List[ChatMessage]:
        return self.conversation.messages

    def _on_language_change(self, language: Language) -> None:
        self.conversation = self.orchestrator.create_chat(language)

    def send(self, on_update: Optional[Callable[[ChatMessage], None]] = None) -> Optional[ChatMessage]:
        """Send the current input; ignored when blank or while an answer is streaming."""
        text = self.input
        if not text.strip() or self.is_loading:
            return None

        self.input = ""
        if self.speech is not None:
            self._anchor_speech()
        self.is_loading = True
        try:
            return self.conversation.send(text, on_update=on_update)
        finally:
            self.is_loading = False

    def close(self) -> None:
        self._unsubscribe_language()
        self.detach_speech()
