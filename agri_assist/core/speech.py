"""
Speech capture for voice input.

A SpeechCaptureSession wraps a recognition engine into a start/stop session with
a live transcript and a listening flag. The transcript is always the
concatenation of the finalized segments recognized so far in the session;
interim segments are never published.

Engines follow the RecognitionEngine protocol. WhisperRecognitionEngine is the
bundled engine: it transcribes queued audio clips with OpenAI Whisper and reports
each clip as a finalized segment. When no engine is available the session is
permanently idle and reports ``supported == False``.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, Protocol

from pydantic import BaseModel, Field

from .config import ConfigError, config, get_client, load_project_env
from .types import Language

logger = logging.getLogger(__name__)


class SpeechError(Exception):
    """Raised when speech processing fails."""

    pass


class SessionState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"


class RecognitionSegment(BaseModel):
    """A recognized piece of speech; final segments will not be revised."""

    transcript: str
    is_final: bool = False


class RecognitionEvent(BaseModel):
    """
    Result event emitted by an engine.

    Attributes:
        result_index: Index of the first segment that changed in this event
        results: Every segment recognized so far in the session, in order
    """

    result_index: int = 0
    results: List[RecognitionSegment] = Field(default_factory=list)


class RecognitionEngine(Protocol):
    """Platform speech recognition capability."""

    lang: str
    continuous: bool
    interim_results: bool
    on_result: Optional[Callable[[RecognitionEvent], None]]
    on_error: Optional[Callable[[Exception], None]]
    on_end: Optional[Callable[[], None]]

    def start(self) -> None: ...

    def stop(self) -> None: ...


EngineFactory = Callable[[], Optional[RecognitionEngine]]


def reduce_transcript(event: RecognitionEvent) -> str:
    """Concatenate the finalized segments of an event, skipping interim ones."""
    return "".join(segment.transcript for segment in event.results if segment.is_final)


class WhisperRecognitionEngine:
    """
    Recognition engine backed by the OpenAI audio transcription API.

    Audio clips are pushed with ``feed``. Each successfully transcribed clip becomes
    one finalized segment. In non-continuous mode the engine ends after the first clip.
    """

    SUPPORTED_EXTENSIONS = {".mp3", ".mp4", ".mpeg", ".mpga", ".m4a", ".wav", ".webm", ".ogg", ".flac"}
    MAX_CLIP_BYTES = 25 * 1024 * 1024

    def __init__(self, client: Any = None, model: Optional[str] = None):
        self.client = client if client is not None else get_client()
        self.model = model or config.asr_model
        self.lang = Language.EN_US.value
        self.continuous = False
        self.interim_results = False
        self.on_result: Optional[Callable[[RecognitionEvent], None]] = None
        self.on_error: Optional[Callable[[Exception], None]] = None
        self.on_end: Optional[Callable[[], None]] = None
        self._segments: List[RecognitionSegment] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            raise SpeechError("Recognition has already started")
        self._segments = []
        self._running = True

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self.on_end:
            self.on_end()

    @classmethod
    def validate_audio_format(cls, path: str) -> bool:
        """True if the file extension is accepted by the transcription API."""
        return Path(path).suffix.lower() in cls.SUPPORTED_EXTENSIONS

    def _transcribe(self, audio_path: Path) -> str:
        if not audio_path.is_file():
            raise FileNotFoundError(f"Audio file not found: {audio_path}")

        if not self.validate_audio_format(str(audio_path)):
            raise SpeechError(f"Unsupported audio format: {audio_path.suffix}")

        file_size = audio_path.stat().st_size
        if file_size > self.MAX_CLIP_BYTES:
            raise SpeechError(f"Audio file too large: {file_size / 1024 / 1024:.1f}MB (max: 25MB)")

        language_code = self.lang.split("-")[0]
        with open(audio_path, "rb") as audio_file:
            response = self.client.audio.transcriptions.create(model=self.model, file=audio_file, language=language_code)

        text = getattr(response, "text", response)
        return str(text).strip()

    def feed(self, path: str) -> None:
        """
        Transcribe one audio clip and emit a result event.

        Failures are reported through ``on_error`` followed by ``on_end``.
        """
        if not self._running:
            raise SpeechError("Recognition is not running")

        try:
            text = self._transcribe(Path(path))
        except Exception as e:
            self._running = False
            if self.on_error:
                self.on_error(e)
            if self.on_end:
                self.on_end()
            return

        if text:
            if self._segments:
                text = f" {text}"
            self._segments.append(RecognitionSegment(transcript=text, is_final=True))
            if self.on_result:
                self.on_result(RecognitionEvent(result_index=len(self._segments) - 1, results=list(self._segments)))

        if not self.continuous:
            self.stop()


def default_engine_factory() -> Optional[RecognitionEngine]:
    """Return a Whisper engine, or None when no OpenAI API key is configured."""
    if not config.has_api_key:
        load_project_env()
    if not config.has_api_key:
        return None
    try:
        return WhisperRecognitionEngine()
    except ConfigError as e:
        logger.warning(f"Speech recognition unavailable: {e}")
        return None


SessionListener = Callable[["SpeechCaptureSession"], None]


class SpeechCaptureSession:
    """
    Start/stop controlled live transcript in a configurable language.

    Capability detection happens once, at construction. An unsupported session is
    permanently idle and its start/stop calls are no-ops. When bound to language
    settings, a language change stops any active recognition and recreates the
    engine for the new locale.
    """

    def __init__(self, language: Language = Language.EN_US, engine_factory: Optional[EngineFactory] = None, settings: Any = None):
        self._engine_factory = engine_factory or default_engine_factory
        self.language = Language(language if settings is None else settings.language)
        self.state = SessionState.IDLE
        self.transcript = ""
        self._listeners: List[SessionListener] = []
        self._engine: Optional[RecognitionEngine] = self._create_engine()
        self.supported = self._engine is not None
        if not self.supported:
            logger.warning("Speech recognition not supported on this host.")
        self._unsubscribe = settings.subscribe(self.set_language) if settings is not None else None

    @property
    def is_listening(self) -> bool:
        return self.state is SessionState.LISTENING

    @property
    def engine(self) -> Optional[RecognitionEngine]:
        return self._engine

    def _create_engine(self) -> Optional[RecognitionEngine]:
        engine = self._engine_factory()
        if engine is None:
            return None
        engine.continuous = True
        engine.interim_results = True
        engine.lang = self.language.value
        engine.on_result = lambda event: self._handle_result(engine, event)
        engine.on_error = lambda error: self._handle_error(engine, error)
        engine.on_end = lambda: self._handle_end(engine)
        return engine

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener for transcript and listening changes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def start(self) -> None:
        """Clear the transcript and begin listening. No-op if already listening or unsupported."""
        if self._engine is None or self.is_listening:
            return
        self.transcript = ""
        self.state = SessionState.LISTENING
        self._notify()
        try:
            self._engine.start()
        except Exception as e:
            logger.error(f"Speech recognition failed to start: {e}")
            self.state = SessionState.IDLE
            self._notify()

    def stop(self) -> None:
        """Stop listening. No-op if idle or unsupported."""
        if self._engine is None or not self.is_listening:
            return
        self.state = SessionState.IDLE
        self._engine.stop()
        self._notify()

    def clear_transcript(self) -> None:
        """Empty the transcript without stopping the session."""
        if self.transcript:
            self.transcript = ""
            self._notify()

    def set_language(self, language: Language) -> None:
        """Switch the recognition locale, stopping any active recognition first."""
        language = Language(language)
        if language == self.language:
            return
        self.stop()
        self.language = language
        if self.supported:
            self._engine = self._create_engine()

    def close(self) -> None:
        """Stop listening and detach from the language settings."""
        self.stop()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _handle_result(self, engine: RecognitionEngine, event: RecognitionEvent) -> None:
        if engine is not self._engine:
            return
        self.transcript = reduce_transcript(event)
        self._notify()

    def _handle_error(self, engine: RecognitionEngine, error: Exception) -> None:
        if engine is not self._engine:
            return
        logger.error(f"Speech recognition error: {error}")
        if self.is_listening:
            self.state = SessionState.IDLE
            self._notify()

    def _handle_end(self, engine: RecognitionEngine) -> None:
        if engine is not self._engine:
            return
        if self.is_listening:
            self.state = SessionState.IDLE
            self._notify()
