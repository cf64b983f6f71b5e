"""
Shared fixtures and fakes for the Agri Assist tests.

The fakes stand in for the generative model and the speech engine so tests never
touch the network.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

from agri_assist.core.errors import TransportError
from agri_assist.core.llm_handler import Generation
from agri_assist.core.orchestrator import PromptOrchestrator
from agri_assist.core.settings import LanguageSettings
from agri_assist.core.speech import RecognitionEvent, RecognitionSegment
from agri_assist.core.storage import KeyValueStore
from agri_assist.core.types import Citation


class FakeGenerativeClient:
    """Records every request and answers with canned text, chunks or errors."""

    def __init__(
        self,
        text: str = "",
        citations: Optional[List[Citation]] = None,
        error: Optional[Exception] = None,
        chunks: Sequence[str] = (),
        stream_error_after: Optional[int] = None,
    ):
        self.text = text
        self.citations = citations or []
        self.error = error
        self.chunks = list(chunks)
        self.stream_error_after = stream_error_after
        self.calls: List[Dict[str, Any]] = []
        self.stream_calls: List[List[Dict[str, str]]] = []

    def generate(self, instruction, image=None, schema=None, web_search=False, request_kind="generate"):
        self.calls.append(
            {"instruction": instruction, "image": image, "schema": schema, "web_search": web_search, "request_kind": request_kind}
        )
        if self.error is not None:
            raise self.error
        return Generation(text=self.text, citations=self.citations)

    def stream(self, messages, request_kind="chat"):
        self.stream_calls.append(list(messages))
        for index, chunk in enumerate(self.chunks):
            if self.stream_error_after is not None and index == self.stream_error_after:
                raise TransportError("stream interrupted")
            yield chunk
        if self.stream_error_after is not None and self.stream_error_after >= len(self.chunks):
            raise TransportError("stream interrupted")


class FakeEngine:
    """In-memory recognition engine driven by the test."""

    def __init__(self):
        self.lang = ""
        self.continuous = False
        self.interim_results = False
        self.on_result = None
        self.on_error = None
        self.on_end = None
        self.running = False
        self.start_calls = 0
        self.stop_calls = 0

    def start(self) -> None:
        if self.running:
            raise RuntimeError("already started")
        self.running = True
        self.start_calls += 1

    def stop(self) -> None:
        self.stop_calls += 1
        if self.running:
            self.running = False
            if self.on_end:
                self.on_end()

    def emit(self, segments: Sequence[Tuple[str, bool]]) -> None:
        event = RecognitionEvent(results=[RecognitionSegment(transcript=text, is_final=final) for text, final in segments])
        self.on_result(event)

    def fail(self, error: Exception) -> None:
        self.running = False
        self.on_error(error)
        self.on_end()


class EngineFactory:
    """Engine factory that remembers every engine it created."""

    def __init__(self, supported: bool = True):
        self.supported = supported
        self.engines: List[FakeEngine] = []

    def __call__(self) -> Optional[FakeEngine]:
        if not self.supported:
            return None
        engine = FakeEngine()
        self.engines.append(engine)
        return engine

    @property
    def current(self) -> FakeEngine:
        return self.engines[-1]


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the data directory at a temp dir and keep debug logging off."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("AA_DATA_DIR", str(data_dir))
    monkeypatch.delenv("AA_DEBUG", raising=False)
    import agri_assist.core.debug_log as debug_log

    monkeypatch.setattr(debug_log, "_debug_logger", None)
    return data_dir


@pytest.fixture
def store(tmp_path: Path) -> KeyValueStore:
    return KeyValueStore(tmp_path / "store" / "storage.json")


@pytest.fixture
def settings(store: KeyValueStore) -> LanguageSettings:
    return LanguageSettings(store)


@pytest.fixture
def fake_client() -> FakeGenerativeClient:
    return FakeGenerativeClient()


@pytest.fixture
def orchestrator(fake_client: FakeGenerativeClient) -> PromptOrchestrator:
    return PromptOrchestrator(client=fake_client)


@pytest.fixture
def engine_factory() -> EngineFactory:
    return EngineFactory()
