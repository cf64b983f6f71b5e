"""
Tests for the Typer command-line interface.

The orchestrator, settings and speech session factories are patched so every
command runs against fakes.
"""

import json
from pathlib import Path
from typing import List
from unittest.mock import Mock

import pytest
from typer.testing import CliRunner

import agri_assist.main as main_mod
from agri_assist.core.orchestrator import PromptOrchestrator
from agri_assist.core.settings import LanguageSettings
from agri_assist.core.speech import SpeechCaptureSession, WhisperRecognitionEngine
from agri_assist.core.types import Language
from agri_assist.main import app
from tests.conftest import EngineFactory, FakeGenerativeClient

runner = CliRunner()

DIAGNOSIS_JSON = json.dumps(
    {
        "diseaseName": "Early Blight",
        "confidence": "High",
        "description": "Concentric brown rings on older leaves.",
        "organicTreatments": ["Copper spray"],
        "chemicalTreatments": ["Mancozeb"],
        "preventionTips": ["Mulch the soil"],
    }
)


@pytest.fixture
def clipboard(monkeypatch: pytest.MonkeyPatch) -> List[str]:
    copied: List[str] = []
    monkeypatch.setattr(main_mod.pyperclip, "copy", copied.append)
    return copied


@pytest.fixture
def transcriber() -> Mock:
    sdk = Mock()
    sdk.audio.transcriptions.create.return_value = Mock(text="yellow leaves on tomato")
    return sdk


@pytest.fixture(autouse=True)
def patched_factories(
    monkeypatch: pytest.MonkeyPatch, settings: LanguageSettings, orchestrator: PromptOrchestrator, transcriber: Mock, clipboard: List[str]
):
    monkeypatch.setattr(main_mod, "get_settings", lambda: settings)
    monkeypatch.setattr(main_mod, "get_orchestrator", lambda: orchestrator)
    monkeypatch.setattr(
        main_mod,
        "get_speech_session",
        lambda s: SpeechCaptureSession(settings=s, engine_factory=lambda: WhisperRecognitionEngine(client=transcriber, model="whisper-1")),
    )


def _clip(tmp_path: Path, name: str = "clip.wav") -> str:
    path = tmp_path / name
    path.write_bytes(b"RIFF0000WAVE")
    return str(path)


class TestDiagnoseCommand:
    def test_json_output(self, fake_client: FakeGenerativeClient):
        fake_client.text = DIAGNOSIS_JSON
        result = runner.invoke(app, ["diagnose", "--text", "brown rings on leaves", "--format", "json"])

        assert result.exit_code == 0, result.output
        assert '"diseaseName": "Early Blight"' in result.output
        assert '"kind"' not in result.output

    def test_rich_output(self, fake_client: FakeGenerativeClient):
        fake_client.text = DIAGNOSIS_JSON
        result = runner.invoke(app, ["diagnose", "-t", "brown rings"])

        assert result.exit_code == 0, result.output
        assert "Early Blight" in result.output
        assert "Mancozeb" in result.output

    def test_missing_input_fails(self, fake_client: FakeGenerativeClient):
        result = runner.invoke(app, ["diagnose"])
        assert result.exit_code == 1
        assert "describe the symptoms" in result.output
        assert fake_client.calls == []

    def test_voice_is_merged_into_prompt(self, tmp_path: Path, fake_client: FakeGenerativeClient):
        fake_client.text = DIAGNOSIS_JSON
        result = runner.invoke(app, ["diagnose", "--text", "My plant:", "--voice", _clip(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "My plant: yellow leaves on tomato" in fake_client.calls[0]["instruction"]

    def test_oversized_image_fails(self, tmp_path: Path, fake_client: FakeGenerativeClient):
        image = tmp_path / "big.jpg"
        image.write_bytes(b"\x00" * (4 * 1024 * 1024 + 1))
        result = runner.invoke(app, ["diagnose", "--image", str(image)])

        assert result.exit_code == 1
        assert "smaller than 4MB" in result.output
        assert fake_client.calls == []


class TestIdentifyCommand:
    def test_requires_image(self, fake_client: FakeGenerativeClient):
        result = runner.invoke(app, ["identify", "--text", "what is this"])
        assert result.exit_code == 1
        assert fake_client.calls == []


class TestCropAndMarketCommands:
    def test_crop_info_copies_markdown(self, fake_client: FakeGenerativeClient, clipboard: List[str]):
        fake_client.text = "# Growing Wheat\nSow in winter."
        result = runner.invoke(app, ["crop-info", "wheat"])

        assert result.exit_code == 0, result.output
        assert "Sow in winter." in result.output
        assert clipboard == ["# Growing Wheat\nSow in winter."]

    def test_market_prices_table(self, fake_client: FakeGenerativeClient):
        fake_client.text = "Prices are firm.\n| Market Name | Price | Date |\n|---|---|---|\n| Lasalgaon | 2100 | 2024-05-01 |"
        result = runner.invoke(app, ["market-prices", "onion"])

        assert result.exit_code == 0, result.output
        assert "Prices are firm." in result.output
        assert "Lasalgaon" in result.output

    def test_market_prices_without_table(self, fake_client: FakeGenerativeClient):
        fake_client.text = "No recent data."
        result = runner.invoke(app, ["market-prices", "onion"])

        assert result.exit_code == 1
        assert "No recent data." in result.output


class TestCommunityCommands:
    def test_ask_then_list(self, fake_client: FakeGenerativeClient, clipboard: List[str]):
        fake_client.text = "Sow after the first rains."
        result = runner.invoke(app, ["ask", "When to sow millet?"])
        assert result.exit_code == 0, result.output
        assert clipboard == ["Sow after the first rains."]

        listed = runner.invoke(app, ["posts"])
        assert listed.exit_code == 0, listed.output
        assert "When to sow millet?" in listed.output

    def test_empty_board(self):
        result = runner.invoke(app, ["posts"])
        assert result.exit_code == 0
        assert "No community posts yet" in result.output


class TestChatCommand:
    def test_chat_session(self, fake_client: FakeGenerativeClient):
        fake_client.chunks = ["Water ", "weekly."]
        result = runner.invoke(app, ["chat"], input="How often to water?\n/exit\n")

        assert result.exit_code == 0, result.output
        assert "AgriBot" in result.output
        assert len(fake_client.stream_calls) == 1
        assert fake_client.stream_calls[0][-1] == {"role": "user", "content": "How often to water?"}


class TestLanguageAndListenCommands:
    def test_show_language(self):
        result = runner.invoke(app, ["language"])
        assert result.exit_code == 0
        assert "en-US" in result.output

    def test_set_language(self, settings: LanguageSettings):
        result = runner.invoke(app, ["language", "kn-IN"])
        assert result.exit_code == 0, result.output
        assert settings.language is Language.KN_IN

    def test_invalid_language(self, settings: LanguageSettings):
        result = runner.invoke(app, ["language", "fr-FR"])
        assert result.exit_code == 1
        assert settings.language is Language.EN_US

    def test_listen_prints_transcript(self, tmp_path: Path, settings: LanguageSettings, transcriber: Mock):
        settings.set_language(Language.HI_IN)
        result = runner.invoke(app, ["listen", _clip(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "yellow leaves on tomato" in result.output
        assert transcriber.audio.transcriptions.create.call_args.kwargs["language"] == "hi"

    def test_listen_unsupported(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setattr(main_mod, "get_speech_session", lambda s: SpeechCaptureSession(settings=s, engine_factory=EngineFactory(supported=False)))
        result = runner.invoke(app, ["listen", _clip(tmp_path)])
        assert result.exit_code == 1


class TestInitCommand:
    def test_init_creates_env(self, isolated_data_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0, result.output
        assert (isolated_data_dir / ".env").is_file()
