"""Pytest configuration helpers."""
from __future__ import annotations

import io
import os
import wave
from typing import Dict, Generator, List

os.environ["LOG_DIR"] = ""

import pytest
from fastapi.testclient import TestClient

from mindreader import session_manager
from mindreader.errors import TopicExtractionFailure, TranscriptionServiceError, TranslationFailure
from mindreader.main import app
from mindreader.models import DiarizedTranscript, SummaryResult
from mindreader.services import services
from mindreader.session_service import session_service


def make_wav(payload: bytes = b"\x01\x00" * 8, channels: int = 1, sample_rate: int = 16000, sample_width: int = 2) -> bytes:
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as handle:
        handle.setnchannels(channels)
        handle.setsampwidth(sample_width)
        handle.setframerate(sample_rate)
        handle.writeframes(payload)
    return buffer.getvalue()


def diarized(*words, transcript: str | None = None) -> DiarizedTranscript:
    """Build a one-channel transcript from (word, speaker) pairs."""
    text = transcript if transcript is not None else " ".join(w for w, _ in words)
    return DiarizedTranscript.model_validate({
        "channels": [{
            "alternatives": [{
                "transcript": text,
                "words": [{"word": w.lower(), "punctuated_word": w, "speaker": s} for w, s in words],
            }]
        }]
    })


class FakeDeepgram:
    configured = True

    def __init__(self) -> None:
        self.fragment_transcripts: Dict[bytes, str] = {}
        self.window_transcript: DiarizedTranscript = DiarizedTranscript()
        self.fail_diarization = False
        self.fail_summary = False
        self.diarized_audio: List[bytes] = []
        self.summarize_calls: List[tuple] = []

    async def transcribe(self, audio: bytes, language: str, diarize: bool = False) -> DiarizedTranscript:
        if diarize:
            self.diarized_audio.append(audio)
            if self.fail_diarization:
                raise TranscriptionServiceError("boom")
            return self.window_transcript
        text = self.fragment_transcripts.get(audio, "")
        return DiarizedTranscript.model_validate({"channels": [{"alternatives": [{"transcript": text}]}]})

    async def summarize(self, text: str, language: str = "en") -> SummaryResult:
        self.summarize_calls.append((text, language))
        if self.fail_summary:
            raise TranscriptionServiceError("summary down")
        return SummaryResult(summary=f"Summary of {text}", topic="coarse")


class FakeTranslator:
    def __init__(self) -> None:
        self.fail = False
        self.calls: List[tuple] = []

    async def translate(self, text: str, target_language: str) -> str:
        self.calls.append((text, target_language))
        if self.fail:
            raise TranslationFailure("offline")
        return f"<{target_language}> {text}"


class FakeTopicModel:
    configured = True

    def __init__(self) -> None:
        self.topic = "pizza"
        self.reply = "Pizza"
        self.fail = False

    async def extract_exact_topic(self, text: str) -> str:
        if self.fail:
            raise TopicExtractionFailure("no model")
        return self.topic

    async def generate(self, prompt: str, **kwargs) -> str:
        if self.fail:
            raise TopicExtractionFailure("no model")
        return self.reply


class FakeProviders:
    def __init__(self) -> None:
        self.deepgram = FakeDeepgram()
        self.translator = FakeTranslator()
        self.topic_model = FakeTopicModel()


class RecordingSessions:
    """Stands in for the session service and records what would be sent."""
    def __init__(self) -> None:
        self.sent: List[tuple] = []
        self.topics: Dict[str, str] = {}

    async def send(self, session_id, role, event) -> bool:
        self.sent.append((role.value, event))
        return True

    def set_topic(self, session_id: str, topic: str) -> None:
        self.topics[session_id] = topic

    def types_for(self, role: str) -> List[str]:
        return [event.type for r, event in self.sent if r == role]

    def last(self, role: str, event_type: str):
        matches = [event for r, event in self.sent if r == role and event.type == event_type]
        return matches[-1] if matches else None


@pytest.fixture
def providers() -> FakeProviders:
    return FakeProviders()


@pytest.fixture
def recorder() -> RecordingSessions:
    return RecordingSessions()


@pytest.fixture(autouse=True)
def clean_state() -> Generator[None, None, None]:
    yield
    session_service.reset()
    session_manager.reset_buffers()


@pytest.fixture
def client(providers: FakeProviders) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        # Startup builds the real clients; replace them with fakes
        services.deepgram = providers.deepgram
        services.translator = providers.translator
        services.topic_model = providers.topic_model
        yield test_client
