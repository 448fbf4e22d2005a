import json
import time
from typing import Literal, Optional
from pydantic import BaseModel, Field

from .errors import NO_RECORDING_ERROR, PipelineError


def now_ms() -> int:
    return int(time.time() * 1000)


class JoinedEvent(BaseModel):
    type: str = "joined"
    sessionId: str
    role: str

class ReadyEvent(BaseModel):
    type: str = "ready"

class TranscriptEvent(BaseModel):
    type: str = "transcript"
    text: str
    timestamp: int = Field(default_factory=now_ms)

class MagicTranscriptEvent(BaseModel):
    type: str = "magic_transcript"
    text: str
    timestamp: int = Field(default_factory=now_ms)

class KeywordDetectedEvent(BaseModel):
    type: str = "keyword_detected"
    keyword: Literal["start", "end"]
    transcript: str
    timestamp: int = Field(default_factory=now_ms)

class SummarizeCompleteEvent(BaseModel):
    type: str = "summarize_complete"
    summary: str
    topic: str
    timestamp: int = Field(default_factory=now_ms)

class SummaryEvent(BaseModel):
    type: str = "summary"
    # Absent when replaying a cached topic to a rejoining observer
    summary: Optional[str] = None
    topic: str
    timestamp: int = Field(default_factory=now_ms)

class DiarizationErrorEvent(BaseModel):
    type: str = "diarization_error"
    error: str
    message: str
    timestamp: int = Field(default_factory=now_ms)

class NoRecordingErrorEvent(BaseModel):
    type: str = "no_recording_error"
    error: str
    message: str
    timestamp: int = Field(default_factory=now_ms)

class ErrorEvent(BaseModel):
    type: str = "error"
    message: str


def error_event(error: PipelineError) -> BaseModel:
    """Build the performer-facing event for a pipeline error."""
    event_cls = NoRecordingErrorEvent if error.event == NO_RECORDING_ERROR else DiarizationErrorEvent
    return event_cls(error=error.code, message=error.message)


def serialize_event(event: BaseModel) -> str:
    """Serialize a Pydantic event model to JSON string for WebSocket transmission."""
    return json.dumps(event.model_dump(exclude_none=True))
