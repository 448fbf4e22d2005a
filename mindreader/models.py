from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class Role(str, Enum):
    PERFORMER = "performer"
    OBSERVER = "observer"


# Transcription service output

class TranscriptWord(BaseModel):
    word: str = ""
    punctuated_word: Optional[str] = None
    speaker: Optional[int] = None

    @property
    def text(self) -> str:
        return self.punctuated_word or self.word


class TranscriptAlternative(BaseModel):
    transcript: str = ""
    words: List[TranscriptWord] = []


class TranscriptChannel(BaseModel):
    alternatives: List[TranscriptAlternative] = []


class DiarizedTranscript(BaseModel):
    channels: List[TranscriptChannel] = []

    @property
    def primary_text(self) -> str:
        """First alternative of the first channel, as used for live fragments."""
        if not self.channels or not self.channels[0].alternatives:
            return ""
        return self.channels[0].alternatives[0].transcript or ""


class SummaryResult(BaseModel):
    summary: str
    topic: Optional[str] = None


class TopicResult(BaseModel):
    summary: str
    topic: str


# Control channel (client -> server)

class JoinMessage(BaseModel):
    sessionId: str
    role: Role


class ManualStartMessage(BaseModel):
    sessionId: str
    # Omitted fields keep the values the session already has
    startKeyword: Optional[str] = None
    endKeyword: Optional[str] = None
    language: Optional[str] = None


class ManualEndMessage(BaseModel):
    sessionId: str
    language: Optional[str] = None


class TopicSearchedMessage(BaseModel):
    sessionId: str


# HTTP

class ChunkResponse(BaseModel):
    success: bool = True
    transcript: str
    keywordDetected: bool
    keyword: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None


class TopicExtractRequest(BaseModel):
    text: str = Field(..., min_length=1)


class TopicExtractResponse(BaseModel):
    topic: str
    strategy: str
