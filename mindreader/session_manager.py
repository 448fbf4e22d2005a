import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from loguru import logger

from .errors import MagicNotStarted, NoChunksCaptured
from .triggers import TriggerScan


class ChunkOutcome(str, Enum):
    STARTED = "start"
    BUFFERED = "buffered"
    ENDED = "end"
    IGNORED = "ignored"


@dataclass
class CapturedWindow:
    """Fragments of one closed window plus the settings it was recorded with."""
    fragments: List[bytes]
    language: str
    start_phrase: str
    end_phrase: str


@dataclass
class ChunkResult:
    outcome: ChunkOutcome
    window: Optional[CapturedWindow] = None


class SessionAudioBuffer:
    """Recording state of one session.

    Attributes:
        session_id: Owning session.
        fragments: Raw WAV fragments of the open window, in arrival order.
        is_recording: True between a start and an end (Recording state).
        start_phrase / end_phrase / language: Latest non-empty values seen.
        processing_lock: Serializes diarization jobs of this session.

    Every transition is a plain method with no awaits, so it runs atomically
    on the event loop.
    """
    def __init__(self, session_id: str, start_phrase: str = "", end_phrase: str = "", language: str = "en"):
        self.session_id: str = session_id
        self.fragments: List[bytes] = []
        self.is_recording: bool = False
        self.start_phrase: str = start_phrase or ""
        self.end_phrase: str = end_phrase or ""
        self.language: str = language or "en"
        self.processing_lock = asyncio.Lock()

    def update_settings(self, start_phrase: str | None = None, end_phrase: str | None = None, language: str | None = None) -> None:
        """Overwrite phrases/language with any non-empty value."""
        self.start_phrase = start_phrase or self.start_phrase
        self.end_phrase = end_phrase or self.end_phrase
        self.language = language or self.language

    def open_window(self, first_fragment: bytes | None = None) -> None:
        self.fragments = [first_fragment] if first_fragment is not None else []
        self.is_recording = True

    def drain(self, language: str | None = None) -> CapturedWindow:
        """Hand the buffered fragments over and return to Idle."""
        window = CapturedWindow(
            fragments=self.fragments,
            language=self.language or language or "en",
            start_phrase=self.start_phrase,
            end_phrase=self.end_phrase,
        )
        self.fragments = []
        self.is_recording = False
        return window

    def submit_fragment(self, fragment: bytes, scan: TriggerScan, magic_active: bool) -> ChunkResult:
        """
        Apply one transcribed fragment to the state machine.

        `magic_active` is the client's own view of whether a window is open;
        a start only opens a window when it is False and an end only closes
        one when it is True.
        """
        if scan.has_start and not magic_active:
            self.open_window(fragment)
            logger.info(f"[{self.session_id}] Start phrase detected, window opened")
            return ChunkResult(ChunkOutcome.STARTED)

        if self.is_recording and not scan.has_end:
            self.fragments.append(fragment)
            logger.debug(f"[{self.session_id}] Buffered fragment {len(self.fragments)} ({len(fragment)} bytes)")
            return ChunkResult(ChunkOutcome.BUFFERED)

        if scan.has_end and magic_active:
            # The fragment holding the end phrase belongs to the window
            self.fragments.append(fragment)
            logger.info(f"[{self.session_id}] End phrase detected, closing window with {len(self.fragments)} fragment(s)")
            return ChunkResult(ChunkOutcome.ENDED, self.drain())

        return ChunkResult(ChunkOutcome.IGNORED)

    def manual_start(self, start_phrase: str | None = None, end_phrase: str | None = None, language: str | None = None) -> None:
        self.update_settings(start_phrase, end_phrase, language)
        self.open_window()
        logger.info(f"[{self.session_id}] Manual start, recording activated")

    def manual_end(self, language: str | None = None) -> CapturedWindow:
        """Close the window by hand. Raises when there is nothing to process."""
        if self.fragments:
            return self.drain(language)

        was_recording = self.is_recording
        self.is_recording = False
        if was_recording:
            raise NoChunksCaptured()
        raise MagicNotStarted()


# In-memory buffer registry, one buffer per session id
_buffers: Dict[str, SessionAudioBuffer] = {}

def get_buffer(session_id: str, **settings) -> SessionAudioBuffer:
    """Retrieve the buffer for a session, creating it on first use."""
    buffer = _buffers.get(session_id)
    if buffer is None:
        buffer = SessionAudioBuffer(session_id, **settings)
        _buffers[session_id] = buffer
    return buffer

def find_buffer(session_id: str) -> SessionAudioBuffer | None:
    return _buffers.get(session_id)

def drop_buffer(session_id: str) -> None:
    _buffers.pop(session_id, None)

def reset_buffers() -> None:
    _buffers.clear()
