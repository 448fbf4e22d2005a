from loguru import logger

from .errors import MagicNotStarted, NoChunksCaptured, TranscriptionServiceError
from .event_streamer import KeywordDetectedEvent, TranscriptEvent, error_event
from .models import ChunkResponse, Role
from .orchestrator import schedule_diarization
from .services import services
from .session_manager import ChunkOutcome, find_buffer, get_buffer
from .session_service import session_service
from .triggers import scan_for_trigger

MANUAL_START_TRANSCRIPT = "[Manual Start]"


async def transcribe_fragment(audio: bytes, language: str) -> str:
    """Live transcript of one fragment; a service failure yields ''."""
    try:
        transcript = await services.deepgram.transcribe(audio, language)
    except TranscriptionServiceError as e:
        logger.error(f"Fragment transcription failed, continuing without transcript: {e}")
        return ""
    return transcript.primary_text


async def handle_audio_chunk(
    session_id: str,
    audio: bytes,
    start_keyword: str,
    end_keyword: str,
    magic_active: bool,
    language: str,
) -> ChunkResponse:
    """Transcribe a fragment, run it through the session's state machine and notify."""
    transcript = await transcribe_fragment(audio, language)
    logger.info(f"[{session_id}] Transcript: {transcript!r}")

    # No awaits from here until the transition is applied
    buffer = get_buffer(session_id, start_phrase=start_keyword, end_phrase=end_keyword, language=language)
    buffer.update_settings(start_keyword, end_keyword, language)
    scan = scan_for_trigger(transcript, buffer.start_phrase, buffer.end_phrase)
    result = buffer.submit_fragment(audio, scan, magic_active)

    await session_service.send(session_id, Role.PERFORMER, TranscriptEvent(text=transcript))

    if result.outcome == ChunkOutcome.STARTED:
        await session_service.send(session_id, Role.PERFORMER, KeywordDetectedEvent(keyword="start", transcript=transcript))
        return ChunkResponse(transcript=transcript, keywordDetected=True, keyword="start")

    if result.outcome == ChunkOutcome.ENDED:
        # Tell the performer to stop the mic before processing starts
        await session_service.send(session_id, Role.PERFORMER, KeywordDetectedEvent(keyword="end", transcript=transcript))
        if result.window.fragments:
            schedule_diarization(buffer, result.window)
        else:
            logger.info(f"[{session_id}] No fragments stored to process")
            await session_service.send(session_id, Role.PERFORMER, error_event(NoChunksCaptured()))
        return ChunkResponse(transcript=transcript, keywordDetected=True, keyword="end")

    if magic_active and transcript:
        await session_service.send(session_id, Role.OBSERVER, TranscriptEvent(text=transcript))

    return ChunkResponse(transcript=transcript, keywordDetected=False)


async def start_window(
    session_id: str,
    start_keyword: str | None = None,
    end_keyword: str | None = None,
    language: str | None = None,
) -> None:
    buffer = get_buffer(session_id)
    buffer.manual_start(start_keyword, end_keyword, language)
    await session_service.send(
        session_id, Role.PERFORMER, KeywordDetectedEvent(keyword="start", transcript=MANUAL_START_TRANSCRIPT)
    )


def finalize_window(session_id: str, language: str | None = None) -> None:
    """
    Close the session's window by hand and queue it for processing.
    Raises NoChunksCaptured / MagicNotStarted when there is nothing to process.
    """
    buffer = find_buffer(session_id)
    if buffer is None:
        raise MagicNotStarted()
    window = buffer.manual_end(language)
    schedule_diarization(buffer, window)
