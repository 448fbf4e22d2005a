import asyncio
import logging
from typing import Optional, Set

from .errors import (
    PipelineError,
    ProcessingError,
    TopicExtractionFailure,
    TranscriptionServiceError,
    TranslationFailure,
)
from .event_streamer import MagicTranscriptEvent, SummarizeCompleteEvent, SummaryEvent, error_event
from .models import Role, TopicResult
from .services import services
from .session_manager import CapturedWindow, SessionAudioBuffer
from .session_service import session_service
from .topic_extractor import extract_local_topic
from .transcript_selector import select_transcript
from .triggers import extract_between, require_meaningful
from .wav_codec import combine_wav_buffers

logger = logging.getLogger(__name__)

PLACEHOLDER_TOPICS = {"null", "none", "unknown", "unknown topic", "cannot determine"}
DEFAULT_TOPIC = "speech topic"

# Strong references to running jobs until they finish
_background_tasks: Set[asyncio.Task] = set()


def is_english(language: str | None) -> bool:
    return isinstance(language, str) and language.lower().startswith("en")


def finalize_topic(topic: str | None, summary: str) -> str:
    """Never deliver an empty or placeholder topic."""
    cleaned = (topic or "").strip()
    if cleaned and cleaned.lower() not in PLACEHOLDER_TOPICS:
        return cleaned

    logger.info("Topic extraction failed, using fallback from summary")
    words = [word for word in summary.split() if len(word) > 2]
    return " ".join(words[:2]) or DEFAULT_TOPIC


class DiarizationPipeline:
    """
    Turns one closed window into a summary and topic for both participants:
    1. Transcription: diarized transcript of the spliced clip.
    2. Selection: preferred speaker or full mix.
    3. Extraction: text between the trigger phrases.
    4. Summary & topic: directly in English, otherwise via translation.
    5. Delivery: observer gets `summary`, performer `summarize_complete`.
    """
    def __init__(self, session_id: str, providers=None, sessions=None):
        self.session_id = session_id
        self.providers = providers or services
        self.sessions = sessions or session_service

    async def run(self, window: CapturedWindow) -> Optional[TopicResult]:
        logger.info(f"========== DIARIZATION START ({self.session_id}) ==========")
        try:
            return await self.process(window)
        except PipelineError as e:
            logger.warning(f"Window aborted for {self.session_id}: {e.code} ({e})")
            await self.sessions.send(self.session_id, Role.PERFORMER, error_event(e))
        except Exception as e:
            logger.exception(f"Diarization error for {self.session_id}: {e}")
            await self.sessions.send(self.session_id, Role.PERFORMER, error_event(ProcessingError(str(e))))
        return None

    async def process(self, window: CapturedWindow) -> TopicResult:
        audio = combine_wav_buffers(window.fragments)
        logger.info(f"Language: {window.language} | Audio: {len(audio)} bytes | Phrases: {window.start_phrase!r} / {window.end_phrase!r}")

        transcript = await self.providers.deepgram.transcribe(audio, window.language, diarize=True)
        selected = select_transcript(transcript)

        await self.sessions.send(self.session_id, Role.PERFORMER, MagicTranscriptEvent(text=selected))

        extracted = extract_between(selected, window.start_phrase, window.end_phrase)
        require_meaningful(extracted)
        logger.info(f"Filtered text ({len(extracted)} of {len(selected)} chars): {extracted[:200]!r}")

        if is_english(window.language):
            summary, topic = await self.summarize_english(extracted, window.language)
        else:
            summary, topic = await self.summarize_translated(extracted, window.language)

        result = TopicResult(summary=summary, topic=finalize_topic(topic, summary))
        logger.info(f"Final summary: {result.summary[:200]!r} | topic: {result.topic!r}")

        await self.sessions.send(self.session_id, Role.OBSERVER, SummaryEvent(summary=result.summary, topic=result.topic))
        self.sessions.set_topic(self.session_id, result.topic)
        await self.sessions.send(self.session_id, Role.PERFORMER, SummarizeCompleteEvent(summary=result.summary, topic=result.topic))

        logger.info(f"========== DIARIZATION END ({self.session_id}) ==========")
        return result

    async def summarize(self, text: str, language: str) -> str:
        try:
            result = await self.providers.deepgram.summarize(text, language)
        except TranscriptionServiceError as e:
            logger.warning(f"Summarization failed, keeping the text itself: {e}")
            return text
        return result.summary or text

    async def topic_for(self, text: str) -> str:
        try:
            return await self.providers.topic_model.extract_exact_topic(text)
        except TopicExtractionFailure as e:
            logger.warning(f"AI topic unavailable ({e}), using local strategies")
            return extract_local_topic(text).topic

    async def summarize_english(self, text: str, language: str) -> tuple[str, str]:
        # Summary and topic come from independent services
        summary = await self.summarize(text, language)
        topic = await self.topic_for(text)
        return summary, topic

    async def summarize_translated(self, text: str, language: str) -> tuple[str, str]:
        translator = self.providers.translator
        try:
            english_text = await translator.translate(text, "en")
            english_summary = await self.summarize(english_text, "en")
            summary = await translator.translate(english_summary, language)
            # Placeholders are caught before translation hides them
            english_topic = finalize_topic(await self.topic_for(english_text), english_summary)
            topic = await translator.translate(english_topic, language)
        except TranslationFailure as e:
            logger.warning(f"Translation process failed, using untranslated text: {e}")
            return text, " ".join(text.split()[:4])
        return summary, topic


async def _run_serialized(buffer: SessionAudioBuffer, window: CapturedWindow, pipeline: DiarizationPipeline) -> None:
    async with buffer.processing_lock:
        await pipeline.run(window)


def schedule_diarization(buffer: SessionAudioBuffer, window: CapturedWindow, providers=None, sessions=None) -> asyncio.Task:
    """
    Start processing a window in the background. Jobs of the same session
    run one after another.
    """
    logger.info(f"Processing {len(window.fragments)} stored fragment(s) for {buffer.session_id}")
    pipeline = DiarizationPipeline(buffer.session_id, providers=providers, sessions=sessions)
    task = asyncio.create_task(_run_serialized(buffer, window, pipeline))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task
