"""
Failure taxonomy for the recording/diarization flow.

Each error knows which wire event reports it to the performer and with which
code and message (see `event_streamer.error_event`).
"""

DIARIZATION_ERROR = "diarization_error"
NO_RECORDING_ERROR = "no_recording_error"


class PipelineError(Exception):
    event = DIARIZATION_ERROR
    code = "processing_error"
    message = "Error processing audio. Please try again."

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.message)
        self.detail = detail


class TranscriptionServiceError(PipelineError):
    code = "deepgram_error"
    message = "Transcription failed. Please try again."


class NoSpeechDetected(PipelineError):
    code = "no_speaker_detected"
    message = "No speech detected. Please speak louder or try again."


class TextTooShort(PipelineError):
    event = NO_RECORDING_ERROR
    code = "text_too_short"
    message = "No meaningful speech detected. Please speak at least 2 characters of text."


class NoChunksCaptured(PipelineError):
    event = NO_RECORDING_ERROR
    code = "no_chunks_captured"
    message = "No audio captured during magic. Recording was too short or silent."


class MagicNotStarted(PipelineError):
    event = NO_RECORDING_ERROR
    code = "magic_not_started"
    message = "Magic was never started. Please start magic before stopping."


class TranslationFailure(PipelineError):
    """Recovered locally; the untranslated text is used instead."""
    code = "translation_error"
    message = "Translation failed."


class TopicExtractionFailure(PipelineError):
    """Recovered locally by the topic fallback chain."""
    code = "topic_error"
    message = "Topic extraction failed."


class ProcessingError(PipelineError):
    pass
