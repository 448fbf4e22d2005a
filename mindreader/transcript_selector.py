from typing import Dict, Tuple

from loguru import logger

from .errors import NoSpeechDetected
from .models import DiarizedTranscript

PREFERRED_SPEAKER = 0


def collect_speakers(transcript: DiarizedTranscript) -> Tuple[Dict[int, str], str]:
    """
    Group words by speaker index and build the channel-agnostic full text.
    Words without a speaker label count as speaker 0.
    """
    speakers: Dict[int, list] = {}
    full_parts = []

    for channel in transcript.channels:
        for alternative in channel.alternatives:
            if alternative.transcript:
                full_parts.append(alternative.transcript)
            for word in alternative.words:
                speaker = word.speaker if word.speaker is not None else PREFERRED_SPEAKER
                speakers.setdefault(speaker, []).append(word.text)

    by_speaker = {speaker: " ".join(words) for speaker, words in speakers.items()}
    return by_speaker, " ".join(full_parts)


def select_transcript(transcript: DiarizedTranscript) -> str:
    """Preferred speaker's text, else the full mix. Raises NoSpeechDetected."""
    by_speaker, full_text = collect_speakers(transcript)
    logger.info(f"Found {len(by_speaker)} speaker(s) via diarization")

    preferred = by_speaker.get(PREFERRED_SPEAKER, "").strip()
    if preferred:
        logger.info(f"Using speaker {PREFERRED_SPEAKER} transcript ({len(preferred)} chars)")
        return preferred

    full_text = full_text.strip()
    if full_text:
        logger.info(f"No speaker {PREFERRED_SPEAKER} found, using full transcript ({len(full_text)} chars)")
        return full_text

    raise NoSpeechDetected()
