import re
from typing import NamedTuple

from loguru import logger

from .errors import TextTooShort
from .text_utils import normalize_text, strip_non_word

# Artifact left when slicing the original text at a normalized offset
_LEADING_FRAGMENT = re.compile(r"^[a-zA-Z]\s+")

MIN_MEANINGFUL_CHARS = 2


class TriggerScan(NamedTuple):
    has_start: bool
    has_end: bool


def scan_for_trigger(transcript: str, start_phrase: str | None, end_phrase: str | None) -> TriggerScan:
    """
    Substring test of both phrases against a normalized transcript.
    An empty phrase never matches.
    """
    text = normalize_text(transcript)
    start = normalize_text(start_phrase)
    end = normalize_text(end_phrase)
    return TriggerScan(
        has_start=bool(start) and start in text,
        has_end=bool(end) and end in text,
    )


def extract_between(full_text: str, start_phrase: str | None, end_phrase: str | None) -> str:
    """
    Return the part of `full_text` spoken between the start and end phrases.

    Indices are located on normalized copies and applied to the original
    text so punctuation from the transcription survives.
    """
    if not full_text or not full_text.strip():
        return ""

    text = normalize_text(full_text)
    start = normalize_text(start_phrase)
    end = normalize_text(end_phrase)

    start_index = text.find(start) if start else -1
    end_index = text.rfind(end) if end else -1
    start_offset = start_index + len(start)

    if start_index != -1 and end_index != -1 and start_index < end_index <= start_offset + 1:
        logger.debug("Only trigger phrases found, nothing between them")
        return ""

    if start_index != -1 and (end_index == -1 or end_index <= start_index):
        extracted = full_text[start_offset:].strip()
        return _LEADING_FRAGMENT.sub("", extracted)

    if end_index != -1 and start_index == -1:
        return full_text[:end_index].strip()

    if start_index != -1 and end_index > start_index:
        extracted = full_text[start_offset:end_index].strip()
        return _LEADING_FRAGMENT.sub("", extracted)

    logger.debug("No trigger phrases detected, using full text")
    return full_text.strip()


def require_meaningful(extracted: str) -> str:
    """Raise TextTooShort unless the text keeps at least two word characters."""
    cleaned = strip_non_word(extracted)
    if len(cleaned) < MIN_MEANINGFUL_CHARS:
        raise TextTooShort(f"Filtered text too short: {extracted!r}")
    return cleaned
