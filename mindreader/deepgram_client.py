from typing import Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from . import config
from .errors import TranscriptionServiceError
from .models import DiarizedTranscript, SummaryResult


def _flag(value: bool) -> str:
    return "true" if value else "false"


class DeepgramClient:
    """
    Thin async wrapper over the Deepgram REST API: prerecorded transcription
    (`/listen`) and text intelligence (`/read`).
    """
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = config.DEEPGRAM_API_KEY if api_key is None else api_key
        self.model = model or config.DEEPGRAM_MODEL
        self._client = httpx.AsyncClient(
            base_url=base_url or config.DEEPGRAM_BASE_URL,
            headers={"Authorization": f"Token {self.api_key}"},
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def transcribe(self, audio: bytes, language: str, diarize: bool = False) -> DiarizedTranscript:
        """
        Transcribe one WAV buffer. Live fragments use the profanity filter and
        a short timeout; windows are diarized with a long one.
        """
        params = {
            "model": self.model,
            "punctuate": "true",
            "smart_format": "true",
            "filler_words": "false",
            "language": language,
            "diarize": _flag(diarize),
        }
        if not diarize:
            params["profanity_filter"] = "true"
        timeout = config.DIARIZATION_TIMEOUT if diarize else config.FRAGMENT_TRANSCRIBE_TIMEOUT

        try:
            response = await self._client.post(
                "/listen",
                params=params,
                content=audio,
                headers={"Content-Type": "audio/wav"},
                timeout=timeout,
            )
            response.raise_for_status()
            payload = response.json()
            return DiarizedTranscript.model_validate(payload.get("results") or {})
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            logger.error(f"Deepgram transcription failed: {e}")
            raise TranscriptionServiceError(str(e)) from e

    async def summarize(self, text: str, language: str = "en") -> SummaryResult:
        params = {"language": language, "summarize": "v2", "topics": "true"}
        try:
            response = await self._client.post("/read", params=params, json={"text": text}, timeout=config.DIARIZATION_TIMEOUT)
            response.raise_for_status()
            results = response.json().get("results") or {}
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Deepgram summarization failed: {e}")
            raise TranscriptionServiceError(str(e)) from e

        summary = (results.get("summary") or {}).get("text") or ""
        topic = None
        segments = (results.get("topics") or {}).get("segments") or []
        if segments and segments[0].get("topics"):
            topic = segments[0]["topics"][0].get("topic")

        logger.info(f"Deepgram summary: {summary[:100]!r} | topic: {topic!r}")
        return SummaryResult(summary=summary, topic=topic)
