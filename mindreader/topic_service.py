import asyncio
import random
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from loguru import logger

from . import config
from .errors import TopicExtractionFailure
from .prompts import get_exact_topic_prompt, get_exact_topic_system_instructions

RETRYABLE_STATUS = {429, 503}


class TopicService:
    """
    Gemini-backed topic calls. The client is created lazily so a missing
    key or credential only fails the call that needs it.
    """
    def __init__(self, model_name: str | None = None):
        self.model_name = model_name or config.GEMINI_MODEL
        self._client = None

    @property
    def configured(self) -> bool:
        return bool(config.GEMINI_API_KEY or config.GOOGLE_CLOUD_PROJECT)

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if config.GEMINI_API_KEY:
                self._client = genai.Client(api_key=config.GEMINI_API_KEY)
            elif config.GOOGLE_CLOUD_PROJECT:
                self._client = genai.Client(
                    vertexai=True,
                    project=config.GOOGLE_CLOUD_PROJECT,
                    location=config.GOOGLE_CLOUD_LOCATION,
                )
            else:
                raise TopicExtractionFailure("Neither GEMINI_API_KEY nor GOOGLE_CLOUD_PROJECT is set")
        return self._client

    async def generate(
        self,
        prompt: str,
        system_instruction: str | None = None,
        max_output_tokens: int = 20,
        temperature: float = 0.1,
        max_retries: int = 3,
    ) -> str:
        """
        Generates a short completion with exponential backoff on rate limits
        and unavailability. Raises TopicExtractionFailure otherwise.
        """
        client = self._get_client()
        generation_config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            max_output_tokens=max_output_tokens,
            temperature=temperature,
        )
        base_delay = 1

        for attempt in range(max_retries):
            try:
                # Running in thread to avoid blocking the event loop.
                response = await asyncio.to_thread(
                    client.models.generate_content,
                    model=self.model_name,
                    contents=prompt,
                    config=generation_config,
                )
                return (response.text or "").strip()
            except genai_errors.APIError as e:
                if e.code not in RETRYABLE_STATUS:
                    logger.error(f"Non-retriable Gemini error: {e}")
                    raise TopicExtractionFailure(str(e)) from e
                wait_time = (base_delay * (2 ** attempt)) + random.uniform(0, 1)
                logger.warning(f"Gemini returned {e.code}. Retrying in {wait_time:.2f}s... (Attempt {attempt + 1}/{max_retries})")
                await asyncio.sleep(wait_time)
            except Exception as e:
                logger.error(f"Gemini call failed: {e}")
                raise TopicExtractionFailure(str(e)) from e

        raise TopicExtractionFailure(f"Gemini retries exhausted after {max_retries} attempts")

    async def extract_exact_topic(self, text: str) -> str:
        """
        Concise (1-4 word) topic of `text`, used by the realtime pipeline.
        """
        if not text or not text.strip():
            return ""

        logger.info(f"Extracting topic from text: {text[:100]!r}")
        topic = await self.generate(
            get_exact_topic_prompt(text),
            system_instruction=get_exact_topic_system_instructions(),
        )
        if not topic:
            raise TopicExtractionFailure("Empty topic from Gemini")
        logger.info(f"Extracted topic: {topic!r}")
        return topic


