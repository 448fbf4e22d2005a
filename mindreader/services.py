from loguru import logger

from .deepgram_client import DeepgramClient
from .topic_service import TopicService
from .translation_service import TranslationService


class Services:
    """
    Holds the external collaborators. Tests swap attributes for fakes after
    startup.
    """
    def __init__(self):
        self.deepgram = None
        self.translator = None
        self.topic_model = None

    async def init_services(self):
        logger.info(f"Starting external service clients... Instance ID: {id(self)}")

        self.deepgram = DeepgramClient()
        if not self.deepgram.configured:
            logger.warning("DEEPGRAM_API_KEY is not set; transcription calls will fail.")

        self.translator = TranslationService()

        self.topic_model = TopicService()
        if not self.topic_model.configured:
            logger.warning("No Gemini credentials (GEMINI_API_KEY / GOOGLE_CLOUD_PROJECT); topics use local strategies.")

        logger.info("External service clients initialized.")

    async def close_services(self):
        if isinstance(self.deepgram, DeepgramClient):
            await self.deepgram.aclose()

services = Services()
