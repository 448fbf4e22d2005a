import asyncio
from deep_translator import GoogleTranslator
from loguru import logger

from .errors import TranslationFailure


def translator_code(language: str) -> str:
    """Map a transcription language tag (e.g. `es-419`) to a Google Translate code."""
    language = language.strip()
    if language.lower() in ("zh-cn", "zh-tw"):
        return language[:2].lower() + "-" + language[3:].upper()
    return language.split("-")[0].lower()


class TranslationService:
    async def translate(self, text: str, target_language: str) -> str:
        if not text or not text.strip():
            return text

        logger.info(f"Translating to {target_language}: {text[:100]!r}")
        try:
            translator = GoogleTranslator(source="auto", target=translator_code(target_language))
            translated = await asyncio.to_thread(translator.translate, text)
        except Exception as e:
            logger.warning(f"Translation to {target_language} failed: {e}")
            raise TranslationFailure(str(e)) from e

        if not translated:
            raise TranslationFailure(f"Empty translation for target {target_language}")
        return translated


