from typing import Optional
from fastapi import APIRouter, File, Form, UploadFile
from fastapi.responses import JSONResponse
from loguru import logger

from .. import config
from ..asr import handle_audio_chunk
from ..models import ChunkResponse, ErrorResponse

router = APIRouter(prefix="/api", tags=["Audio"])

@router.post(
    "/process-audio-chunk",
    response_model=ChunkResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def process_audio_chunk(
    audio: Optional[UploadFile] = File(None),
    sessionId: str = Form(""),
    startKeyword: str = Form(""),
    endKeyword: str = Form(""),
    isMagicActive: str = Form("false"),
    chunkNumber: Optional[str] = Form(None),
    language: str = Form(config.DEFAULT_LANGUAGE),
):
    logger.info(f"========== CHUNK {chunkNumber} ({sessionId}) | Magic Active: {isMagicActive} ==========")

    if audio is None:
        return JSONResponse(status_code=400, content={"error": "No audio file provided"})

    try:
        if not sessionId:
            return JSONResponse(status_code=400, content={"error": "No session id provided"})

        data = await audio.read()
        if len(data) > config.MAX_UPLOAD_BYTES:
            return JSONResponse(
                status_code=413,
                content={"error": "File too large", "message": f"Audio exceeds {config.MAX_UPLOAD_BYTES} bytes"},
            )

        return await handle_audio_chunk(
            session_id=sessionId,
            audio=data,
            start_keyword=startKeyword,
            end_keyword=endKeyword,
            magic_active=isMagicActive == "true",
            language=language or config.DEFAULT_LANGUAGE,
        )
    except Exception as e:
        logger.exception(f"Fragment processing failed for {sessionId}: {e}")
        return JSONResponse(status_code=500, content={"error": "Processing failed", "message": str(e)})
    finally:
        await audio.close()
