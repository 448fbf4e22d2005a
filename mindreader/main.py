import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from contextlib import asynccontextmanager

from . import config
from .api_gateway import websocket_endpoint
from .logging_config import logging_middleware, setup_logging
from .routers import audio, topic
from .services import services

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await services.init_services()
    logger.info("Mind reader server ready.")
    yield
    await services.close_services()

app = FastAPI(
    title="Mind Reader API",
    description="""
    Pairs a performer and an observer in a session, records the performer's
    speech between two trigger phrases and pushes a summary and topic of it
    to both participants.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(logging_middleware)

app.include_router(audio.router)
app.include_router(topic.router)
app.add_api_websocket_route("/ws", websocket_endpoint)

# System Endpoints

@app.get("/health", tags=["System"], summary="Health Check")
async def health_check():
    """
    Report which external services are configured.
    """
    deepgram = services.deepgram
    topic_model = services.topic_model
    return {
        "status": "online",
        "deepgram": "configured" if deepgram and deepgram.configured else "missing",
        "gemini": "configured" if topic_model and topic_model.configured else "missing",
    }

if __name__ == "__main__":
    uvicorn.run("mindreader.main:app", host="0.0.0.0", port=config.PORT, reload=True)
