import sys
import logging
import os
import uuid
from loguru import logger
from fastapi import Request

from . import config

# <level> and </level> are loguru tags for coloring
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level> {extra}"
)

class InterceptHandler(logging.Handler):
    """
    Forwards standard logging records (uvicorn, httpx, modules using
    logging.getLogger) to loguru.
    """
    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())

def setup_logging(log_dir: str | None = None, level: str | None = None):
    """
    Configures loguru as the only sink and routes standard logging into it.
    """
    log_dir = config.LOG_DIR if log_dir is None else log_dir
    level = level or config.LOG_LEVEL

    logger.remove()

    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        logger.add(
            os.path.join(log_dir, "mindreader_{time:YYYY-MM-DD}.log"),
            format=LOG_FORMAT,
            level="DEBUG",
            rotation="10 MB",
            retention="10 days",
            compression="zip",
            backtrace=True,
            diagnose=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for logger_name in ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi", "httpx"):
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False

    logger.info(f"Logging initialized (level={level}, file_sink={'on' if log_dir else 'off'}).")

async def logging_middleware(request: Request, call_next):
    request_id = str(uuid.uuid4())
    # Bind request_id to all logs in this request context
    with logger.contextualize(request_id=request_id):
        logger.info(f"Incoming request: {request.method} {request.url.path}")
        response = await call_next(request)
        logger.info(f"Completed request: {request.method} {request.url.path} - Status: {response.status_code}")
        return response
