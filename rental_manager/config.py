# rental_manager/config.py
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"

if DOTENV_PATH.is_file():
    load_dotenv(dotenv_path=DOTENV_PATH)


class InterceptHandler(logging.Handler):
    """Route standard-library log records (Flask, werkzeug) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1
        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink and intercept stdlib logging."""
    level = (level or "INFO").upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, colorize=True)
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("werkzeug", "flask.app"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False
    logger.debug(f"Logging level set to: {level}")


class Config:
    """Application settings read from the environment (.env is loaded on import)."""

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
    APP_ENV = os.getenv("APP_ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    SUPABASE_URL = os.getenv("SUPABASE_URL", "")
    SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
    SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

    CONTRACTS_BASE_URL = os.getenv("CONTRACTS_BASE_URL", "https://example.com/contracts")
    TIMEZONE = os.getenv("TIMEZONE", "America/Sao_Paulo")
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024

    @classmethod
    def as_dict(cls) -> dict:
        return {k: getattr(cls, k) for k in dir(cls) if k.isupper()}


class TestConfig(Config):
    TESTING = True
    APP_ENV = "test"
    SECRET_KEY = "test"
    LOG_LEVEL = "WARNING"
