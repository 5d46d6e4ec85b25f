"""
Process-wide logging setup.
"""
import logging
import time

from fastapi import FastAPI, Request

from samplehub.config import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

request_logger = logging.getLogger("samplehub.api")


def setup_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def install_request_logging(app: FastAPI, settings: Settings) -> None:
    """Log method, path, status and duration of every request when enabled."""
    if not (settings.api_log_enabled or settings.is_development):
        return

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        request_logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
