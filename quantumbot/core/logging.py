"""Logging setup plus a dev-style access log middleware."""
import logging
import time

from fastapi import FastAPI, Request

from quantumbot.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

access_logger = logging.getLogger("quantumbot.access")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT)


def install_access_log(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_request(request: Request, call_next):
        """One line per request: method, path, status, duration."""
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        access_logger.info(
            "%s %s %s %.1f ms", request.method, request.url.path, response.status_code, elapsed_ms
        )
        return response
