# app/core/middleware.py
import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger("app.access")


def register_request_logging(app: FastAPI) -> None:
    """
    Log one line per request:

        Method: GET, Endpoint: /api/v1/cart, Status: 200, Duration: 3.12ms
    """

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Method: %s, Endpoint: %s, Status: %d, Duration: %.2fms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response
