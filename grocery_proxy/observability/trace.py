import logging
import time

from fastapi import Request

logger = logging.getLogger(__name__)


async def trace_request(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    latency = int((time.perf_counter() - start) * 1000)
    logger.info(
        "method=%s path=%s status=%s latency_ms=%s",
        request.method,
        request.url.path,
        response.status_code,
        latency,
    )
    return response
