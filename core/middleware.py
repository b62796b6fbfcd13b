"""
Request logging middleware
"""
import time
import uuid
import logging
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from core.config import settings

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its tenant, status and processing time"""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        tenant = request.headers.get(settings.TENANT_HEADER) or settings.DEFAULT_ORG_MAIL or "-"

        start_time = time.time()
        logger.info(f"Request {request_id}: {request.method} {request.url.path} - Tenant: {tenant}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(f"Request {request_id} failed: {str(e)} - Time: {process_time:.3f}s")
            raise

        process_time = time.time() - start_time
        logger.info(f"Response {request_id}: {response.status_code} - Time: {process_time:.3f}s")

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        return response
