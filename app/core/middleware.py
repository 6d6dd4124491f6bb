# ErrorEnvelopeMiddleware
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from fastapi import Request, Response
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorEnvelopeMiddleware(BaseHTTPMiddleware):
    """Request id and timing headers, plus a last-resort 500 envelope."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint):
        start = time.time()
        request_id = request.headers.get("x-request-id", str(uuid.uuid4())[:8])
        request.state.rid = request_id
        try:
            response: Response = await call_next(request)
        except Exception:
            # Detail goes to the log only; clients get a generic message
            logger.exception("Unhandled error on %s %s [%s]", request.method, request.url.path, request_id)
            response = JSONResponse(
                status_code=500,
                content={"success": False, "message": "Internal Server Error"},
            )
        response.headers.setdefault("x-request-id", request_id)
        response.headers.setdefault("x-content-type-options", "nosniff")
        response.headers["server-timing"] = f"total;dur={(time.time() - start) * 1000:.2f}"
        return response
