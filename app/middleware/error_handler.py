"""
Last-resort error handling for the HTTP surface.

The data store degrades to mock data instead of raising, so anything that
reaches this middleware is a bug in the service itself.
"""
import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable


logger = logging.getLogger(__name__)


def _using_mock_data(request: Request) -> bool:
    data_store = getattr(request.app.state, "data_store", None)
    return bool(data_store is not None and data_store.is_using_mock_data())


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn unhandled exceptions into a JSON 500 response."""

    async def dispatch(self, request: Request, call_next: Callable):
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                f"Unhandled error on {request.method} {request.url.path}: {e}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error_type": type(e).__name__,
                    "using_mock_data": _using_mock_data(request),
                }
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal server error",
                    "detail": "An unexpected error occurred",
                }
            )
