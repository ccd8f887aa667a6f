"""
Error responses for the proxy routes.

The dashboard expects failures as {"error": ..., "details": ...} with the
upstream's own status code passed through, so routes raise APIError instead
of HTTPException.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from portfolio_engine.logging import get_logger
from portfolio_engine.upstream.errors import (
    ConfigurationMissing,
    NetworkError,
    UpstreamError,
)

logger = get_logger(__name__)


class ErrorResponse(BaseModel):
    """Error body returned to the dashboard."""

    error: str
    details: str | None = None


class APIError(Exception):
    """Raised by routes to produce an ErrorResponse."""

    def __init__(self, status_code: int, error: str, details: str | None = None):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Render APIError as JSON."""
    body = ErrorResponse(error=exc.error, details=exc.details)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
    )


def translate_upstream_error(exc: Exception, *, api_error: str, failure: str) -> APIError:
    """
    Map a client-layer exception onto the dashboard's error contract.

    Args:
        exc: Exception raised while serving the request
        api_error: Summary used when the upstream answered with an error status
        failure: Summary used for transport and unexpected failures

    Returns:
        APIError ready to raise
    """
    if isinstance(exc, ConfigurationMissing):
        logger.error("%s", str(exc))
        return APIError(500, str(exc))

    if isinstance(exc, UpstreamError):
        logger.error("%s: status=%d", api_error, exc.status_code)
        return APIError(exc.status_code, api_error, exc.body)

    if isinstance(exc, NetworkError):
        logger.error("%s: %s", failure, str(exc))
    else:
        logger.exception("%s: %s", failure, str(exc))
    return APIError(500, failure, str(exc))
