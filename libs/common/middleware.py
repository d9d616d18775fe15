"""Request tracing for the store API.

Every request gets an ``X-Request-ID`` (the caller's, or a fresh one) that is
bound to the logging context and echoed on the response. One access line is
logged per request once the response is ready, carrying status, duration and
the authenticated user when there is one.
"""
import time
from typing import Callable, Optional

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

REQUEST_ID_HEADER = "X-Request-ID"

# Health checks and docs are polled constantly; they get no access line
QUIET_PATHS = frozenset({"/health", "/docs", "/openapi.json"})

logger = get_logger("store.access")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def _caller(request: Request) -> Optional[str]:
    # Set by libs.auth.dependencies.get_current_user
    user = getattr(request.state, "user", None)
    return user.user_id if user else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, quiet_paths=QUIET_PATHS):
        super().__init__(app)
        self.quiet_paths = quiet_paths

    def _access_fields(self, request: Request, **fields) -> dict:
        fields.update(
            user_id=_caller(request),
            client=request.client.host if request.client else None,
        )
        if request.url.query:
            fields["query"] = request.url.query
        return {"extra_fields": fields}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get(REQUEST_ID_HEADER),
            path=request.url.path,
            method=request.method,
        )
        started = time.perf_counter()

        try:
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(
                    "%s %s crashed",
                    request.method,
                    request.url.path,
                    extra=self._access_fields(
                        request, duration_ms=_elapsed_ms(started)
                    ),
                )
                raise

            response.headers[REQUEST_ID_HEADER] = request_id
            if request.url.path not in self.quiet_paths:
                level = "warning" if response.status_code >= 400 else "info"
                getattr(logger, level)(
                    "%s %s %d",
                    request.method,
                    request.url.path,
                    response.status_code,
                    extra=self._access_fields(
                        request,
                        status_code=response.status_code,
                        duration_ms=_elapsed_ms(started),
                    ),
                )
            return response
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install request tracing on ``app``."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
