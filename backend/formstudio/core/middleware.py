"""
Request Middleware
Tags every request with an id, times it, and gives every error response
the same JSON shape: ``{"detail": ..., "request_id": ...}``.
"""
import time
from typing import Any, Callable, Dict

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from formstudio.core.logging import (
    api_logger,
    generate_request_id,
    get_request_id,
    request_id_var,
    request_start_var,
)

REQUEST_ID_HEADER = 'X-Request-ID'

# Probes hit these constantly; keep them out of the request log
QUIET_PATHS = ('/healthz', '/readyz')


def _request_id_of(request: Request) -> str:
    return getattr(request.state, 'request_id', None) or get_request_id() or 'unknown'


def error_response(request: Request, status_code: int, body: Dict[str, Any]) -> JSONResponse:
    request_id = _request_id_of(request)
    return JSONResponse(
        status_code=status_code,
        content={**body, 'request_id': request_id},
        headers={REQUEST_ID_HEADER: request_id},
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        request.state.request_id = request_id
        request_id_var.set(request_id)
        request_start_var.set(time.time())

        route = f"{request.method} {request.url.path}"
        quiet = request.url.path.endswith(QUIET_PATHS)
        try:
            try:
                response = await call_next(request)
            except Exception as e:
                api_logger.error(f"{route} -> 500 (unhandled)", error=e)
                return error_response(request, 500, {'detail': 'Internal server error'})

            response.headers[REQUEST_ID_HEADER] = request_id
            if not quiet:
                log = api_logger.info if response.status_code < 400 else api_logger.warning
                log(f"{route} -> {response.status_code}", status=response.status_code)
            return response
        finally:
            request_id_var.set(None)
            request_start_var.set(None)


async def http_exception_handler(request: Request, exc) -> JSONResponse:
    status_code = getattr(exc, 'status_code', 500)
    detail = getattr(exc, 'detail', 'Unknown error')

    log = api_logger.error if status_code >= 500 else api_logger.warning
    log(f"HTTP {status_code}", detail=detail, path=request.url.path)
    return error_response(request, status_code, {'detail': detail})


async def validation_exception_handler(request: Request, exc) -> JSONResponse:
    """Request body/query validation failures, flattened to field/message pairs."""
    errors = [
        {
            'field': '.'.join(str(part) for part in error.get('loc', ())),
            'message': error.get('msg', 'Validation error'),
            'type': error.get('type', 'value_error'),
        }
        for error in exc.errors()
    ]
    api_logger.warning(f"Invalid request to {request.method} {request.url.path}", errors=len(errors))
    return error_response(request, 422, {'detail': 'Validation error', 'errors': errors})
