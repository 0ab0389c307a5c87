# backend/app/errors.py
"""
Problem-document error responses.

Domain exceptions, HTTP exceptions and request validation failures all
leave the API in the same shape::

    {"type": "about:blank", "title": "Bad Request", "status": 400,
     "detail": "...", "instance": "/api/v1/...", "code": "...", "errors": [...]}

``code`` and ``errors`` are present only when there is something to say.
"""

from http import HTTPStatus
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException

logger = logging.getLogger(__name__)


def _status_title(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Error"


def _split_detail(detail: Any) -> Tuple[Optional[str], Optional[str], Any]:
    """Pull (message, code, errors) out of whatever an exception carried as detail."""
    if detail is None:
        return None, None, None
    if isinstance(detail, dict):
        message = detail.get("message") or detail.get("detail")
        code = detail.get("code")
        return (
            message if isinstance(message, str) else None,
            code if isinstance(code, str) else None,
            detail.get("details") or detail.get("errors"),
        )
    return str(detail), None, None


def problem_response(
    request: Request,
    status: int,
    detail: Any = None,
    *,
    code: Optional[str] = None,
    errors: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    message, detail_code, detail_errors = _split_detail(detail)
    code = code or detail_code
    errors = errors if errors is not None else detail_errors

    body: Dict[str, Any] = {
        "type": "about:blank",
        "title": _status_title(status),
        "status": status,
        "detail": message or "",
        "instance": request.url.path,
    }
    if code:
        body["code"] = code
    if errors:
        body["errors"] = jsonable_encoder(errors)
    return JSONResponse(body, status_code=status, headers=headers)


async def _on_domain_error(request: Request, exc: DomainException) -> JSONResponse:
    http_exc = exc.to_http_exception()
    if http_exc.status_code >= 500:
        logger.error("%s: %s", exc.code, exc.message, extra={"path": request.url.path})
    return problem_response(request, http_exc.status_code, http_exc.detail)


async def _on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return problem_response(request, exc.status_code, exc.detail, headers=exc.headers)


async def _on_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return problem_response(
        request,
        422,
        "Request validation failed",
        code="validation_error",
        errors=exc.errors(),
    )


async def _on_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return problem_response(request, 500, "Internal Server Error", code="internal_server_error")


def register_error_handlers(app: FastAPI) -> None:
    # FastAPI's HTTPException subclasses Starlette's, so one handler covers both.
    app.add_exception_handler(DomainException, _on_domain_error)
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(RequestValidationError, _on_validation_error)
    app.add_exception_handler(Exception, _on_unexpected_error)
