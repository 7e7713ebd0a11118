# backend/drivigo/errors.py
"""
Problem-document error handlers.

Every HTTP and validation error is rendered as
``{type, title, status, detail, instance, code?, request_id?, errors?}``.
``detail`` always holds the human-readable message the client shows.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.request_context import get_request_id

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"

_TITLES = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    409: "Conflict",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}


def _problem(
    *,
    status_code: int,
    detail: Optional[str],
    instance: str,
    code: Optional[str] = None,
    errors: Optional[Any] = None,
) -> Dict[str, Any]:
    problem: Dict[str, Any] = {
        "type": "about:blank",
        "title": _TITLES.get(status_code, "Error"),
        "status": status_code,
        "detail": detail or "",
        "instance": instance,
    }
    if code:
        problem["code"] = code
    request_id = get_request_id()
    if request_id:
        problem["request_id"] = request_id
    if errors:
        problem["errors"] = jsonable_encoder(errors)
    return problem


def _parse_detail(detail: Any) -> tuple[Optional[str], Optional[str], Optional[Any]]:
    """Split an HTTPException detail into (message, code, errors)."""
    if isinstance(detail, dict):
        message = detail.get("message") or detail.get("detail")
        code = detail.get("code")
        return (
            message if isinstance(message, str) else None,
            code if isinstance(code, str) else None,
            detail.get("details") or detail.get("errors"),
        )
    if detail is None:
        return None, None, None
    return str(detail), None, None


def _first_validation_message(errors: list[Dict[str, Any]]) -> str:
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        message, code, errors = _parse_detail(exc.detail)
        return JSONResponse(
            _problem(
                status_code=exc.status_code,
                detail=message,
                instance=request.url.path,
                code=code,
                errors=errors,
            ),
            status_code=exc.status_code,
            media_type=PROBLEM_MEDIA_TYPE,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = jsonable_encoder(exc.errors())
        return JSONResponse(
            _problem(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=_first_validation_message(errors),
                instance=request.url.path,
                code="validation_error",
                errors=errors,
            ),
            status_code=status.HTTP_400_BAD_REQUEST,
            media_type=PROBLEM_MEDIA_TYPE,
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(
            _problem(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Internal Server Error",
                instance=request.url.path,
                code="internal_server_error",
            ),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            media_type=PROBLEM_MEDIA_TYPE,
        )
