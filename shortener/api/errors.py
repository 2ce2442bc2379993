"""Mapping of service failures to HTTP problem responses.

Every failed request leaves through ``problem_response``, which is the one
place an ``ErrorKind`` is turned into a status code.
"""

import uuid
from typing import Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from shortener.api.schemas import ProblemDetails
from shortener.core.config import settings
from shortener.services.exceptions import ErrorKind, ServiceError
from shortener.services.results import ServiceFailure

PROBLEM_CONTENT_TYPE = "application/problem+json"

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.ALLOCATION_EXHAUSTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.STORAGE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

TITLE_BY_KIND: Dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: "Validation Error",
    ErrorKind.NOT_FOUND: "Resource Not Found",
    ErrorKind.CONFLICT: "Conflict",
    ErrorKind.ALLOCATION_EXHAUSTED: "Internal Server Error",
    ErrorKind.STORAGE: "Internal Server Error",
}

GENERIC_ERROR_MESSAGE = "An error occurred while processing your request."


def get_trace_id(request: Request) -> str:
    """Return the request id set by the logging middleware, or a fresh one."""
    request_id = getattr(request.state, "request_id", None)
    if not request_id:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
    return request_id


def _problem(request: Request, status_code: int, title: str, detail: str, errors=None) -> JSONResponse:
    body = ProblemDetails(
        type=f"https://httpstatuses.com/{status_code}",
        title=title,
        status=status_code,
        detail=detail,
        instance=request.url.path,
        trace_id=get_trace_id(request),
        errors=errors,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        media_type=PROBLEM_CONTENT_TYPE,
    )


def problem_response(request: Request, failure: ServiceFailure) -> JSONResponse:
    """Render a service failure as a problem-details response."""
    status_code = STATUS_BY_KIND[failure.kind]
    return _problem(
        request,
        status_code,
        TITLE_BY_KIND[failure.kind],
        failure.message,
        errors=failure.field_errors,
    )


def not_found(request: Request, short_code: str) -> JSONResponse:
    return problem_response(
        request,
        ServiceFailure(ErrorKind.NOT_FOUND, f"Short code '{short_code}' was not found."),
    )


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle exceptions raised by the service layer."""
    logger.opt(exception=exc).error(
        f"Service error in {request.method} {request.url.path}: {exc.message}",
        kind=exc.kind.value,
        request_id=get_trace_id(request),
    )
    return problem_response(request, ServiceFailure.from_error(exc))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle malformed request bodies and parameters."""
    field_errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(location) or "body"
        field_errors.setdefault(field, []).append(error.get("msg", "Invalid value"))

    logger.info(f"Request validation error: {field_errors}")
    return _problem(
        request,
        status.HTTP_400_BAD_REQUEST,
        TITLE_BY_KIND[ErrorKind.VALIDATION],
        "One or more validation errors occurred.",
        errors=field_errors,
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions; hides internals outside debug mode."""
    trace_id = get_trace_id(request)
    logger.opt(exception=exc).error(
        f"Unhandled exception in {request.method} {request.url.path}",
        request_id=trace_id,
        path_params=request.path_params,
        client_host=request.client.host if request.client else None,
    )
    return _problem(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        str(exc) if settings.DEBUG else GENERIC_ERROR_MESSAGE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
