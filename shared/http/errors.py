"""RFC 7807 problem details and the exception handlers that emit them."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Mapping, cast

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.observability.logger import get_logger

__all__ = [
    "PROBLEM_BASE_URI",
    "ProblemDetails",
    "ProblemDetailsException",
    "register_exception_handlers",
]

logger = get_logger(__name__)

PROBLEM_BASE_URI = "https://census.local/problems"

_PROBLEM_FIELDS = {"type", "title", "status", "detail", "instance"}


class ProblemDetails(BaseModel):
    """Problem details payload; unknown keys are carried as extensions."""

    type: str = Field(default="about:blank", description="URI identifying the error type")
    title: str = Field(default="An error occurred", description="Short human-readable summary")
    status: int = Field(default=status.HTTP_500_INTERNAL_SERVER_ERROR)
    detail: str | None = Field(default=None, description="Detailed description of the error")
    instance: str | None = Field(default=None, description="URI of the failing request")
    errors: list[Any] | None = Field(default=None, description="Validation errors when applicable")

    model_config = ConfigDict(extra="allow")


class ProblemDetailsException(RuntimeError):
    """Base exception carrying problem details metadata.

    Subclasses override the ``default_*`` class attributes and pass any
    problem-specific members through ``extensions``.
    """

    default_status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_title = "Service Error"
    default_type = "about:blank"

    def __init__(
        self,
        detail: str | None = None,
        *,
        status_code: int | None = None,
        title: str | None = None,
        type_uri: str | None = None,
        extensions: Mapping[str, Any] | None = None,
    ) -> None:
        message = detail or title or self.default_title
        super().__init__(message)
        self.detail = message
        self.status_code = status_code or self.default_status_code
        self.title = title or self.default_title
        self.problem_type = type_uri or self.default_type
        self.extensions = dict(extensions or {})

    def to_problem_details(self, *, instance: str | None = None) -> ProblemDetails:
        return ProblemDetails(
            type=self.problem_type,
            title=self.title,
            status=self.status_code,
            detail=self.detail,
            instance=instance,
            **self.extensions,
        )


def _problem_response(problem: ProblemDetails) -> JSONResponse:
    payload = problem.model_dump(mode="json", exclude_none=True)
    return JSONResponse(payload, status_code=problem.status)


def _status_title(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "HTTP Error"


def _split_detail(detail: Any) -> tuple[str | None, dict[str, Any]]:
    if isinstance(detail, Mapping):
        message = detail.get("detail") or detail.get("message")
        extras = {k: v for k, v in detail.items() if k not in _PROBLEM_FIELDS}
        extras.pop("message", None)
        return (str(message) if message is not None else None), extras
    if isinstance(detail, list):
        return None, {"errors": detail}
    if detail is None:
        return None, {}
    return str(detail), {}


def _http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    http_error = cast(StarletteHTTPException, exc)
    detail, extras = _split_detail(http_error.detail)
    return _problem_response(
        ProblemDetails(
            title=_status_title(http_error.status_code),
            status=http_error.status_code,
            detail=detail,
            instance=str(request.url),
            **extras,
        )
    )


def _validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    validation_error = cast(RequestValidationError, exc)
    return _problem_response(
        ProblemDetails(
            type=f"{PROBLEM_BASE_URI}/request-validation",
            title="Request Validation Failed",
            status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="One or more request fields failed validation.",
            instance=str(request.url),
            errors=validation_error.errors(),
        )
    )


def _problem_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    problem_exception = cast(ProblemDetailsException, exc)
    return _problem_response(problem_exception.to_problem_details(instance=str(request.url)))


def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", error=str(exc), path=request.url.path)
    return _problem_response(
        ProblemDetails(
            type=f"{PROBLEM_BASE_URI}/internal-server-error",
            title="Internal Server Error",
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while processing the request.",
            instance=str(request.url),
        )
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers that render every error as problem details."""

    app.add_exception_handler(ProblemDetailsException, _problem_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
