import logging
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from quizgen.errors import QuizGenError

logger = logging.getLogger("uvicorn.error")

# Keys pydantic uses to echo request data back; multipart input can hold the API key.
_ECHO_KEYS = frozenset({"input", "url"})


def _json_safe(value: Any) -> Any:
  """Reduce a value to JSON primitives, dropping echoed request data from mappings."""
  if isinstance(value, BaseException):
    return f"{type(value).__name__}: {value}" if str(value) else type(value).__name__
  if isinstance(value, dict):
    return {str(key): _json_safe(item) for key, item in value.items() if key not in _ECHO_KEYS}
  if isinstance(value, list | tuple | set):
    return [_json_safe(item) for item in value]
  if value is None or isinstance(value, bool | int | float | str):
    return value
  return str(value)


def _sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
  return [_json_safe(error) for error in errors]


def _error_payload(error: Any, *, request_id: str | None = None) -> dict[str, Any]:
  """Build the ``{"error": ...}`` body shared by every failure response."""
  payload: dict[str, Any] = {"error": error}
  if request_id:
    payload["requestId"] = request_id
  return payload


def _request_id(request: Request) -> str | None:
  return getattr(request.state, "request_id", None)


def _error_response(request: Request, status_code: int, error: Any, *, headers: dict[str, str] | None = None) -> JSONResponse:
  return JSONResponse(status_code=status_code, content=_error_payload(error, request_id=_request_id(request)), headers=headers)


async def quizgen_exception_handler(request: Request, exc: QuizGenError) -> JSONResponse:
  """Map the domain error taxonomy onto HTTP status codes."""
  level = logging.ERROR if exc.status_code >= 500 else logging.INFO
  logger.log(level, "%s on %s request_id=%s: %s", type(exc).__name__, request.url.path, _request_id(request), exc.message)
  return _error_response(request, exc.status_code, exc.message)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
  logger.error("Unhandled %s on %s request_id=%s", type(exc).__name__, request.url.path, _request_id(request), exc_info=exc)
  return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
  errors = _sanitize_validation_errors(exc.errors())
  logger.warning("Invalid request %s %s request_id=%s errors=%s", request.method, request.url.path, _request_id(request), errors)
  return _error_response(request, 422, errors)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
  """Pass 4xx details through; 5xx details stay in the logs."""
  from quizgen.config import get_settings

  if exc.status_code >= 500:
    logger.error("HTTP %s on %s request_id=%s detail=%s", exc.status_code, request.url.path, _request_id(request), exc.detail)
    return _error_response(request, exc.status_code, "Internal Server Error")

  if get_settings().log_http_4xx:
    logger.warning("HTTP %s on %s request_id=%s detail=%s", exc.status_code, request.url.path, _request_id(request), exc.detail)
  return _error_response(request, exc.status_code, exc.detail, headers=getattr(exc, "headers", None))
