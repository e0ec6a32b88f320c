"""Async HTTP client for the quiz service API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from quizgen.errors import InvalidInputError, TransportError, UpstreamError
from quizgen.quiz.models import QuestionRecord

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"
# Synchronous generation holds the request open for the whole model call.
SYNC_GENERATION_TIMEOUT = 600.0


@dataclass(frozen=True)
class SubmissionReply:
  accepted: bool
  message: str


@dataclass(frozen=True)
class StatusReply:
  """Client view of the job slot."""

  status: str
  mcqs: tuple[QuestionRecord, ...] = ()
  error: str | None = None
  progress: str | None = None
  start_time: int | None = None


def _reply_message(response: httpx.Response, fallback: str, *, keys: tuple[str, ...] = ("error",)) -> str:
  try:
    body = response.json()
  except ValueError:
    return fallback
  if isinstance(body, dict):
    for key in keys:
      if isinstance(body.get(key), str):
        return body[key]
  return fallback


def _parse_records(raw: Any) -> tuple[QuestionRecord, ...]:
  if not isinstance(raw, list):
    raise TransportError("Quiz service returned questions in an unexpected shape")
  try:
    return tuple(QuestionRecord.model_validate(item) for item in raw)
  except ValidationError as exc:
    raise TransportError("Quiz service returned a malformed question") from exc


class QuizServiceClient:
  """Thin wrapper over httpx that maps replies onto the error taxonomy."""

  def __init__(self, base_url: str = DEFAULT_BASE_URL, *, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None) -> None:
    self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

  async def __aenter__(self) -> QuizServiceClient:
    return self

  async def __aexit__(self, *exc_info: object) -> None:
    await self.aclose()

  async def aclose(self) -> None:
    await self._client.aclose()

  async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
    try:
      return await self._client.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
      logger.debug("Request %s %s failed: %s", method, url, exc)
      raise TransportError(f"Could not reach the quiz service: {exc}") from exc

  async def submit(self, document: bytes, filename: str, credential: str, *, with_polling: bool = True) -> SubmissionReply:
    """Upload a document; asynchronous mode returns as soon as the job is accepted or refused."""
    data = {"apiKey": credential}
    timeout: float | httpx.Timeout | None = None
    if with_polling:
      data["withPolling"] = "true"
    else:
      timeout = SYNC_GENERATION_TIMEOUT

    kwargs: dict[str, Any] = {"files": {"pdf": (filename, document, "application/pdf")}, "data": data}
    if timeout is not None:
      kwargs["timeout"] = timeout
    response = await self._request("POST", "/api/process-pdf", **kwargs)

    if response.status_code == httpx.codes.BAD_REQUEST:
      raise InvalidInputError(_reply_message(response, "The quiz service rejected the upload"))

    if response.status_code == httpx.codes.CONFLICT:
      return SubmissionReply(accepted=False, message=_reply_message(response, "Another PDF is currently being processed", keys=("message", "error")))

    if response.status_code in {httpx.codes.OK, httpx.codes.ACCEPTED}:
      return SubmissionReply(accepted=True, message=_reply_message(response, "PDF processing started", keys=("message", "error")))

    if response.status_code >= 500 and not with_polling:
      raise UpstreamError(_reply_message(response, "Failed to process PDF"))

    raise TransportError(f"Unexpected response from quiz service: HTTP {response.status_code}")

  async def fetch_status(self) -> StatusReply:
    response = await self._request("GET", "/api/process-pdf")
    if response.status_code != httpx.codes.OK:
      raise TransportError("Failed to check processing status")

    try:
      body = response.json()
    except ValueError as exc:
      raise TransportError("Quiz service returned an unreadable status") from exc
    if not isinstance(body, dict) or not isinstance(body.get("status"), str):
      raise TransportError("Quiz service returned an unreadable status")

    return StatusReply(status=body["status"], mcqs=_parse_records(body.get("mcqs", [])), error=body.get("error"), progress=body.get("progress"), start_time=body.get("startTime"))

  async def fetch_mcqs(self) -> tuple[QuestionRecord, ...] | None:
    """Return the last generated question set, or None when nothing was generated yet."""
    response = await self._request("GET", "/api/get-mcqs")
    if response.status_code == httpx.codes.NOT_FOUND:
      return None
    if response.status_code != httpx.codes.OK:
      raise TransportError(f"Failed to fetch MCQs: HTTP {response.status_code}")
    try:
      body = response.json()
    except ValueError as exc:
      raise TransportError("Quiz service returned unreadable MCQs") from exc
    return _parse_records(body)

