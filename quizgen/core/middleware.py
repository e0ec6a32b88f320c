import logging
import time
import uuid

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger("quizgen.core.middleware")

REQUEST_ID_HEADER = "x-request-id"
_MAX_INBOUND_REQUEST_ID = 128


def _resolve_request_id(scope: Scope) -> str:
  """Reuse a sane caller-supplied request id, otherwise mint one."""
  candidate = (Headers(scope=scope).get(REQUEST_ID_HEADER) or "").strip()
  if candidate and len(candidate) <= _MAX_INBOUND_REQUEST_ID and candidate.isprintable():
    return candidate
  return uuid.uuid4().hex


class RequestLoggingMiddleware:
  """Tag each HTTP request with an id and log its outcome and latency.

  Bodies are never read: uploads carry the caller's API key.
  """

  def __init__(self, app: ASGIApp) -> None:
    self.app = app

  async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
    if scope["type"] != "http":
      await self.app(scope, receive, send)
      return

    request_id = _resolve_request_id(scope)
    # Handlers read this back through request.state.request_id.
    scope.setdefault("state", {})["request_id"] = request_id
    started = time.perf_counter()
    response_status = 0

    async def send_with_request_id(message: Message) -> None:
      nonlocal response_status
      if message["type"] == "http.response.start":
        response_status = message["status"]
        headers = MutableHeaders(scope=message)
        headers.setdefault(REQUEST_ID_HEADER, request_id)
      await send(message)

    try:
      await self.app(scope, receive, send_with_request_id)
    finally:
      elapsed_ms = (time.perf_counter() - started) * 1000
      logger.info("%s %s -> %s in %.1fms request_id=%s", scope.get("method", "?"), scope.get("path", ""), response_status or "error", elapsed_ms, request_id)
