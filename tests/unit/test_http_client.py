"""Unit tests for the quiz service HTTP client."""

from __future__ import annotations

import httpx
import pytest

from quizgen.client.http import QuizServiceClient
from quizgen.errors import InvalidInputError, TransportError, UpstreamError


def _client(handler) -> QuizServiceClient:
  return QuizServiceClient("http://quiz.test", transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_submit_sends_multipart_form_and_reads_acceptance() -> None:
  seen: list[httpx.Request] = []

  def handler(request: httpx.Request) -> httpx.Response:
    seen.append(request)
    return httpx.Response(202, json={"status": "processing", "message": "PDF processing started"})

  async with _client(handler) as client:
    reply = await client.submit(b"%PDF-1.4", "notes.pdf", "key-123")

  assert reply.accepted is True
  assert reply.message == "PDF processing started"
  body = seen[0].content
  assert seen[0].url.path == "/api/process-pdf"
  assert b'name="apiKey"' in body
  assert b"key-123" in body
  assert b'name="withPolling"' in body
  assert b'filename="notes.pdf"' in body


@pytest.mark.anyio
async def test_submit_maps_busy_reply() -> None:
  async with _client(lambda request: httpx.Response(409, json={"status": "busy", "message": "Another PDF is currently being processed"})) as client:
    reply = await client.submit(b"doc", "notes.pdf", "key")
  assert reply.accepted is False
  assert reply.message == "Another PDF is currently being processed"


@pytest.mark.anyio
async def test_submit_raises_on_rejected_input() -> None:
  async with _client(lambda request: httpx.Response(400, json={"error": "API key is required"})) as client:
    with pytest.raises(InvalidInputError) as excinfo:
      await client.submit(b"doc", "notes.pdf", "")
  assert excinfo.value.message == "API key is required"


@pytest.mark.anyio
async def test_sync_submit_raises_upstream_error_on_server_failure() -> None:
  async with _client(lambda request: httpx.Response(500, json={"error": "Failed to parse AI response into valid MCQs"})) as client:
    with pytest.raises(UpstreamError) as excinfo:
      await client.submit(b"doc", "notes.pdf", "key", with_polling=False)
  assert excinfo.value.message == "Failed to parse AI response into valid MCQs"


@pytest.mark.anyio
async def test_network_errors_become_transport_errors() -> None:
  def handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)

  async with _client(handler) as client:
    with pytest.raises(TransportError):
      await client.fetch_status()


@pytest.mark.anyio
async def test_fetch_status_parses_snapshot() -> None:
  payload = {
    "status": "completed",
    "mcqs": [{"question": "Q?", "options": ["a", "b", "c", "d"], "correctAnswer": "a", "explanation": "because"}],
  }
  async with _client(lambda request: httpx.Response(200, json=payload)) as client:
    reply = await client.fetch_status()
  assert reply.status == "completed"
  assert reply.mcqs[0].correct_answer == "a"
  assert reply.error is None


@pytest.mark.anyio
async def test_fetch_status_rejects_non_ok_replies() -> None:
  async with _client(lambda request: httpx.Response(502, text="bad gateway")) as client:
    with pytest.raises(TransportError) as excinfo:
      await client.fetch_status()
  assert excinfo.value.message == "Failed to check processing status"


@pytest.mark.anyio
async def test_fetch_mcqs_returns_none_when_nothing_generated() -> None:
  async with _client(lambda request: httpx.Response(404, json={"error": "No MCQs found"})) as client:
    assert await client.fetch_mcqs() is None
