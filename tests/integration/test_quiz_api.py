"""End-to-end tests for the submission, status and result endpoints."""

from __future__ import annotations

import asyncio
import json
from dataclasses import replace

import pytest
from httpx import AsyncClient

from quizgen.ai.prompts import FAST_PROFILE, FULL_PROFILE
from quizgen.config import get_settings
from quizgen.errors import UpstreamError
from quizgen.jobs.registry import JobRegistry
from quizgen.jobs.runner import JobSupervisor
from quizgen.main import app

PDF = ("notes.pdf", b"%PDF-1.4 sample", "application/pdf")


def _async_form(api_key: str = "key-123") -> dict[str, str]:
  return {"apiKey": api_key, "withPolling": "true"}


@pytest.mark.anyio
async def test_background_job_completes_and_is_served(async_client: AsyncClient, supervisor: JobSupervisor, stub_generator) -> None:
  response = await async_client.post("/api/process-pdf", files={"pdf": PDF}, data=_async_form())
  assert response.status_code == 202
  assert response.json() == {"status": "processing", "message": "PDF processing started"}

  await supervisor.wait_idle()

  status = (await async_client.get("/api/process-pdf")).json()
  assert status["status"] == "completed"
  assert len(status["mcqs"]) == 4
  assert status["mcqs"][0]["correctAnswer"] == "Paris"
  assert "error" not in status
  assert stub_generator.calls[0][1:] == ("key-123", FAST_PROFILE)

  mcqs = await async_client.get("/api/get-mcqs")
  assert mcqs.status_code == 200
  assert mcqs.json() == status["mcqs"]


@pytest.mark.anyio
async def test_status_is_idle_before_any_submission(async_client: AsyncClient) -> None:
  response = await async_client.get("/api/process-pdf")
  assert response.json() == {"status": "idle", "mcqs": []}
  assert "x-request-id" in response.headers


@pytest.mark.anyio
async def test_upstream_failure_is_reported_through_status(async_client: AsyncClient, supervisor: JobSupervisor, stub_generator) -> None:
  stub_generator.error = UpstreamError("Gemini generation failed: quota exceeded")

  await async_client.post("/api/process-pdf", files={"pdf": PDF}, data=_async_form())
  await supervisor.wait_idle()

  status = (await async_client.get("/api/process-pdf")).json()
  assert status["status"] == "failed"
  assert status["error"] == "Gemini generation failed: quota exceeded"
  assert status["mcqs"] == []
  assert (await async_client.get("/api/get-mcqs")).status_code == 404


@pytest.mark.anyio
async def test_fenced_output_is_parsed(async_client: AsyncClient, supervisor: JobSupervisor, stub_generator, sample_questions: list[dict[str, object]]) -> None:
  stub_generator.text = f"```json\n{json.dumps(sample_questions)}\n```"

  await async_client.post("/api/process-pdf", files={"pdf": PDF}, data=_async_form())
  await supervisor.wait_idle()

  status = (await async_client.get("/api/process-pdf")).json()
  assert status["status"] == "completed"
  assert status["mcqs"] == sample_questions


@pytest.mark.anyio
async def test_second_submission_is_refused_while_processing(async_client: AsyncClient, supervisor: JobSupervisor, stub_generator) -> None:
  gate = asyncio.Event()
  stub_generator.gate = gate

  first, second = await asyncio.gather(
    async_client.post("/api/process-pdf", files={"pdf": PDF}, data=_async_form()),
    async_client.post("/api/process-pdf", files={"pdf": PDF}, data=_async_form()),
  )

  assert sorted([first.status_code, second.status_code]) == [202, 409]
  refused = first if first.status_code == 409 else second
  assert refused.json() == {"status": "busy", "message": "Another PDF is currently being processed"}

  status = (await async_client.get("/api/process-pdf")).json()
  assert status["status"] == "processing"
  assert isinstance(status["startTime"], int)

  gate.set()
  await supervisor.wait_idle()
  assert len(stub_generator.calls) == 1
  assert (await async_client.get("/api/process-pdf")).json()["status"] == "completed"


@pytest.mark.anyio
async def test_resubmission_after_completion_starts_a_fresh_job(async_client: AsyncClient, supervisor: JobSupervisor, stub_generator) -> None:
  await async_client.post("/api/process-pdf", files={"pdf": PDF}, data=_async_form())
  await supervisor.wait_idle()

  stub_generator.error = UpstreamError("Gemini generation failed: boom")
  response = await async_client.post("/api/process-pdf", files={"pdf": PDF}, data=_async_form())
  assert response.status_code == 202
  await supervisor.wait_idle()

  status = (await async_client.get("/api/process-pdf")).json()
  assert status["status"] == "failed"
  assert status["mcqs"] == []
  # The last good result is still served.
  assert (await async_client.get("/api/get-mcqs")).status_code == 200


@pytest.mark.anyio
@pytest.mark.parametrize(
  ("files", "data", "message"),
  [
    (None, {"apiKey": "key-123", "withPolling": "true"}, "No file uploaded"),
    ({"pdf": ("empty.pdf", b"", "application/pdf")}, {"apiKey": "key-123"}, "Uploaded file is empty"),
    ({"pdf": PDF}, {"withPolling": "true"}, "API key is required"),
    ({"pdf": PDF}, {"apiKey": "   ", "withPolling": "true"}, "API key is required"),
  ],
)
async def test_invalid_submissions_are_rejected(async_client: AsyncClient, stub_generator, files, data: dict[str, str], message: str) -> None:
  response = await async_client.post("/api/process-pdf", files=files, data=data)
  assert response.status_code == 400
  assert response.json()["error"] == message
  assert (await async_client.get("/api/process-pdf")).json()["status"] == "idle"
  assert stub_generator.calls == []


@pytest.mark.anyio
async def test_synchronous_generation_returns_count(async_client: AsyncClient, registry: JobRegistry, stub_generator) -> None:
  response = await async_client.post("/api/process-pdf", files={"pdf": PDF}, data={"apiKey": "key-123"})

  assert response.status_code == 200
  assert response.json() == {"success": True, "count": 4}
  assert stub_generator.calls[0][2] is FULL_PROFILE
  # Synchronous generation never touches the job slot.
  assert registry.read().status.value == "idle"
  assert len((await async_client.get("/api/get-mcqs")).json()) == 4


@pytest.mark.anyio
async def test_synchronous_generation_failures_are_500(async_client: AsyncClient, stub_generator) -> None:
  stub_generator.text = "Sorry, I cannot help with that."
  response = await async_client.post("/api/process-pdf", files={"pdf": PDF}, data={"apiKey": "key-123", "withPolling": "false"})
  assert response.status_code == 500
  assert response.json()["error"] == "Failed to parse AI response into valid MCQs"


@pytest.mark.anyio
async def test_get_mcqs_is_404_before_any_generation(async_client: AsyncClient) -> None:
  response = await async_client.get("/api/get-mcqs")
  assert response.status_code == 404
  assert response.json() == {"error": "No MCQs found"}


@pytest.mark.anyio
async def test_oversized_uploads_are_rejected(async_client: AsyncClient, stub_generator) -> None:
  app.dependency_overrides[get_settings] = lambda: replace(get_settings(), max_upload_bytes=8)

  response = await async_client.post("/api/process-pdf", files={"pdf": ("big.pdf", b"x" * 9, "application/pdf")}, data=_async_form())

  assert response.status_code == 400
  assert response.json()["error"] == "Uploaded file exceeds the 8 byte limit"
  assert stub_generator.calls == []
