"""Shared fixtures: an in-process quiz service wired to a scripted generator."""

from __future__ import annotations

import asyncio
import json

import pytest
from httpx import ASGITransport, AsyncClient

from quizgen.ai.prompts import PromptProfile
from quizgen.api.deps import get_quiz_service
from quizgen.jobs.registry import JobRegistry
from quizgen.jobs.runner import JobSupervisor
from quizgen.main import app
from quizgen.services.quiz import QuizService

SAMPLE_QUESTIONS = [
  {"question": "What is the capital of France?", "options": ["Berlin", "Madrid", "Paris", "Rome"], "correctAnswer": "Paris", "explanation": "Paris is the capital of France."},
  {"question": "Which planet is known as the red planet?", "options": ["Venus", "Mars", "Jupiter", "Saturn"], "correctAnswer": "Mars", "explanation": "Iron oxide gives Mars its colour."},
  {"question": "What is 2 + 2?", "options": ["3", "4", "5", "22"], "correctAnswer": "4", "explanation": "Basic addition."},
  {"question": "Which gas do plants absorb?", "options": ["Oxygen", "Nitrogen", "Carbon dioxide", "Helium"], "correctAnswer": "Carbon dioxide", "explanation": "Photosynthesis consumes CO2."},
]


class StubGenerator:
  """Scripted stand-in for the generation provider."""

  def __init__(self, text: str | None = None, *, error: Exception | None = None, gate: asyncio.Event | None = None) -> None:
    self.text = text if text is not None else json.dumps(SAMPLE_QUESTIONS)
    self.error = error
    self.gate = gate
    self.calls: list[tuple[bytes, str, PromptProfile]] = []

  async def generate(self, document: bytes, credential: str, profile: PromptProfile) -> str:
    self.calls.append((document, credential, profile))
    # Hold the job in the processing state until the test releases it.
    if self.gate is not None:
      await self.gate.wait()
    if self.error is not None:
      raise self.error
    return self.text


@pytest.fixture
def anyio_backend() -> str:
  return "asyncio"


@pytest.fixture
def sample_questions() -> list[dict[str, object]]:
  return [dict(item) for item in SAMPLE_QUESTIONS]


@pytest.fixture
def make_generator() -> type[StubGenerator]:
  return StubGenerator


@pytest.fixture
def stub_generator() -> StubGenerator:
  return StubGenerator()


@pytest.fixture
def registry() -> JobRegistry:
  return JobRegistry()


@pytest.fixture
def supervisor() -> JobSupervisor:
  return JobSupervisor()


@pytest.fixture
def quiz_service(registry: JobRegistry, stub_generator: StubGenerator, supervisor: JobSupervisor) -> QuizService:
  return QuizService(registry, stub_generator, supervisor)


@pytest.fixture
async def async_client(quiz_service: QuizService, supervisor: JobSupervisor):
  app.dependency_overrides[get_quiz_service] = lambda: quiz_service
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    yield client
  app.dependency_overrides.clear()
  await supervisor.shutdown(0)
