"""Submission, status and result operations behind the quiz API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from quizgen.ai.prompts import FAST_PROFILE, FULL_PROFILE
from quizgen.ai.providers.base import QuizGenerator
from quizgen.errors import InvalidInputError
from quizgen.jobs.models import JobSnapshot
from quizgen.jobs.registry import JobRegistry
from quizgen.jobs.runner import JobRunner, JobSupervisor
from quizgen.quiz.models import QuestionRecord
from quizgen.quiz.parser import parse_questions

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "Another PDF is currently being processed"
STARTED_MESSAGE = "PDF processing started"


@dataclass(frozen=True)
class SubmissionOutcome:
  """Result of an asynchronous submission attempt."""

  accepted: bool
  reason: str


def _utcnow() -> datetime:
  return datetime.now(UTC)


def validate_submission(document: bytes | None, credential: str | None, *, max_bytes: int) -> tuple[bytes, str]:
  """Return the cleaned inputs or raise InvalidInputError."""
  if document is None:
    raise InvalidInputError("No file uploaded")
  if not document:
    raise InvalidInputError("Uploaded file is empty")
  if len(document) > max_bytes:
    raise InvalidInputError(f"Uploaded file exceeds the {max_bytes} byte limit")

  key = (credential or "").strip()
  if not key:
    raise InvalidInputError("API key is required")
  return document, key


class QuizService:
  """Coordinate the job slot, the background runner and the generator."""

  def __init__(self, registry: JobRegistry, generator: QuizGenerator, supervisor: JobSupervisor, *, strict: bool = False, clock: Callable[[], datetime] = _utcnow) -> None:
    self._registry = registry
    self._generator = generator
    self._supervisor = supervisor
    self._strict = strict
    self._clock = clock

  def submit(self, document: bytes, credential: str) -> SubmissionOutcome:
    """Start a background job unless one is already running.

    Deliberately synchronous: the slot check and the claim happen without a
    suspension point, so two concurrent submissions cannot both be accepted.
    """
    if not self._registry.try_begin(self._clock()):
      logger.info("Rejected submission: a job is already processing")
      return SubmissionOutcome(accepted=False, reason=BUSY_MESSAGE)

    runner = JobRunner(self._registry, self._generator, profile=FAST_PROFILE, strict=self._strict)
    self._supervisor.spawn(runner.run(document, credential), name="quiz-job")
    logger.info("Accepted submission document_bytes=%d", len(document))
    return SubmissionOutcome(accepted=True, reason=STARTED_MESSAGE)

  async def generate_now(self, document: bytes, credential: str) -> list[QuestionRecord]:
    """Generate with the full profile while the caller waits; errors propagate."""
    raw_text = await self._generator.generate(document, credential, FULL_PROFILE)
    records = parse_questions(raw_text, strict=self._strict)
    self._registry.store_result(records)
    logger.info("Synchronous generation finished questions=%d", len(records))
    return records

  def status(self) -> JobSnapshot:
    return self._registry.read()

  def latest_result(self) -> tuple[QuestionRecord, ...] | None:
    return self._registry.last_result()
