"""Unit tests for the single-slot job registry."""

from __future__ import annotations

from datetime import UTC, datetime

from quizgen.jobs.models import JobStatus
from quizgen.jobs.registry import JobRegistry
from quizgen.quiz.models import QuestionRecord

START = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


def _record() -> QuestionRecord:
  return QuestionRecord(question="Q?", options=("a", "b", "c", "d"), correct_answer="a", explanation="because")


def test_new_registry_is_idle() -> None:
  registry = JobRegistry()
  snapshot = registry.read()
  assert snapshot.status is JobStatus.IDLE
  assert snapshot.to_wire() == {"status": "idle", "mcqs": []}
  assert registry.last_result() is None


def test_try_begin_claims_the_slot_once() -> None:
  registry = JobRegistry()
  assert registry.try_begin(START) is True
  assert registry.try_begin(START) is False
  snapshot = registry.read()
  assert snapshot.status is JobStatus.PROCESSING
  assert snapshot.to_wire()["startTime"] == int(START.timestamp() * 1000)


def test_progress_only_applies_while_processing() -> None:
  registry = JobRegistry()
  registry.set_progress("ignored")
  assert registry.read().progress is None

  registry.set_processing(START)
  registry.set_progress("Sending to generation service...")
  snapshot = registry.read()
  assert snapshot.progress == "Sending to generation service..."
  assert snapshot.start_time == START


def test_completion_clears_processing_fields() -> None:
  registry = JobRegistry()
  registry.set_processing(START)
  registry.set_progress("Processing response...")
  registry.set_completed([_record()])

  wire = registry.read().to_wire()
  assert wire["status"] == "completed"
  assert len(wire["mcqs"]) == 1
  assert "progress" not in wire
  assert "startTime" not in wire
  assert "error" not in wire
  assert registry.last_result() == (_record(),)


def test_new_job_clears_previous_error_and_result() -> None:
  registry = JobRegistry()
  registry.set_processing(START)
  registry.set_failed("boom")
  assert registry.read().to_wire() == {"status": "failed", "mcqs": [], "error": "boom"}

  assert registry.try_begin(START) is True
  snapshot = registry.read()
  assert snapshot.error is None
  assert snapshot.result == ()


def test_failure_keeps_the_last_good_result() -> None:
  registry = JobRegistry()
  registry.store_result([_record()])
  registry.set_processing(START)
  registry.set_failed("boom")
  assert registry.last_result() == (_record(),)
