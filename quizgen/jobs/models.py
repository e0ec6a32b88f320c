"""Domain models for the single-slot quiz generation job."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from quizgen.quiz.models import QuestionRecord


class JobStatus(str, Enum):
  """Lifecycle tag of the current job."""

  IDLE = "idle"
  PROCESSING = "processing"
  COMPLETED = "completed"
  FAILED = "failed"

  @property
  def terminal(self) -> bool:
    return self in {JobStatus.COMPLETED, JobStatus.FAILED}


@dataclass(frozen=True)
class JobSnapshot:
  """Immutable view of the job slot.

  Only the fields relevant to ``status`` are populated; every transition builds
  a fresh snapshot so nothing leaks over from a previous job.
  """

  status: JobStatus
  result: tuple[QuestionRecord, ...] = ()
  progress: str | None = None
  start_time: datetime | None = None
  error: str | None = None

  def to_wire(self) -> dict[str, Any]:
    """Serialize for the status endpoint, omitting unset optional fields."""
    payload: dict[str, Any] = {"status": self.status.value, "mcqs": [record.to_wire() for record in self.result]}
    if self.error is not None:
      payload["error"] = self.error
    if self.start_time is not None:
      payload["startTime"] = int(self.start_time.timestamp() * 1000)
    if self.progress is not None:
      payload["progress"] = self.progress
    return payload


IDLE_SNAPSHOT = JobSnapshot(status=JobStatus.IDLE)
