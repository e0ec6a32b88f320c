"""Process-wide holder of the current job state."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from quizgen.jobs.models import IDLE_SNAPSHOT, JobSnapshot, JobStatus
from quizgen.quiz.models import QuestionRecord

logger = logging.getLogger(__name__)


class JobRegistry:
  """Single-slot job store.

  All methods are synchronous and never suspend, so on a single event loop a
  check followed by a write cannot interleave with another coroutine. One
  instance is built per serving process and injected where it is needed.
  """

  def __init__(self) -> None:
    self._state: JobSnapshot = IDLE_SNAPSHOT
    self._last_result: tuple[QuestionRecord, ...] | None = None

  def read(self) -> JobSnapshot:
    return self._state

  def try_begin(self, start_time: datetime) -> bool:
    """Claim the slot unless a job is already processing."""
    if self._state.status is JobStatus.PROCESSING:
      return False
    self.set_processing(start_time)
    return True

  def set_processing(self, start_time: datetime) -> None:
    self._state = JobSnapshot(status=JobStatus.PROCESSING, start_time=start_time)
    logger.info("Job slot -> processing start_time=%s", start_time.isoformat())

  def set_progress(self, label: str) -> None:
    """Update the phase label of a processing job; ignored in any other state."""
    current = self._state
    if current.status is not JobStatus.PROCESSING:
      logger.debug("Ignoring progress %r while job is %s", label, current.status.value)
      return
    self._state = JobSnapshot(status=JobStatus.PROCESSING, start_time=current.start_time, progress=label)

  def set_completed(self, result: Sequence[QuestionRecord]) -> None:
    records = tuple(result)
    self._state = JobSnapshot(status=JobStatus.COMPLETED, result=records)
    self._last_result = records
    logger.info("Job slot -> completed questions=%d", len(records))

  def set_failed(self, message: str) -> None:
    self._state = JobSnapshot(status=JobStatus.FAILED, error=message)
    logger.info("Job slot -> failed error=%s", message)

  def store_result(self, result: Sequence[QuestionRecord]) -> None:
    """Remember a result produced outside the job slot (synchronous generation)."""
    self._last_result = tuple(result)

  def last_result(self) -> tuple[QuestionRecord, ...] | None:
    return self._last_result
