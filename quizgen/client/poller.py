"""Client-side polling state machine for background quiz jobs."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from quizgen.client.http import StatusReply, SubmissionReply
from quizgen.errors import BusyError, InvalidInputError, PollTimeoutError, QuizGenError, TransportError, UpstreamError
from quizgen.quiz.models import QuestionRecord

logger = logging.getLogger(__name__)

MSG_UPLOADING = "Uploading PDF and starting processing..."
MSG_STARTED = "PDF uploaded. Processing started..."
MSG_SUCCESS = "MCQs generated successfully!"
MSG_UNKNOWN_FAILURE = "Processing failed for unknown reasons"
MSG_CONNECTIVITY = "Error checking processing status. Please refresh the page."
MSG_TIMEOUT = "Processing timed out. Please try again with a smaller PDF."
MSG_CANCELLED = "Processing cancelled."


class PollerState(str, Enum):
  IDLE = "idle"
  SUBMITTING = "submitting"
  POLLING = "polling"
  SUCCEEDED = "succeeded"
  FAILED = "failed"
  CANCELLED = "cancelled"


class FailureKind(str, Enum):
  """Why a poll run ended in the failed state."""

  INVALID_INPUT = "invalid_input"
  BUSY = "busy"
  JOB_FAILED = "job_failed"
  TRANSPORT = "transport"
  TIMEOUT = "timeout"


@dataclass(frozen=True)
class PollPolicy:
  """Cadence, retry budget and time ceilings, all in seconds."""

  interval: float = 2.0
  max_retries: int = 3
  slow_after: float = 180.0
  timeout_after: float = 300.0
  completion_delay: float = 1.0


@dataclass(frozen=True)
class PollOutcome:
  state: PollerState
  result: tuple[QuestionRecord, ...] = ()
  error: str | None = None
  failure: FailureKind | None = None
  elapsed: float = 0.0

  def raise_for_failure(self) -> None:
    """Raise the error matching an unsuccessful outcome; do nothing on success."""
    if self.state is PollerState.SUCCEEDED:
      return
    message = self.error or MSG_CANCELLED
    error_type = _FAILURE_ERRORS.get(self.failure, QuizGenError) if self.failure else QuizGenError
    raise error_type(message)


_FAILURE_ERRORS: dict[FailureKind, type[QuizGenError]] = {
  FailureKind.INVALID_INPUT: InvalidInputError,
  FailureKind.BUSY: BusyError,
  FailureKind.JOB_FAILED: UpstreamError,
  FailureKind.TRANSPORT: TransportError,
  FailureKind.TIMEOUT: PollTimeoutError,
}


class QuizServiceApi(Protocol):
  async def submit(self, document: bytes, filename: str, credential: str, *, with_polling: bool = True) -> SubmissionReply: ...

  async def fetch_status(self) -> StatusReply: ...


@dataclass
class _PollRun:
  started: float
  consecutive_failures: int = 0
  elapsed: float = 0.0


def _current_task() -> asyncio.Task | None:
  try:
    return asyncio.current_task()
  except RuntimeError:
    return None


class StatusPoller:
  """Submit a document and poll the status endpoint until a terminal outcome.

  Every path ends: the first ``completed`` or ``failed`` status, the retry
  budget running out on consecutive transport failures, the elapsed-time
  ceiling, or a user cancel. Giving up only stops this client; the server-side
  job keeps running and nobody tells it otherwise.
  """

  def __init__(
    self,
    api: QuizServiceApi,
    *,
    policy: PollPolicy | None = None,
    on_progress: Callable[[str], None] | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
  ) -> None:
    self._api = api
    self._policy = policy or PollPolicy()
    self._on_progress = on_progress
    self._sleep = sleep
    self._clock = clock
    self._state = PollerState.IDLE
    self._progress = ""
    self._task: asyncio.Task[PollOutcome] | None = None
    self._cancel_requested = False

  @property
  def state(self) -> PollerState:
    return self._state

  @property
  def progress(self) -> str:
    """Latest user-facing progress label."""
    return self._progress

  @property
  def running(self) -> bool:
    return self._task is not None and not self._task.done()

  async def __aenter__(self) -> StatusPoller:
    return self

  async def __aexit__(self, *exc_info: object) -> None:
    await self.aclose()

  def start(self, document: bytes, filename: str, credential: str) -> asyncio.Task[PollOutcome]:
    """Run the submit-and-poll cycle as a task owned by this poller."""
    if self.running:
      raise RuntimeError("A poll run is already in progress.")
    self._task = asyncio.get_running_loop().create_task(self.run(document, filename, credential), name="quiz-status-poller")
    return self._task

  def cancel(self) -> None:
    """Stop polling locally; the server job is not notified."""
    self._cancel_requested = True
    task = self._task
    if task is None or task.done() or task is _current_task():
      # From inside the run itself the flag is enough; the loop checks it before each poll.
      return
    task.cancel()

  async def aclose(self) -> None:
    """Tear down: make sure no poll task outlives the poller."""
    task = self._task
    if task is None:
      return
    if not task.done():
      self.cancel()
    try:
      await task
    except asyncio.CancelledError:
      pass
    finally:
      self._task = None

  async def run(self, document: bytes, filename: str, credential: str) -> PollOutcome:
    """Submit and poll in the calling task; ``cancel()`` still applies when awaited directly."""
    self._cancel_requested = False
    owns_task = self._task is None
    if owns_task:
      self._task = asyncio.current_task()
    try:
      return await self._run(document, filename, credential)
    except asyncio.CancelledError:
      if not self._cancel_requested:
        raise
      # The cancellation was ours; clear it so the caller's task keeps running normally.
      current = asyncio.current_task()
      if current is not None:
        current.uncancel()
      return self._cancelled()
    finally:
      if owns_task:
        self._task = None

  async def _run(self, document: bytes, filename: str, credential: str) -> PollOutcome:
    self._state = PollerState.SUBMITTING
    self._set_progress(MSG_UPLOADING)
    try:
      reply = await self._api.submit(document, filename, credential, with_polling=True)
    except InvalidInputError as exc:
      return self._finish(PollerState.FAILED, error=exc.message, failure=FailureKind.INVALID_INPUT)
    except TransportError as exc:
      return self._finish(PollerState.FAILED, error=exc.message, failure=FailureKind.TRANSPORT)

    if not reply.accepted:
      return self._finish(PollerState.FAILED, error=f"{reply.message}. Please try again later.", failure=FailureKind.BUSY)

    self._state = PollerState.POLLING
    self._set_progress(MSG_STARTED)
    return await self._poll()

  async def _poll(self) -> PollOutcome:
    policy = self._policy
    run = _PollRun(started=self._clock())

    while True:
      if self._cancel_requested:
        return self._cancelled()
      await self._sleep(policy.interval)
      run.elapsed = self._clock() - run.started

      try:
        status = await self._api.fetch_status()
      except TransportError as exc:
        run.consecutive_failures += 1
        logger.warning("Status check failed (%d in a row): %s", run.consecutive_failures, exc.message)
        if run.consecutive_failures > policy.max_retries:
          return self._finish(PollerState.FAILED, error=MSG_CONNECTIVITY, failure=FailureKind.TRANSPORT, elapsed=run.elapsed)
        self._set_progress(f"Connection problem, retrying... (attempt {run.consecutive_failures} of {policy.max_retries})")
        continue

      run.consecutive_failures = 0

      if status.status == "completed":
        self._set_progress(MSG_SUCCESS)
        # Let the success message show briefly before handing the quiz over.
        await self._sleep(policy.completion_delay)
        return self._finish(PollerState.SUCCEEDED, result=status.mcqs, elapsed=run.elapsed)

      if status.status == "failed":
        return self._finish(PollerState.FAILED, error=status.error or MSG_UNKNOWN_FAILURE, failure=FailureKind.JOB_FAILED, elapsed=run.elapsed)

      # Anything else, including an idle slot after a server restart, keeps polling under the ceilings.
      if run.elapsed >= policy.timeout_after:
        return self._finish(PollerState.FAILED, error=MSG_TIMEOUT, failure=FailureKind.TIMEOUT, elapsed=run.elapsed)

      seconds = int(run.elapsed)
      if run.elapsed > policy.slow_after:
        self._set_progress(f"Still processing... ({seconds} seconds elapsed). This is taking longer than expected.")
      elif status.progress:
        self._set_progress(status.progress)
      else:
        self._set_progress(f"Still processing... ({seconds} seconds elapsed)")

  def _cancelled(self) -> PollOutcome:
    self._set_progress(MSG_CANCELLED)
    return self._finish(PollerState.CANCELLED)

  def _set_progress(self, label: str) -> None:
    self._progress = label
    if self._on_progress is not None:
      self._on_progress(label)

  def _finish(self, state: PollerState, *, result: tuple[QuestionRecord, ...] = (), error: str | None = None, failure: FailureKind | None = None, elapsed: float = 0.0) -> PollOutcome:
    self._state = state
    if error is not None:
      logger.info("Polling ended state=%s failure=%s error=%s", state.value, failure.value if failure else None, error)
    return PollOutcome(state=state, result=result, error=error, failure=failure, elapsed=elapsed)
