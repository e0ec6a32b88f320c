"""Background execution of quiz generation jobs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

from quizgen.ai.prompts import FAST_PROFILE, PromptProfile
from quizgen.ai.providers.base import QuizGenerator
from quizgen.errors import QuizGenError
from quizgen.jobs.registry import JobRegistry
from quizgen.quiz.parser import parse_questions

logger = logging.getLogger(__name__)

PROGRESS_PREPARING = "Preparing payload..."
PROGRESS_SENDING = "Sending to generation service..."
PROGRESS_PARSING = "Processing response..."

GENERIC_FAILURE = "Unknown error during processing"
CANCELLED_FAILURE = "Processing was cancelled"


class JobRunner:
  """Drive one job through its phases and leave the registry in a terminal state.

  Failures never escape ``run``: provider and parser errors, as well as
  anything unexpected, become a ``failed`` job carrying the error message.
  Nothing is retried; a failed job needs a fresh submission.
  """

  def __init__(self, registry: JobRegistry, generator: QuizGenerator, *, profile: PromptProfile = FAST_PROFILE, strict: bool = False) -> None:
    self._registry = registry
    self._generator = generator
    self._profile = profile
    self._strict = strict

  async def run(self, document: bytes, credential: str) -> None:
    registry = self._registry
    try:
      registry.set_progress(PROGRESS_PREPARING)
      payload = bytes(document)

      registry.set_progress(PROGRESS_SENDING)
      raw_text = await self._generator.generate(payload, credential, self._profile)

      registry.set_progress(PROGRESS_PARSING)
      records = parse_questions(raw_text, strict=self._strict)
    except asyncio.CancelledError:
      registry.set_failed(CANCELLED_FAILURE)
      raise
    except QuizGenError as exc:
      logger.warning("Quiz job failed error_type=%s message=%s", type(exc).__name__, exc.message)
      registry.set_failed(exc.message or GENERIC_FAILURE)
      return
    except Exception as exc:  # noqa: BLE001
      logger.error("Quiz job crashed error_type=%s", type(exc).__name__, exc_info=True)
      registry.set_failed(str(exc) or GENERIC_FAILURE)
      return

    registry.set_completed(records)


class JobSupervisor:
  """Own background job tasks so they outlive the request that started them."""

  def __init__(self) -> None:
    self._tasks: set[asyncio.Task[None]] = set()

  @property
  def active(self) -> int:
    return len(self._tasks)

  def spawn(self, coro: Coroutine[Any, Any, None], *, name: str | None = None) -> asyncio.Task[None]:
    """Schedule the coroutine on the running loop without awaiting it."""
    task = asyncio.get_running_loop().create_task(coro, name=name)
    self._tasks.add(task)
    task.add_done_callback(self._on_done)
    return task

  def _on_done(self, task: asyncio.Task[None]) -> None:
    self._tasks.discard(task)
    if task.cancelled():
      logger.info("Job task %s cancelled", task.get_name())
      return
    exc = task.exception()
    if exc is not None:
      logger.error("Job task %s failed: %s", task.get_name(), exc, exc_info=exc)

  async def wait_idle(self) -> None:
    """Wait until every spawned task has finished."""
    while self._tasks:
      await asyncio.gather(*list(self._tasks), return_exceptions=True)

  async def shutdown(self, grace_seconds: float) -> None:
    """Give running jobs a grace period, then cancel whatever is left."""
    if not self._tasks:
      return

    _, pending = await asyncio.wait(list(self._tasks), timeout=grace_seconds)
    if not pending:
      return

    logger.warning("Cancelling %d unfinished job task(s) at shutdown", len(pending))
    for task in pending:
      task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)
