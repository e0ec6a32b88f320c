import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from quizgen.ai.providers import build_quiz_generator
from quizgen.config import Settings
from quizgen.core.logging import initialize_logging
from quizgen.jobs.registry import JobRegistry
from quizgen.jobs.runner import JobSupervisor
from quizgen.services.quiz import QuizService


def build_quiz_service(settings: Settings, *, registry: JobRegistry | None = None, supervisor: JobSupervisor | None = None) -> QuizService:
  """Wire the service graph; the registry and supervisor live as long as the process."""
  return QuizService(registry or JobRegistry(), build_quiz_generator(settings), supervisor or JobSupervisor(), strict=settings.strict_answer_check)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Set up logging and the single job slot, then drain background jobs on shutdown."""
  from quizgen.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("quizgen.core.lifespan")

  try:
    initialize_logging(settings)
  except RuntimeError:
    # The service still works with default stderr logging if the log directory is unusable.
    logger.warning("Logging setup failed; continuing with default handlers.", exc_info=True)

  supervisor = JobSupervisor()
  app.state.job_supervisor = supervisor
  app.state.quiz_service = build_quiz_service(settings, supervisor=supervisor)
  logger.info("Startup complete env=%s model=%s strict_answer_check=%s", settings.environment, settings.gemini_model, settings.strict_answer_check)

  yield

  await supervisor.shutdown(settings.shutdown_grace_seconds)
  logger.info("Shutdown complete.")
