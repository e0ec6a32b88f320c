"""Quiz generation providers."""

from __future__ import annotations

from quizgen.ai.providers.base import QuizGenerator
from quizgen.ai.providers.canned import CannedQuizGenerator
from quizgen.ai.providers.gemini import GeminiQuizGenerator
from quizgen.config import Settings


def build_quiz_generator(settings: Settings) -> QuizGenerator:
  """Return the configured generator; the canned one wins when a response file is set."""
  if settings.dummy_response_path is not None:
    return CannedQuizGenerator(settings.dummy_response_path)
  return GeminiQuizGenerator(settings.gemini_model, timeout_seconds=settings.generation_timeout_seconds)


__all__ = ["CannedQuizGenerator", "GeminiQuizGenerator", "QuizGenerator", "build_quiz_generator"]
