"""Base interface for quiz generation providers."""

from __future__ import annotations

from typing import Protocol

from quizgen.ai.prompts import PromptProfile


class QuizGenerator(Protocol):
  """Single-shot document-to-text generation contract.

  Implementations raise ``UpstreamError`` for every provider-side failure and
  never retry internally.
  """

  async def generate(self, document: bytes, credential: str, profile: PromptProfile) -> str:
    """Return the raw model output for the document under the given profile."""
    ...
