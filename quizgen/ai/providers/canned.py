"""Canned-response generator for local runs without spending credits."""

from __future__ import annotations

import logging
from pathlib import Path

from quizgen.ai.prompts import PromptProfile
from quizgen.errors import UpstreamError

logger = logging.getLogger("quizgen.ai.providers.canned")


class CannedQuizGenerator:
  """Return the contents of a fixed file instead of calling a provider."""

  def __init__(self, path: Path) -> None:
    self.path = path

  async def generate(self, document: bytes, credential: str, profile: PromptProfile) -> str:
    try:
      text = self.path.read_text(encoding="utf-8")
    except OSError as exc:
      raise UpstreamError(f"Canned response unavailable at {self.path}: {exc}") from exc

    if not text.strip():
      raise UpstreamError("Canned response file is empty")

    logger.info("Serving canned response from %s for profile=%s", self.path, profile.name.value)
    return text
