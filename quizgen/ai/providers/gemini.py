"""Gemini quiz generator using the google-genai SDK."""

from __future__ import annotations

import asyncio
import logging
import warnings
from typing import Any, Final

from pydantic.warnings import ArbitraryTypeWarning

with warnings.catch_warnings():
  warnings.filterwarnings("ignore", message=r"<built-in function any> is not a Python type.*", category=ArbitraryTypeWarning)
  from google import genai
  from google.genai import types

from quizgen.ai.prompts import PromptProfile
from quizgen.errors import UpstreamError

logger = logging.getLogger("quizgen.ai.providers.gemini")

PDF_MIME_TYPE: Final[str] = "application/pdf"


class GeminiQuizGenerator:
  """Send a PDF plus a profile prompt to Gemini and return the raw text reply."""

  def __init__(self, model: str, *, timeout_seconds: float) -> None:
    self.model = model
    self.timeout_seconds = timeout_seconds

  def _build_client(self, credential: str) -> genai.Client:
    # Clients are per call because every request carries its own user-supplied key.
    return genai.Client(api_key=credential)

  def _build_request(self, document: bytes, profile: PromptProfile) -> tuple[list[types.Content], types.GenerateContentConfig]:
    contents = [types.Content(role="user", parts=[types.Part.from_text(text=profile.build_prompt()), types.Part.from_bytes(data=document, mime_type=PDF_MIME_TYPE)])]
    config = types.GenerateContentConfig(temperature=profile.temperature, top_k=profile.top_k, top_p=profile.top_p, max_output_tokens=profile.max_output_tokens)
    return contents, config

  async def generate(self, document: bytes, credential: str, profile: PromptProfile) -> str:
    """Generate quiz text for the document; raise UpstreamError on any provider failure."""
    contents, config = self._build_request(document, profile)
    logger.info("Gemini request model=%s profile=%s document_bytes=%d", self.model, profile.name.value, len(document))

    try:
      client = self._build_client(credential)
    except Exception as exc:
      raise UpstreamError(f"Gemini client setup failed: {exc}") from exc

    try:
      # Use the async client to avoid blocking the asyncio event loop.
      response = await asyncio.wait_for(client.aio.models.generate_content(model=self.model, contents=contents, config=config), timeout=self.timeout_seconds)
    except TimeoutError as exc:
      raise UpstreamError(f"Gemini did not respond within {self.timeout_seconds:g} seconds") from exc
    except Exception as exc:
      raise UpstreamError(f"Gemini generation failed: {exc}") from exc
    finally:
      # One client per call, so its connection pool goes with it.
      await client.aio.aclose()

    block_reason = _block_reason(response)
    if block_reason:
      raise UpstreamError(f"Gemini blocked the request: {block_reason}")

    text = response.text
    if not text or not text.strip():
      raise UpstreamError("Gemini returned an empty response")

    if response.usage_metadata:
      logger.info("Gemini usage prompt_tokens=%s completion_tokens=%s total_tokens=%s", response.usage_metadata.prompt_token_count, response.usage_metadata.candidates_token_count, response.usage_metadata.total_token_count)
    logger.debug("Gemini response:\n%s", text)
    return text


def _block_reason(response: Any) -> str | None:
  feedback = getattr(response, "prompt_feedback", None)
  reason = getattr(feedback, "block_reason", None) if feedback is not None else None
  if not reason:
    return None
  return str(getattr(reason, "value", reason))
