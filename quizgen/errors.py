"""Error taxonomy shared by the service and the polling client."""

from __future__ import annotations


class QuizGenError(Exception):
  """Base class for quiz generation failures with a user-readable message."""

  status_code = 500

  def __init__(self, message: str) -> None:
    super().__init__(message)
    self.message = message


class InvalidInputError(QuizGenError):
  """Raised when the document or the credential is missing or unusable."""

  status_code = 400


class BusyError(QuizGenError):
  """Raised when a job is already running and the submission was not accepted."""

  status_code = 409


class UpstreamError(QuizGenError):
  """Raised when the generation service call fails, times out, or returns nothing."""


class MalformedOutputError(QuizGenError):
  """Raised when generated text cannot be turned into question records."""


class TransportError(QuizGenError):
  """Raised client-side when a request to the quiz service itself fails."""


class PollTimeoutError(QuizGenError):
  """Raised client-side when a job outlives the polling ceiling."""
