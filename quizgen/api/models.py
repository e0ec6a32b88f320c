from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class QuestionPayload(BaseModel):
  """Wire shape of a generated question."""

  model_config = ConfigDict(populate_by_name=True)

  question: str
  options: list[str]
  correct_answer: str = Field(alias="correctAnswer")
  explanation: str


class SubmissionResponse(BaseModel):
  """Reply to an asynchronous submission (202 accepted, 409 busy)."""

  status: Literal["processing", "busy"]
  message: str


class SyncGenerationResponse(BaseModel):
  """Reply to a synchronous generation request."""

  success: bool = True
  count: int


class JobStatusResponse(BaseModel):
  """Current state of the job slot."""

  status: Literal["idle", "processing", "completed", "failed"]
  mcqs: list[QuestionPayload] = Field(default_factory=list)
  error: str | None = None
  start_time: int | None = Field(default=None, alias="startTime", description="Epoch milliseconds when processing began.")
  progress: str | None = None


class ErrorResponse(BaseModel):
  error: str
  request_id: str | None = Field(default=None, alias="requestId")
