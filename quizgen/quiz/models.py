"""Question record schema shared by the parser, the API and the client."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class QuestionRecord(BaseModel):
  """One generated multiple-choice question."""

  model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

  question: StrictStr
  options: tuple[StrictStr, ...]
  correct_answer: StrictStr = Field(alias="correctAnswer")
  explanation: StrictStr

  def to_wire(self) -> dict[str, object]:
    """Serialize with the camelCase keys clients expect."""
    return {"question": self.question, "options": list(self.options), "correctAnswer": self.correct_answer, "explanation": self.explanation}
