"""Prompt profiles for quiz generation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

_OPTION_LETTERS = "ABCDEFGH"


class ProfileName(str, Enum):
  """Named generation profiles."""

  FULL = "full"
  FAST = "fast"


@dataclass(frozen=True)
class PromptProfile:
  """Question shape and sampling parameters for one generation request."""

  name: ProfileName
  question_count: int
  option_count: int
  explanation_style: str
  temperature: float
  top_k: int
  top_p: float
  max_output_tokens: int
  concise: bool = False

  def build_prompt(self) -> str:
    """Render the instruction text sent alongside the document."""
    letters = ", ".join(_OPTION_LETTERS[: self.option_count])
    number = _NUMBER_WORDS.get(self.option_count, str(self.option_count))
    example_options = ", ".join(f'"option {letter}"' for letter in _OPTION_LETTERS[: self.option_count])
    lines = [
      f"You are a professional MCQ generator. Generate {self.question_count} multiple choice questions based on the following document.",
      "For each question, provide:",
      "1. A clear and concise question",
      f"2. {number} distinct options ({letters})",
      "3. The correct answer",
      f"4. A {self.explanation_style} explanation of why the answer is correct",
      "",
      "IMPORTANT: Return ONLY a valid JSON array of objects with the following structure:",
      "[",
      "  {",
      '    "question": "question text",',
      f'    "options": [{example_options}],',
      '    "correctAnswer": "correct option text",',
      f'    "explanation": "{self.explanation_style} explanation"',
      "  }",
      "]",
      "",
    ]
    if self.concise:
      lines.append("Be extremely concise. Focus on the most important concepts in the document.")
    lines.append("Do not include any additional text, explanations, or markdown formatting. Only return the JSON array.")
    return "\n".join(lines)


_NUMBER_WORDS = {4: "Four", 5: "Five"}

FULL_PROFILE = PromptProfile(name=ProfileName.FULL, question_count=30, option_count=5, explanation_style="detailed", temperature=0.7, top_k=40, top_p=0.95, max_output_tokens=8192)

# Background jobs trade question count and verbosity for latency.
FAST_PROFILE = PromptProfile(name=ProfileName.FAST, question_count=15, option_count=4, explanation_style="brief", temperature=0.4, top_k=40, top_p=0.95, max_output_tokens=6000, concise=True)
