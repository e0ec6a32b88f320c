"""Quiz-taking state for a generated question set."""

from __future__ import annotations

import random
from collections.abc import Sequence
from dataclasses import dataclass

from quizgen.quiz.models import QuestionRecord


@dataclass(frozen=True)
class AnswerFeedback:
  """Outcome of answering the current question."""

  selected: str
  correct: bool
  correct_answer: str
  explanation: str


class QuizSession:
  """Walk through questions one at a time, revealing the explanation after each answer."""

  def __init__(self, records: Sequence[QuestionRecord], *, shuffle: bool = False, rng: random.Random | None = None) -> None:
    questions = list(records)
    if shuffle:
      (rng or random.Random()).shuffle(questions)
    self._questions = questions
    self._position = 0
    self._answers: list[AnswerFeedback] = []

  @property
  def total(self) -> int:
    return len(self._questions)

  @property
  def position(self) -> int:
    """Zero-based index of the question being shown."""
    return self._position

  @property
  def finished(self) -> bool:
    return self._position >= len(self._questions)

  @property
  def current(self) -> QuestionRecord:
    if self.finished:
      raise IndexError("Quiz completed; there is no current question.")
    return self._questions[self._position]

  @property
  def answered_current(self) -> bool:
    return len(self._answers) > self._position

  @property
  def score(self) -> int:
    return sum(1 for answer in self._answers if answer.correct)

  @property
  def answers(self) -> tuple[AnswerFeedback, ...]:
    return tuple(self._answers)

  def answer(self, option: str) -> AnswerFeedback:
    """Record an answer for the current question and return the feedback."""
    question = self.current
    if self.answered_current:
      raise ValueError("The current question has already been answered.")
    if option not in question.options:
      raise ValueError(f"'{option}' is not one of the options for this question.")

    feedback = AnswerFeedback(selected=option, correct=option == question.correct_answer, correct_answer=question.correct_answer, explanation=question.explanation)
    self._answers.append(feedback)
    return feedback

  def advance(self) -> None:
    """Move to the next question once the current one is answered."""
    if self.finished:
      raise IndexError("Quiz completed; there is no next question.")
    if not self.answered_current:
      raise ValueError("Answer the current question before moving on.")
    self._position += 1
