"""Turn raw generation output into validated question records."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from quizgen.errors import MalformedOutputError
from quizgen.quiz.models import QuestionRecord

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?(?P<body>.*?)\n?```$", re.DOTALL)

MIN_OPTIONS = 4
MAX_OPTIONS = 5


def strip_json_fences(raw: str) -> str:
  """Remove a surrounding markdown code fence, if present."""
  text = raw.strip()
  match = _FENCE_RE.match(text)
  if match is None:
    return text
  return match.group("body").strip()


def parse_questions(raw_text: str, *, strict: bool = False) -> list[QuestionRecord]:
  """Parse generated text into question records.

  The payload must be a non-empty JSON array whose elements carry string
  ``question``, ``correctAnswer`` and ``explanation`` fields plus a list of
  string ``options``. With ``strict`` enabled every record must also offer
  4-5 unique options that include its correct answer.
  """
  cleaned = strip_json_fences(raw_text)

  try:
    payload = json.loads(cleaned)
  except json.JSONDecodeError as exc:
    logger.warning("Generated output is not valid JSON: %s", exc)
    raise MalformedOutputError("Failed to parse AI response into valid MCQs") from exc

  if not isinstance(payload, list):
    raise MalformedOutputError(f"Generated MCQs are not in the correct format: expected a JSON array, got {type(payload).__name__}")

  if not payload:
    raise MalformedOutputError("Generated MCQs are not in the correct format: no questions were returned")

  records = [_validate_item(index, item) for index, item in enumerate(payload)]

  if strict:
    for index, record in enumerate(records):
      _check_options(index, record)

  return records


def _validate_item(index: int, item: Any) -> QuestionRecord:
  if not isinstance(item, dict):
    raise MalformedOutputError(f"Generated MCQs are not in the correct format: question {index + 1} is not an object")

  try:
    return QuestionRecord.model_validate(item)
  except ValidationError as exc:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "record"
    # Only the field path and reason are surfaced; the generated text itself stays out of the message.
    raise MalformedOutputError(f"Generated MCQs are not in the correct format: question {index + 1} field '{field}' {first['msg'].lower()}") from exc


def _check_options(index: int, record: QuestionRecord) -> None:
  position = index + 1
  count = len(record.options)
  if count < MIN_OPTIONS or count > MAX_OPTIONS:
    raise MalformedOutputError(f"Question {position} has {count} options; expected {MIN_OPTIONS} or {MAX_OPTIONS}")

  if len(set(record.options)) != count:
    raise MalformedOutputError(f"Question {position} repeats an option")

  if record.correct_answer not in record.options:
    raise MalformedOutputError(f"Question {position} has a correct answer that is not one of its options")
