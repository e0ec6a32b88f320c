"""Minimal .env support so local runs can keep the QUIZGEN_* settings in a file."""

from __future__ import annotations

import os
import re
from pathlib import Path

_KEY_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def default_env_path() -> Path:
  """Return QUIZGEN_ENV_FILE when set, otherwise .env in the working directory."""
  explicit = os.getenv("QUIZGEN_ENV_FILE")
  if explicit:
    return Path(explicit)
  return Path.cwd() / ".env"


def _parse_value(raw: str) -> str:
  value = raw.strip()
  if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
    return value[1:-1]
  # A `#` only starts a comment on unquoted values and only after whitespace.
  match = re.search(r"\s#", value)
  return value[: match.start()].rstrip() if match else value


def load_env_file(path: Path, *, override: bool = False) -> dict[str, str]:
  """Apply KEY=VALUE lines from ``path`` and return the pairs actually set.

  Missing files are fine. Blank lines, comments, ``export`` prefixes and lines
  that are not assignments to a valid name are skipped.
  """
  applied: dict[str, str] = {}
  if not path.is_file():
    return applied

  for raw_line in path.read_text(encoding="utf-8").splitlines():
    line = raw_line.strip()
    if not line or line.startswith("#"):
      continue
    line = line.removeprefix("export ").lstrip()

    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not _KEY_RE.fullmatch(key):
      continue
    if not override and key in os.environ:
      continue

    os.environ[key] = applied[key] = _parse_value(value)
  return applied
