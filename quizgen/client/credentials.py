"""Local storage for the user's generation-service API key."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

_KEY_FIELD = "apiKey"


def default_credentials_path() -> Path:
  """Resolve the credentials file, honoring XDG_CONFIG_HOME when set."""
  base = os.getenv("XDG_CONFIG_HOME")
  root = Path(base) if base else Path.home() / ".config"
  return root / "quizgen" / "credentials.json"


class CredentialStore:
  """Persist one API key in a user-only JSON file."""

  def __init__(self, path: Path | None = None) -> None:
    self.path = path or default_credentials_path()

  def load(self) -> str | None:
    if not self.path.exists():
      return None

    try:
      data = json.loads(self.path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
      logger.warning("Ignoring unreadable credentials file at %s", self.path)
      return None

    key = data.get(_KEY_FIELD) if isinstance(data, dict) else None
    if not isinstance(key, str) or not key.strip():
      return None
    return key.strip()

  def save(self, key: str) -> None:
    cleaned = key.strip()
    if not cleaned:
      raise ValueError("Refusing to save a blank API key.")

    self.path.parent.mkdir(parents=True, exist_ok=True)
    # Created owner-only so the key is never readable by others, not even briefly.
    fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
      # An existing file keeps its old mode under O_CREAT; tighten it before writing.
      os.fchmod(handle.fileno(), 0o600)
      json.dump({_KEY_FIELD: cleaned}, handle)
    logger.info("Saved API key to %s", self.path)

  def clear(self) -> bool:
    """Delete the stored key; return whether anything was removed."""
    if not self.path.exists():
      return False
    self.path.unlink()
    logger.info("Removed API key at %s", self.path)
    return True
