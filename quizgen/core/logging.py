"""Process-wide logging configuration for the quiz service."""

import logging
import logging.handlers
import sys
import traceback
from datetime import datetime
from pathlib import Path
from types import TracebackType

from quizgen.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")
# Third-party clients that log every request at INFO/DEBUG.
_CHATTY_LOGGERS = ("google_genai", "httpx", "httpcore")
_TRACEBACK_TAIL = 5

_active_log_file: Path | None = None


class TailTracebackFormatter(logging.Formatter):
  """Console formatter that keeps the traceback header and the innermost frames only."""

  def formatException(self, ei: tuple[type[BaseException] | None, BaseException | None, TracebackType | None]) -> str:  # noqa: N802
    lines = traceback.format_exception(*ei)
    omitted = len(lines) - _TRACEBACK_TAIL - 1
    if omitted <= 0:
      return "".join(lines)
    return "".join([lines[0], f"    ... {omitted} lines omitted ...\n", *lines[-_TRACEBACK_TAIL:]])


def _new_log_file(log_dir: Path) -> Path:
  try:
    log_dir.mkdir(parents=True, exist_ok=True)
  except OSError as exc:
    raise RuntimeError(f"Cannot create log directory {log_dir}: {exc}") from exc
  return log_dir / f"quizgen_{datetime.now():%Y%m%d_%H%M%S}.log"


def configure_logging(settings: Settings) -> Path:
  """Send root and server loggers to stdout and a rotating file; return the file path."""
  log_file = _new_log_file(settings.log_dir)

  console = logging.StreamHandler(sys.stdout)
  console.setFormatter(TailTracebackFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
  rotating = logging.handlers.RotatingFileHandler(log_file, maxBytes=settings.log_max_bytes, backupCount=settings.log_backup_count, encoding="utf-8")
  rotating.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
  handlers: list[logging.Handler] = [console, rotating]

  logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO, handlers=handlers, force=True)
  for name in _SERVER_LOGGERS:
    server_logger = logging.getLogger(name)
    server_logger.handlers = list(handlers)
    server_logger.propagate = False
  for name in _CHATTY_LOGGERS:
    logging.getLogger(name).setLevel(logging.WARNING)
  return log_file


def initialize_logging(settings: Settings) -> Path:
  """Configure logging on the first call; later calls return the existing log file."""
  global _active_log_file
  if _active_log_file is None:
    _active_log_file = configure_logging(settings)
    logging.getLogger(__name__).info("Logging to %s", _active_log_file)
  return _active_log_file
