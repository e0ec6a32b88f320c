"""Unit tests for the quizgen-server console entry point."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest

import quizgen.main
from quizgen.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
  get_settings.cache_clear()
  yield
  get_settings.cache_clear()


def test_serve_runs_the_app_on_the_configured_address(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("QUIZGEN_HOST", "0.0.0.0")
  monkeypatch.setenv("QUIZGEN_PORT", "9001")
  monkeypatch.delenv("QUIZGEN_DEBUG", raising=False)
  run = MagicMock()
  monkeypatch.setattr(quizgen.main.uvicorn, "run", run)

  quizgen.main.serve()

  run.assert_called_once_with("quizgen.main:app", host="0.0.0.0", port=9001, reload=False)


def test_invalid_port_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("QUIZGEN_PORT", "0")
  monkeypatch.setattr(quizgen.main.uvicorn, "run", MagicMock())
  with pytest.raises(ValueError, match="QUIZGEN_PORT"):
    quizgen.main.serve()
