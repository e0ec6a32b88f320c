from __future__ import annotations

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException

from quizgen import __version__
from quizgen.api.routes import quiz
from quizgen.config import get_settings
from quizgen.core.exceptions import global_exception_handler, http_exception_handler, quizgen_exception_handler, request_validation_exception_handler
from quizgen.core.lifespan import lifespan
from quizgen.core.middleware import RequestLoggingMiddleware
from quizgen.errors import QuizGenError

settings = get_settings()

app = FastAPI(title="quizgen", version=__version__, lifespan=lifespan)

app.add_middleware(CORSMiddleware, allow_origins=list(settings.allowed_origins), allow_credentials=True, allow_methods=["GET", "POST", "OPTIONS"], allow_headers=["content-type", "x-request-id"], expose_headers=["x-request-id"])
app.add_middleware(RequestLoggingMiddleware)

app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(QuizGenError, quizgen_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)


@app.get("/health", include_in_schema=False)
async def health_check() -> dict[str, str]:
  """Return a simple health status."""
  return {"status": "ok", "version": __version__}


app.include_router(quiz.router, prefix="/api", tags=["quiz"])


def serve() -> None:
  """Run the API under uvicorn on the configured host and port."""
  current = get_settings()
  uvicorn.run("quizgen.main:app", host=current.host, port=current.port, reload=current.debug)


if __name__ == "__main__":
  serve()
