from fastapi import Request

from quizgen.services.quiz import QuizService


def get_quiz_service(request: Request) -> QuizService:
  """Return the process-wide quiz service built during startup."""
  service = getattr(request.app.state, "quiz_service", None)
  if service is None:
    raise RuntimeError("Quiz service is not initialized; the application lifespan did not run.")
  return service
