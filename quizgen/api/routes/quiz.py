import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from quizgen.api.deps import get_quiz_service
from quizgen.api.models import ErrorResponse, JobStatusResponse, QuestionPayload, SubmissionResponse, SyncGenerationResponse
from quizgen.config import Settings, get_settings
from quizgen.services.quiz import QuizService, validate_submission

router = APIRouter()
logger = logging.getLogger("quizgen.api.routes.quiz")

NO_RESULT_MESSAGE = "No MCQs found"


def _flag_enabled(raw: str | None) -> bool:
  return raw is not None and raw.strip().lower() in {"1", "true", "yes", "on"}


async def _read_upload(upload: UploadFile | None, max_bytes: int) -> bytes | None:
  """Read at most one byte past the limit so oversized files are rejected without buffering them whole."""
  if upload is None:
    return None
  return await upload.read(max_bytes + 1)


@router.post(
  "/process-pdf",
  responses={
    200: {"model": SyncGenerationResponse, "description": "Synchronous generation finished."},
    202: {"model": SubmissionResponse, "description": "Background job accepted."},
    400: {"model": ErrorResponse},
    409: {"model": SubmissionResponse, "description": "A job is already processing; try again later."},
    500: {"model": ErrorResponse},
  },
)
async def process_pdf(
  settings: Annotated[Settings, Depends(get_settings)],
  service: Annotated[QuizService, Depends(get_quiz_service)],
  pdf: Annotated[UploadFile | None, File()] = None,
  api_key: Annotated[str | None, Form(alias="apiKey")] = None,
  with_polling: Annotated[str | None, Form(alias="withPolling")] = None,
) -> JSONResponse:
  """Generate a quiz from an uploaded PDF, inline or as a background job."""
  raw_document = await _read_upload(pdf, settings.max_upload_bytes)
  document, credential = validate_submission(raw_document, api_key, max_bytes=settings.max_upload_bytes)

  if _flag_enabled(with_polling):
    # Nothing may be awaited between here and the slot claim inside submit().
    outcome = service.submit(document, credential)
    if not outcome.accepted:
      body = SubmissionResponse(status="busy", message=outcome.reason)
      return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump())
    body = SubmissionResponse(status="processing", message=outcome.reason)
    return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=body.model_dump())

  logger.info("Synchronous generation requested document_bytes=%d", len(document))
  records = await service.generate_now(document, credential)
  return JSONResponse(status_code=status.HTTP_200_OK, content=SyncGenerationResponse(count=len(records)).model_dump())


@router.get("/process-pdf", responses={200: {"model": JobStatusResponse}})
async def processing_status(service: Annotated[QuizService, Depends(get_quiz_service)]) -> JSONResponse:
  """Return the current job slot snapshot."""
  return JSONResponse(content=service.status().to_wire())


@router.get("/get-mcqs", responses={200: {"model": list[QuestionPayload]}, 404: {"model": ErrorResponse}})
async def get_mcqs(service: Annotated[QuizService, Depends(get_quiz_service)]) -> JSONResponse:
  """Return the most recent successfully generated question set."""
  result = service.latest_result()
  if result is None:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": NO_RESULT_MESSAGE})
  return JSONResponse(content=[record.to_wire() for record in result])
