from __future__ import annotations

import logging
import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from medlearner_core import (
    AssessmentConfig,
    AssessmentError,
    AssessmentPipeline,
    PatientIntakeRecord,
    bootstrap_local_env,
    missing_required_fields,
)

bootstrap_local_env()

logging.basicConfig(
    level=os.getenv("MEDLEARNER_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

_INCOMPLETE_DATA_ERROR = "Incomplete data"
_INCOMPLETE_DATA_DETAILS = "Basic information (name, age, sex, weight, height, symptoms) is required"
_SERVER_ERROR = "A critical error occurred on the server"
_UNKNOWN_CAUSE = "The cause could not be determined"


class MedLearnerApp:
    def __init__(self) -> None:
        # Missing provider credentials abort startup here.
        self.config = AssessmentConfig.from_env()
        self.pipeline = AssessmentPipeline.from_config(self.config)


def _error_body(error: str, details: str) -> dict[str, str]:
    return {"error": error, "details": details}


container = MedLearnerApp()
app = FastAPI(title="MedLearner Backend")

allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3001").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in allowed_origins],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(part) for part in err.get("loc", ())[1:]) for err in exc.errors()} - {""})
    details = f"Invalid fields: {', '.join(fields)}" if fields else _INCOMPLETE_DATA_DETAILS
    return JSONResponse(status_code=400, content=_error_body(_INCOMPLETE_DATA_ERROR, details))


@app.get("/health")
def health():
    return {"status": "ok", "service": "MedLearner Backend"}


@app.post("/api/assess")
async def assess(payload: PatientIntakeRecord):
    logger.info("Received a new assessment request")
    missing = missing_required_fields(payload)
    if missing:
        logger.info(f"Assessment request rejected, missing fields: {', '.join(missing)}")
        return JSONResponse(status_code=400, content=_error_body(_INCOMPLETE_DATA_ERROR, _INCOMPLETE_DATA_DETAILS))
    try:
        envelope = await container.pipeline.assess(payload)
    except AssessmentError as exc:
        logger.error(f"Assessment failed after {exc.attempts} attempts: {exc}")
        return JSONResponse(status_code=500, content=_error_body(_SERVER_ERROR, str(exc)))
    except Exception:
        logger.exception("Unexpected error in /api/assess")
        return JSONResponse(status_code=500, content=_error_body(_SERVER_ERROR, _UNKNOWN_CAUSE))
    logger.info(f"Assessment completed via {envelope.provider} in {envelope.attempts} attempt(s)")
    return envelope.as_envelope()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3001")),
    )
