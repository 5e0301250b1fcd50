import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from errors import DistrictRAGError, ValidationError
from pipelines import AnswerSynthesizer

logger = logging.getLogger(__name__)

SERVICE_NAME = "DistrictRAG"


class AskRequest(BaseModel):
    question: Optional[str] = None
    language: Optional[str] = "en"


class AskResponse(BaseModel):
    question: str
    answer: str
    translated: str


def error_payload(message: str, error: Exception) -> dict:
    """Structured server-error body with diagnostic detail."""
    payload = {
        "error": message,
        "details": str(error),
        "type": type(error).__name__,
    }
    if isinstance(error, DistrictRAGError) and error.details:
        payload["context"] = error.details
    return payload


def create_app(synthesizer: AnswerSynthesizer) -> FastAPI:
    """Build the HTTP API around an answer synthesizer."""
    app = FastAPI(title=f"{SERVICE_NAME} API")

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'][1:]) or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        return JSONResponse(status_code=400, content={"error": f"Invalid request: {problems}"})

    async def ask(request: Optional[AskRequest] = None):
        if request is None or not request.question or not request.question.strip():
            return JSONResponse(status_code=400, content={"error": "Question is required."})
        try:
            result = await synthesizer.answer(request.question, request.language or "en")
        except ValidationError as e:
            return JSONResponse(status_code=400, content={"error": e.message})
        except Exception as e:
            logger.exception(f"Error in /ask: {e}")
            return JSONResponse(
                status_code=500,
                content=error_payload("Failed to process question.", e),
            )
        return AskResponse(**result.model_dump())

    app.add_api_route("/ask", ask, methods=["POST"], response_model=AskResponse)
    app.add_api_route("/api/ask", ask, methods=["POST"], response_model=AskResponse)

    @app.get("/")
    async def root():
        return {"service": SERVICE_NAME, "endpoints": ["/ask", "/health"]}

    @app.get("/health")
    async def health():
        try:
            chunks = await synthesizer.store.count()
        except DistrictRAGError as e:
            return JSONResponse(
                status_code=503, content={"status": "unavailable", "error": e.message}
            )
        return {"status": "ok", "chunks": chunks}

    return app
