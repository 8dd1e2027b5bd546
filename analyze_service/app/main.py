"""Analyze Service API.

Эндпоинты:
- GET  /health   — проверка и активные режимы
- POST /analyze  — multipart/form-data: inputType, sourceLanguage, targetLanguage, text, document

Тот же обработчик доступен по пути /.netlify/functions/analyze.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from .config import config
from .errors import AnalyzeError, BadRequest
from .models import AnalyzeRequest, AnalyzeResponse, Document, ErrorResponse, InputType
from .pipeline import AnalyzePipeline, build_pipeline

# Настройка логирования
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

_pipeline: Optional[AnalyzePipeline] = None


def get_pipeline() -> AnalyzePipeline:
    """Пайплайн с провайдерами из конфигурации (создаётся один раз)."""
    global _pipeline
    if _pipeline is None:
        _pipeline = build_pipeline()
    return _pipeline


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle: startup и shutdown."""
    logger.info("Analyze Service запущен")
    logger.info(f"OCR: {config.OCR_PROVIDER} (PDF fallback: {config.OCR_PDF_FALLBACK})")
    logger.info(f"Sentiment: {config.SENTIMENT_PROVIDER}")
    logger.info(f"Translation failure mode: {config.TRANSLATION_FAILURE_MODE}")
    logger.info(f"Google Translate API key: {'provided' if config.GOOGLE_TRANSLATE_API_KEY else 'not provided'}")
    yield
    logger.info("Analyze Service остановлен")


app = FastAPI(
    title="Analyze Service",
    description="Извлечение текста, перевод и анализ тональности документов",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AnalyzeError)
async def analyze_error_handler(request: Request, exc: AnalyzeError):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=exc.message, details=exc.details).model_dump(exclude_none=True)
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Serverless function error: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            message="Внутренняя ошибка сервера.",
            details=f"{type(exc).__name__}: {exc}"
        ).model_dump()
    )


@app.get("/health")
async def health():
    """Health check."""
    return {
        "status": "ok",
        "service": config.SERVICE_NAME,
        "ocr_provider": config.OCR_PROVIDER,
        "sentiment_provider": config.SENTIMENT_PROVIDER,
        "translation_failure_mode": config.TRANSLATION_FAILURE_MODE
    }


async def parse_analyze_request(request: Request) -> AnalyzeRequest:
    """Разбор multipart/form-data в AnalyzeRequest."""
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" not in content_type:
        logger.error("Invalid Content-Type. Expected multipart/form-data.")
        raise BadRequest("Invalid Content-Type. Expected multipart/form-data.")

    try:
        form = await request.form()
    except StarletteHTTPException as e:
        logger.error(f"Invalid multipart/form-data body: {e.detail}")
        raise BadRequest("Invalid multipart/form-data body.", details=str(e.detail))
    except MultiPartException as e:
        logger.error(f"Invalid multipart/form-data body: {e.message}")
        raise BadRequest("Invalid multipart/form-data body.", details=e.message)

    try:
        input_type = InputType(form.get("inputType") or "")
    except ValueError:
        input_type = None

    text = form.get("text")
    document = None
    upload = form.get("document")
    if isinstance(upload, UploadFile):
        document = Document(
            filename=upload.filename or "",
            content_type=upload.content_type or "",
            content=await upload.read()
        )
        logger.info(f"File [document]: filename={document.filename}, mimetype={document.content_type}")

    return AnalyzeRequest(
        input_type=input_type,
        source_language=form.get("sourceLanguage") or config.DEFAULT_SOURCE_LANGUAGE,
        target_language=form.get("targetLanguage") or config.DEFAULT_TARGET_LANGUAGE,
        text=text if isinstance(text, str) else None,
        document=document
    )


@app.post("/analyze", response_model=AnalyzeResponse)
@app.post("/.netlify/functions/analyze", response_model=AnalyzeResponse, include_in_schema=False)
async def analyze(
    request: Request,
    pipeline: AnalyzePipeline = Depends(get_pipeline)
):
    """
    Анализ документа.

    - Извлекает текст (text / OCR изображения и PDF / DOCX / text/plain)
    - Переводит на английский, определяет тональность и эмоции
    - Переводит результат на targetLanguage
    """
    analyze_request = await parse_analyze_request(request)
    return await pipeline.run(analyze_request)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "analyze_service.app.main:app",
        host=config.HOST,
        port=config.PORT,
        reload=False,
        log_level=config.LOG_LEVEL.lower()
    )
