"""Сервисы для работы с внешними API: перевод, OCR, анализ тональности."""
import asyncio
import json
import logging
import re
import time
from typing import Any, Optional

import httpx
from minio.error import S3Error

from .config import config
from .errors import ConfigurationError, OperationTimeout, ProviderError
from .models import SentimentResult
from .storage import StorageService, storage_service

logger = logging.getLogger(__name__)

SENTIMENT_LABELS = {
    "positive": "Positive",
    "negative": "Negative",
    "neutral": "Neutral",
}

GCS_URI = re.compile(r"gs://([a-z0-9._-]+)/(.*)", re.IGNORECASE)


def preview(text: str, limit: int = 100) -> str:
    """Обрезка текста для логов."""
    return text[:limit] + "..." if len(text) > limit else text


class ProviderClient:
    """Базовый HTTP-клиент внешнего провайдера."""

    name = "provider"

    def __init__(self, timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    async def _request(
        self,
        method: str,
        url: str,
        error_message: str,
        check: bool = True,
        timeout: Optional[float] = None,
        **kwargs: Any
    ) -> httpx.Response:
        """Выполнить запрос; при check=True ответ не-2xx превращается в ProviderError."""
        try:
            async with httpx.AsyncClient(
                timeout=timeout or self.timeout,
                transport=self.transport
            ) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"{self.name}: timeout: {e}")
            raise ProviderError(self.name, error_message, details=str(e), status_code=504)
        except httpx.HTTPError as e:
            logger.error(f"{self.name}: request failed: {e}")
            raise ProviderError(self.name, error_message, details=str(e), status_code=502)

        if check and not response.is_success:
            logger.error(f"{self.name} error: {response.status_code} {response.text}")
            raise ProviderError(
                self.name,
                error_message,
                details=response.text,
                status_code=response.status_code
            )
        return response


class TranslationService(ProviderClient):
    """Google Translate API v2."""

    name = "google_translate"

    def __init__(self, api_key: str = "", transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(config.TIMEOUT_TRANSLATE, transport)
        self.api_key = api_key or config.GOOGLE_TRANSLATE_API_KEY
        self.url = config.GOOGLE_TRANSLATE_URL

    async def translate(self, text: str, target: str, source: Optional[str] = None) -> str:
        """
        Перевести текст.

        Args:
            text: исходный текст
            target: код целевого языка
            source: код исходного языка; None или "auto" - автоопределение
        """
        payload = {"q": text, "target": target}
        if source and source != "auto":
            payload["source"] = source

        logger.info(f"Translate {source or 'auto'} -> {target}: '{preview(text)}'")

        response = await self._request(
            "POST",
            self.url,
            "Ошибка при переводе текста.",
            check=False,
            params={"key": self.api_key},
            json=payload
        )

        if not response.is_success:
            message = self._error_message(response)
            logger.error(f"Google Translate Error: {response.status_code} {response.text}")
            raise ProviderError(
                self.name,
                message,
                details=response.text,
                status_code=response.status_code
            )

        try:
            translated = response.json()["data"]["translations"][0]["translatedText"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected Google Translate response: {response.text}")
            raise ProviderError(self.name, "Ошибка при переводе текста.", details=response.text) from e
        logger.info(f"Translated ({target}): '{preview(translated)}'")
        return translated

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Сообщение об ошибке с деталями из ответа Google."""
        message = "Ошибка при переводе текста."
        try:
            error = response.json().get("error") or {}
        except ValueError:
            return message

        detail = error.get("message") if isinstance(error, dict) else None
        if detail:
            message += f" Детали: {detail}"
            if any(word in detail for word in ("API key", "invalid", "authentication")):
                message += ". Проверьте наличие и корректность GOOGLE_TRANSLATE_API_KEY."
                logger.error(f"Google Translate API Key Issue: {detail}")
        return message


class CloudmersiveService(ProviderClient):
    """Cloudmersive: OCR, конвертация DOCX и простой анализ тональности."""

    name = "cloudmersive"

    def __init__(self, api_key: str = "", transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(config.TIMEOUT_OCR, transport)
        self.api_key = api_key or config.CLOUDMERSIVE_API_KEY
        self.url = config.CLOUDMERSIVE_URL.rstrip("/")

    async def _upload(self, path: str, field: str, data: bytes, filename: str, content_type: str, error: str) -> dict:
        response = await self._request(
            "POST",
            f"{self.url}{path}",
            error,
            headers={"Apikey": self.api_key},
            files={field: (filename or "document", data, content_type or "application/octet-stream")}
        )
        return response.json()

    @staticmethod
    def _text_from(result: dict) -> str:
        """TextResult / TextContent или постраничный результат OcrPages."""
        if result.get("TextResult") is not None:
            return result["TextResult"]
        if result.get("TextContent") is not None:
            return result["TextContent"]
        pages = result.get("OcrPages") or []
        return "\n".join(page.get("TextResult") or "" for page in pages)

    async def image_to_text(self, data: bytes, filename: str = "", content_type: str = "") -> str:
        """OCR изображения."""
        result = await self._upload(
            "/ocr/image/toText", "imageFile", data, filename, content_type,
            "Ошибка распознавания изображения."
        )
        text = self._text_from(result)
        logger.info(f"Cloudmersive image OCR: {len(text)} chars")
        return text

    async def pdf_to_text(self, data: bytes, filename: str = "", content_type: str = "application/pdf") -> str:
        """OCR PDF-документа."""
        result = await self._upload(
            "/ocr/pdf/toText", "imageFile", data, filename, content_type,
            "Ошибка распознавания PDF."
        )
        text = self._text_from(result)
        logger.info(f"Cloudmersive PDF OCR: {len(text)} chars")
        return text

    async def docx_to_text(self, data: bytes, filename: str = "", content_type: str = "") -> str:
        """Конвертация DOCX в текст."""
        result = await self._upload(
            "/convert/docx/to/txt", "inputFile", data, filename, content_type,
            "Ошибка конвертации DOCX."
        )
        text = self._text_from(result)
        logger.info(f"Cloudmersive DOCX -> TXT: {len(text)} chars")
        return text

    async def sentiment(self, text: str) -> SentimentResult:
        """Анализ тональности (английский текст)."""
        response = await self._request(
            "POST",
            f"{self.url}/nlp-v2/analytics/sentiment",
            "Ошибка при анализе тональности текста.",
            timeout=config.TIMEOUT_SENTIMENT,
            headers={"Apikey": self.api_key},
            json={"TextToAnalyze": text}
        )
        data = response.json()
        logger.debug(f"Cloudmersive sentiment raw: {preview(json.dumps(data), 500)}")

        label = data.get("SentimentClassification", data.get("SentimentClassificationResult"))
        score = data.get("SentimentScore", data.get("SentimentScoreResult"))
        classification = SENTIMENT_LABELS.get(str(label or "").lower(), "Neutral")
        if not isinstance(score, (int, float)):
            score = 0.0
        # Cloudmersive отдаёт score в [-1, 1]
        return SentimentResult(
            SentimentClassification=classification,
            SentimentScore=min(1.0, abs(float(score)))
        )


class VisionService(ProviderClient):
    """Google Cloud Vision: OCR изображений и асинхронный batch OCR для PDF."""

    name = "google_vision"

    def __init__(
        self,
        api_key: str = "",
        storage: Optional[StorageService] = None,
        poll_attempts: Optional[int] = None,
        poll_interval: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__(config.TIMEOUT_OCR, transport)
        self.api_key = api_key or config.GOOGLE_VISION_API_KEY
        self.url = config.GOOGLE_VISION_URL.rstrip("/")
        self.storage = storage or storage_service
        self.poll_attempts = poll_attempts if poll_attempts is not None else config.OCR_POLL_ATTEMPTS
        self.poll_interval = poll_interval if poll_interval is not None else config.OCR_POLL_INTERVAL

    async def image_to_text(self, data: bytes, filename: str = "", content_type: str = "") -> str:
        """OCR изображения (DOCUMENT_TEXT_DETECTION)."""
        import base64

        response = await self._request(
            "POST",
            f"{self.url}/images:annotate",
            "Ошибка распознавания изображения.",
            params={"key": self.api_key},
            json={
                "requests": [{
                    "image": {"content": base64.b64encode(data).decode("utf-8")},
                    "features": [{"type": "DOCUMENT_TEXT_DETECTION"}]
                }]
            }
        )
        responses = response.json().get("responses") or [{}]
        first = responses[0]
        if "error" in first:
            raise ProviderError(
                self.name,
                "Ошибка распознавания изображения.",
                details=json.dumps(first["error"], ensure_ascii=False)
            )
        annotation = first.get("fullTextAnnotation")
        text = annotation.get("text", "") if annotation else ""
        logger.info(f"Vision image OCR: {len(text)} chars")
        return text

    async def pdf_to_text(self, data: bytes, filename: str = "", content_type: str = "application/pdf") -> str:
        """
        OCR PDF через files:asyncBatchAnnotate.

        PDF загружается во временный bucket, результаты читаются из него же.
        Входной файл и результаты удаляются при любом исходе.
        """
        bucket = config.ocr_bucket
        if not bucket:
            logger.error("GOOGLE_CLOUD_PROJECT_ID / STORAGE_BUCKET is not set for PDF OCR.")
            raise ConfigurationError("Не настроен GOOGLE_CLOUD_PROJECT_ID для OCR PDF.")

        output_prefix = f"results/{int(time.time() * 1000)}-output/"

        try:
            async with self.storage.temporary_object(bucket, data, filename, "application/pdf") as key:
                try:
                    operation = await self._submit_batch(
                        f"gs://{bucket}/{key}",
                        f"gs://{bucket}/{output_prefix}"
                    )
                    result = await self._wait_for(operation)
                    text = await self._read_results(result, bucket, output_prefix)
                finally:
                    try:
                        await asyncio.to_thread(self.storage.delete_prefix, bucket, output_prefix)
                    except Exception as e:
                        logger.error(f"Не удалось удалить результаты OCR {output_prefix}: {e}")
        except (S3Error, ValueError) as e:
            # Хранилище или битый JSON результатов: ошибка провайдера, PDF можно отдать запасному OCR
            logger.error(f"PDF OCR storage error: {e}")
            raise ProviderError(self.name, "Ошибка хранилища OCR PDF.", details=str(e))

        logger.info(f"Vision PDF OCR: {len(text)} chars")
        return text

    async def _submit_batch(self, source_uri: str, destination_uri: str) -> str:
        response = await self._request(
            "POST",
            f"{self.url}/files:asyncBatchAnnotate",
            "Ошибка запуска OCR PDF.",
            params={"key": self.api_key},
            json={
                "requests": [{
                    "inputConfig": {
                        "gcsSource": {"uri": source_uri},
                        "mimeType": "application/pdf"
                    },
                    "features": [{"type": "DOCUMENT_TEXT_DETECTION"}],
                    "outputConfig": {
                        "gcsDestination": {"uri": destination_uri},
                        "batchSize": config.OCR_BATCH_SIZE
                    }
                }]
            }
        )
        name = response.json()["name"]
        logger.info(f"PDF OCR operation started: {name}")
        return name

    async def _wait_for(self, operation: str) -> dict:
        """Опрос операции до завершения; OperationTimeout после poll_attempts попыток."""
        for attempt in range(1, self.poll_attempts + 1):
            response = await self._request(
                "GET",
                f"{self.url}/{operation}",
                "Ошибка получения статуса OCR PDF.",
                params={"key": self.api_key}
            )
            status = response.json()
            if status.get("done"):
                if "error" in status:
                    raise ProviderError(
                        self.name,
                        "Ошибка OCR PDF.",
                        details=json.dumps(status["error"], ensure_ascii=False)
                    )
                return status.get("response") or {}

            logger.debug(f"Operation {operation} not done (attempt {attempt}/{self.poll_attempts})")
            if attempt < self.poll_attempts:
                await asyncio.sleep(self.poll_interval)

        raise OperationTimeout(
            "Превышено время ожидания OCR PDF.",
            details=f"operation {operation} not done after {self.poll_attempts} attempts"
        )

    async def _read_results(self, result: dict, bucket: str, prefix: str) -> str:
        """Склеить fullTextAnnotation.text по всем JSON-файлам результата."""
        try:
            destination = result["responses"][0]["outputConfig"]["gcsDestination"]["uri"]
        except (KeyError, IndexError, TypeError):
            destination = f"gs://{bucket}/{prefix}"

        match = GCS_URI.match(destination)
        if not match:
            logger.error(f"Invalid GCS destination URI: {destination}")
            raise ProviderError(self.name, "Ошибка при получении URI результатов OCR.", details=destination)
        out_bucket, out_prefix = match.group(1), match.group(2)
        logger.info(f"OCR results saved to: {destination}")

        full_text = ""
        keys = await asyncio.to_thread(self.storage.list, out_bucket, out_prefix)
        for key in sorted(keys):
            payload = json.loads(await asyncio.to_thread(self.storage.get, out_bucket, key))
            for page in payload.get("responses", []):
                annotation = page.get("fullTextAnnotation")
                if annotation:
                    full_text += annotation.get("text", "")
        return full_text


class HuggingFaceService(ProviderClient):
    """Hugging Face Inference API: классификатор со списком {label, score}."""

    name = "hugging_face"

    def __init__(
        self,
        api_key: str = "",
        model: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        super().__init__(config.TIMEOUT_SENTIMENT, transport)
        self.api_key = api_key or config.HUGGING_FACE_API_KEY
        self.model = model or config.HUGGING_FACE_MODEL
        self.url = f"{config.HUGGING_FACE_URL.rstrip('/')}/{self.model}"

    async def sentiment(self, text: str) -> SentimentResult:
        """Анализ тональности (английский текст)."""
        logger.info(f"Hugging Face sentiment: '{preview(text)}'")
        response = await self._request(
            "POST",
            self.url,
            "Ошибка при анализе тональности текста.",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={"inputs": text}
        )
        try:
            data = response.json()
        except ValueError:
            logger.warning("Hugging Face response is not JSON.")
            return SentimentResult()

        logger.debug(f"Hugging Face raw: {preview(json.dumps(data), 500)}")
        return parse_label_scores(data)


def parse_label_scores(data: Any) -> SentimentResult:
    """
    Выбрать кандидата с максимальным score.

    Ожидается [[{label, score}, ...]]; плоский [{label, score}, ...] тоже принимается.
    Пустой или неожиданный ответ даёт Neutral / 0.
    """
    if not isinstance(data, list) or not data:
        logger.warning("Hugging Face response is empty or malformed.")
        return SentimentResult()

    candidates = data[0] if isinstance(data[0], list) else data

    top = None
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        score = candidate.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            continue
        if top is None or score > top["score"]:
            top = candidate

    if top is None:
        logger.warning("Could not determine top sentiment from response.")
        return SentimentResult()

    classification = SENTIMENT_LABELS.get(str(top.get("label", "")).lower(), "Neutral")
    return SentimentResult(
        SentimentClassification=classification,
        SentimentScore=float(top["score"])
    )
