"""Получение текста из запроса: поле text, OCR или конвертация документа."""
import logging
from typing import Optional, Protocol

from .errors import BadRequest, OperationTimeout, ProviderError
from .models import AnalyzeRequest, Document, InputType

logger = logging.getLogger(__name__)

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class OcrProvider(Protocol):
    name: str

    async def image_to_text(self, data: bytes, filename: str = "", content_type: str = "") -> str: ...

    async def pdf_to_text(self, data: bytes, filename: str = "", content_type: str = "") -> str: ...


class DocumentConverter(Protocol):
    async def docx_to_text(self, data: bytes, filename: str = "", content_type: str = "") -> str: ...


def is_docx(document: Document) -> bool:
    return (
        document.content_type == DOCX_MIME_TYPE
        or document.filename.lower().endswith(".docx")
    )


class TextExtractor:
    """
    Извлечение текста по inputType и MIME-типу документа.

    - image/*          -> OCR основного провайдера
    - application/pdf  -> OCR основного провайдера, при ошибке (опционально) запасного
    - .docx            -> конвертация через внешний API
    - text/plain       -> UTF-8 без внешних вызовов
    """

    def __init__(
        self,
        ocr: OcrProvider,
        converter: DocumentConverter,
        fallback_ocr: Optional[OcrProvider] = None
    ):
        self.ocr = ocr
        self.converter = converter
        self.fallback_ocr = fallback_ocr

    async def acquire_text(self, request: AnalyzeRequest) -> str:
        if request.input_type in (InputType.FILE, InputType.IMAGE):
            if request.document is None:
                logger.error("Document part is missing for file/image inputType.")
                raise BadRequest("Файл документа отсутствует во входных данных.")
            text = await self._from_document(request.document)
        elif request.input_type == InputType.TEXT:
            if not request.text:
                logger.error("Text part is missing for text inputType.")
                raise BadRequest("Текстовые данные отсутствуют во входных данных.")
            text = request.text
        else:
            text = request.text or ""

        if not text or not text.strip():
            logger.error("Extracted text is empty AFTER all processing steps.")
            raise BadRequest("Не удалось распознать текст из документа или текст пуст.")

        return text

    async def _from_document(self, document: Document) -> str:
        content_type = document.content_type or ""
        logger.info(f"Document: filename={document.filename}, type={content_type}, size={len(document.content)}")

        if content_type.startswith("image/"):
            return await self.ocr.image_to_text(document.content, document.filename, content_type)

        if content_type == "application/pdf":
            return await self._pdf_to_text(document)

        if is_docx(document):
            return await self.converter.docx_to_text(document.content, document.filename, content_type)

        if content_type == "text/plain":
            return document.content.decode("utf-8", errors="replace")

        logger.error(f"Unsupported file type for OCR/conversion: {content_type}")
        raise BadRequest("Неподдерживаемый тип файла для OCR/конвертации.", details=content_type)

    async def _pdf_to_text(self, document: Document) -> str:
        try:
            return await self.ocr.pdf_to_text(document.content, document.filename, document.content_type)
        except (ProviderError, OperationTimeout) as e:
            if self.fallback_ocr is None:
                raise
            logger.warning(
                f"PDF OCR via {self.ocr.name} failed ({e.message}), "
                f"retrying via {self.fallback_ocr.name}"
            )
            return await self.fallback_ocr.pdf_to_text(document.content, document.filename, document.content_type)
