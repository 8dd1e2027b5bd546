"""Основная логика обработки запроса."""
import logging
import random
from typing import Optional, Protocol

from .config import config
from .emotions import derive_emotions
from .errors import ProviderError
from .extraction import TextExtractor
from .localization import localize_emotions, localize_sentiment
from .models import AnalyzeRequest, AnalyzeResponse, SentimentResult
from .services import (
    CloudmersiveService,
    HuggingFaceService,
    TranslationService,
    VisionService,
    preview,
)

logger = logging.getLogger(__name__)

NOT_TRANSLATED = "Текст не был переведен. "


class Translator(Protocol):
    async def translate(self, text: str, target: str, source: Optional[str] = None) -> str: ...


class SentimentAnalyzer(Protocol):
    async def sentiment(self, text: str) -> SentimentResult: ...


class AnalyzePipeline:
    """
    Пайплайн одного запроса.

    Шаг 1: Получение текста (text / OCR / конвертация)
    Шаг 2: Перевод на английский
    Шаг 3: Анализ тональности
    Шаг 4: Mock-анализ эмоций
    Шаг 5: Перевод результатов на targetLanguage
    """

    def __init__(
        self,
        extractor: TextExtractor,
        translator: Translator,
        analyzer: SentimentAnalyzer,
        translation_failure_mode: str = "degrade",
        rng: Optional[random.Random] = None
    ):
        self.extractor = extractor
        self.translator = translator
        self.analyzer = analyzer
        self.translation_failure_mode = translation_failure_mode
        self.rng = rng

    async def run(self, request: AnalyzeRequest) -> AnalyzeResponse:
        input_type = request.input_type.value if request.input_type else None
        logger.info(
            f"Analyze request: inputType={input_type}, "
            f"source={request.source_language}, target={request.target_language}"
        )

        # === ШАГ 1: Получение текста ===
        extracted_text = await self.extractor.acquire_text(request)
        logger.info(f"Extracted text ({len(extracted_text)} chars): '{preview(extracted_text)}'")

        # === ШАГ 2: Перевод на английский ===
        try:
            english_text = await self.translator.translate(
                extracted_text,
                target="en",
                source=request.source_language
            )
        except ProviderError as e:
            if self.translation_failure_mode == "strict":
                raise
            return self._untranslated(request, extracted_text, e.message)

        if not english_text or not english_text.strip():
            logger.error("Translator returned empty text!")
            if self.translation_failure_mode == "strict":
                raise ProviderError("translation", "Перевод вернул пустой текст.")
            return self._untranslated(request, extracted_text, "Возникла ошибка при переводе.")

        # === ШАГ 3: Тональность ===
        sentiment = await self.analyzer.sentiment(english_text)
        logger.info(f"Sentiment (English): {sentiment.SentimentClassification} ({sentiment.SentimentScore:.3f})")

        # === ШАГ 4: Эмоции ===
        emotions = derive_emotions(sentiment.SentimentClassification, self.rng)
        logger.debug(f"Emotions (English, mock): {[(e.name, round(e.score, 3)) for e in emotions]}")

        # === ШАГ 5: Локализация ===
        target = request.target_language
        final_text = english_text
        if target != "en":
            final_text = await self._translate_back(english_text, target)
            emotions = localize_emotions(emotions, target)

        if not final_text or not final_text.strip():
            logger.error("Final translated text is empty.")
            final_text = NOT_TRANSLATED + "Возникла ошибка."

        return AnalyzeResponse(
            extracted_text=extracted_text,
            translated_text=final_text,
            sentiment_analysis=SentimentResult(
                SentimentClassification=localize_sentiment(sentiment.SentimentClassification, target),
                SentimentScore=sentiment.SentimentScore
            ),
            emotions_analysis=emotions
        )

    async def _translate_back(self, english_text: str, target: str) -> str:
        """Перевод результата на целевой язык; при ошибке остаётся английский текст."""
        try:
            return await self.translator.translate(english_text, target=target)
        except ProviderError as e:
            logger.warning(f"Failed to translate final text to {target}: {e.details or e.message}")
            return english_text

    def _untranslated(self, request: AnalyzeRequest, extracted_text: str, reason: str) -> AnalyzeResponse:
        """Ответ 200 без перевода: нейтральная тональность, анализ тональности не вызывается."""
        logger.warning(f"Translation failed, returning untranslated response: {reason}")
        target = request.target_language
        emotions = derive_emotions("Neutral", self.rng)
        return AnalyzeResponse(
            extracted_text=extracted_text,
            translated_text=NOT_TRANSLATED + reason,
            sentiment_analysis=SentimentResult(
                SentimentClassification=localize_sentiment("Neutral", target),
                SentimentScore=0.0
            ),
            emotions_analysis=localize_emotions(emotions, target)
        )


def build_pipeline() -> AnalyzePipeline:
    """Собрать пайплайн из провайдеров, выбранных в конфигурации."""
    cloudmersive = CloudmersiveService()
    vision = VisionService()

    if config.OCR_PROVIDER == "cloudmersive":
        ocr, secondary = cloudmersive, vision
    else:
        ocr, secondary = vision, cloudmersive

    if config.SENTIMENT_PROVIDER == "cloudmersive":
        analyzer: SentimentAnalyzer = cloudmersive
    else:
        analyzer = HuggingFaceService()

    return AnalyzePipeline(
        extractor=TextExtractor(
            ocr=ocr,
            converter=cloudmersive,
            fallback_ocr=secondary if config.OCR_PDF_FALLBACK else None
        ),
        translator=TranslationService(),
        analyzer=analyzer,
        translation_failure_mode=config.TRANSLATION_FAILURE_MODE
    )
