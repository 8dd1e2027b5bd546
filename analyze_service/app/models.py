"""Модели данных для Analyze Service."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class InputType(str, Enum):
    """Тип входных данных из поля inputType."""
    TEXT = "text"
    FILE = "file"
    IMAGE = "image"


class Document(BaseModel):
    """Загруженный документ."""
    filename: str = ""
    content_type: str = ""
    content: bytes


class AnalyzeRequest(BaseModel):
    """Контекст запроса, который передаётся между шагами пайплайна."""
    input_type: Optional[InputType] = None
    source_language: str = "auto"
    target_language: str = "ru"
    text: Optional[str] = None
    document: Optional[Document] = None


class SentimentResult(BaseModel):
    """Результат анализа тональности."""
    SentimentClassification: str = "Neutral"
    SentimentScore: float = 0.0


class EmotionEntry(BaseModel):
    """Одна эмоция из mock-анализа."""
    name: str
    emoji: str
    score: float = Field(..., ge=0.0, le=1.0)


class AnalyzeResponse(BaseModel):
    """Ответ клиенту."""
    model_config = ConfigDict(populate_by_name=True)

    extracted_text: str = Field(..., alias="extractedText")
    translated_text: str = Field(..., alias="translatedText")
    sentiment_analysis: SentimentResult = Field(..., alias="sentimentAnalysis")
    emotions_analysis: List[EmotionEntry] = Field(default_factory=list, alias="emotionsAnalysis")


class ErrorResponse(BaseModel):
    """Ответ с ошибкой."""
    message: str
    details: Optional[str] = None
