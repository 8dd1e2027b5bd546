"""Ошибки обработки запроса.

Пайплайн только выбрасывает исключения, HTTP-статус выбирает main.
"""
from typing import Optional


class AnalyzeError(Exception):
    """Базовая ошибка с HTTP-статусом и сообщением для клиента."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class BadRequest(AnalyzeError):
    """Некорректный запрос: нет поля, не тот тип файла, пустой текст."""
    status_code = 400


class ProviderError(AnalyzeError):
    """Внешний API вернул ошибку. Статус повторяет статус провайдера."""
    status_code = 502

    def __init__(
        self,
        provider: str,
        message: str,
        details: Optional[str] = None,
        status_code: Optional[int] = None
    ):
        super().__init__(message, details, status_code)
        self.provider = provider


class OperationTimeout(AnalyzeError):
    """Асинхронная операция OCR не завершилась за отведённое число попыток."""
    status_code = 504


class ConfigurationError(AnalyzeError):
    """Сервис не настроен для выбранного пути обработки."""
    status_code = 500
