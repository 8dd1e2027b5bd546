"""
Pytest configuration and shared fixtures for Analyze Service tests.
"""
import random
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from analyze_service.app.extraction import TextExtractor
from analyze_service.app.models import SentimentResult
from analyze_service.app.pipeline import AnalyzePipeline


BOUNDARY = "----analyze-test-boundary"


def encode_multipart(fields=None, files=None):
    """
    Encode form fields and files as multipart/form-data.

    Returns:
        (body, headers) for TestClient.post(content=..., headers=...)
    """
    lines = []
    for name, value in (fields or {}).items():
        lines.append(f"--{BOUNDARY}\r\n".encode())
        lines.append(f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode())
        lines.append(value.encode("utf-8") + b"\r\n")
    for name, (filename, content, content_type) in (files or {}).items():
        lines.append(f"--{BOUNDARY}\r\n".encode())
        lines.append(
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'.encode()
        )
        lines.append(f"Content-Type: {content_type}\r\n\r\n".encode())
        lines.append(content + b"\r\n")
    lines.append(f"--{BOUNDARY}--\r\n".encode())
    headers = {"Content-Type": f"multipart/form-data; boundary={BOUNDARY}"}
    return b"".join(lines), headers


def _echo_translate(text, target, source=None):
    return text


@pytest.fixture
def multipart():
    return encode_multipart


@pytest.fixture
def mock_translator():
    """Translator that returns the input text unchanged."""
    translator = MagicMock()
    translator.translate = AsyncMock(side_effect=_echo_translate)
    return translator


@pytest.fixture
def mock_analyzer():
    """Sentiment provider returning Positive by default."""
    analyzer = MagicMock()
    analyzer.sentiment = AsyncMock(
        return_value=SentimentResult(SentimentClassification="Positive", SentimentScore=0.93)
    )
    return analyzer


@pytest.fixture
def mock_ocr():
    ocr = MagicMock()
    ocr.name = "primary_ocr"
    ocr.image_to_text = AsyncMock(return_value="text from image")
    ocr.pdf_to_text = AsyncMock(return_value="text from pdf")
    return ocr


@pytest.fixture
def mock_fallback_ocr():
    ocr = MagicMock()
    ocr.name = "fallback_ocr"
    ocr.image_to_text = AsyncMock(return_value="fallback image text")
    ocr.pdf_to_text = AsyncMock(return_value="fallback pdf text")
    return ocr


@pytest.fixture
def mock_converter():
    converter = MagicMock()
    converter.docx_to_text = AsyncMock(return_value="text from docx")
    return converter


@pytest.fixture
def extractor(mock_ocr, mock_converter, mock_fallback_ocr):
    return TextExtractor(ocr=mock_ocr, converter=mock_converter, fallback_ocr=mock_fallback_ocr)


@pytest.fixture
def make_pipeline(extractor, mock_translator, mock_analyzer):
    """Factory for a pipeline over mocked providers with a seeded random source."""
    def _create(mode="degrade", **overrides):
        kwargs = {
            "extractor": extractor,
            "translator": mock_translator,
            "analyzer": mock_analyzer,
            "translation_failure_mode": mode,
            "rng": random.Random(42),
        }
        kwargs.update(overrides)
        return AnalyzePipeline(**kwargs)

    return _create


@pytest.fixture
def test_client(make_pipeline):
    """Test client with the pipeline dependency overridden."""
    from analyze_service.app.main import app, get_pipeline

    pipeline = make_pipeline()
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    try:
        with TestClient(app, raise_server_exceptions=False) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
