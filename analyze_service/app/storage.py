"""Временное хранилище файлов для PDF OCR (S3-совместимое, через MinIO client)."""
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from io import BytesIO
from typing import AsyncIterator, List, Optional

from minio import Minio

from .config import config
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class StorageService:
    """Сервис для работы с object storage."""

    def __init__(self, client: Optional[Minio] = None):
        self._client = client

    @property
    def client(self) -> Minio:
        """Клиент создаётся при первом обращении, чтобы сервис стартовал без ключей."""
        if self._client is None:
            if not config.STORAGE_ACCESS_KEY or not config.STORAGE_SECRET_KEY:
                raise ConfigurationError(
                    "Не настроен доступ к хранилищу для OCR PDF.",
                    details="STORAGE_ACCESS_KEY / STORAGE_SECRET_KEY не заданы"
                )
            self._client = Minio(
                config.STORAGE_ENDPOINT,
                access_key=config.STORAGE_ACCESS_KEY,
                secret_key=config.STORAGE_SECRET_KEY,
                secure=config.STORAGE_SECURE
            )
        return self._client

    def put(self, bucket: str, key: str, data: bytes, content_type: str):
        """Загрузить объект."""
        self.client.put_object(
            bucket,
            key,
            BytesIO(data),
            length=len(data),
            content_type=content_type or "application/octet-stream"
        )
        logger.info(f"Файл загружен: {bucket}/{key} ({len(data)} bytes)")

    def get(self, bucket: str, key: str) -> bytes:
        """Получить объект."""
        response = self.client.get_object(bucket, key)
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    def delete(self, bucket: str, key: str):
        """Удалить объект."""
        self.client.remove_object(bucket, key)
        logger.info(f"Файл удалён: {bucket}/{key}")

    def list(self, bucket: str, prefix: str) -> List[str]:
        """Ключи всех объектов с префиксом."""
        objects = self.client.list_objects(bucket, prefix=prefix, recursive=True)
        return [obj.object_name for obj in objects]

    def delete_prefix(self, bucket: str, prefix: str):
        """Удалить все объекты с префиксом."""
        for key in self.list(bucket, prefix):
            self.delete(bucket, key)

    @asynccontextmanager
    async def temporary_object(
        self,
        bucket: str,
        data: bytes,
        filename: str,
        content_type: str
    ) -> AsyncIterator[str]:
        """
        Загрузить временный файл и удалить его при выходе.

        Вызовы MinIO выполняются в отдельном потоке.

        Yields:
            ключ объекта в bucket
        """
        key = f"temp-ocr/{int(time.time() * 1000)}-{filename or 'document'}"
        await asyncio.to_thread(self.put, bucket, key, data, content_type)
        try:
            yield key
        finally:
            try:
                await asyncio.to_thread(self.delete, bucket, key)
            except Exception as e:
                logger.error(f"Не удалось удалить временный файл {bucket}/{key}: {e}")


storage_service = StorageService()
