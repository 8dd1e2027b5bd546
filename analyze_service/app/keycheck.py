"""Проверка API-ключей провайдеров.

    analyze-keycheck google [--key KEY]
    analyze-keycheck cloudmersive [--key KEY]

Без --key используется ключ из конфигурации.
"""
import argparse
import asyncio
import sys
from typing import List, Optional

from .config import config
from .errors import ProviderError
from .services import CloudmersiveService, TranslationService

SEPARATOR = "------------------------------------"


async def check_google_key(api_key: str) -> bool:
    """Перевод тестовой фразы на русский."""
    test_text, target = "Hello", "ru"
    print("Проверка ключа Google Translate API...")
    print(f'Отправка запроса на перевод текста: "{test_text}" на язык: "{target}"')
    try:
        translated = await TranslationService(api_key=api_key).translate(test_text, target=target)
    except ProviderError as e:
        print(SEPARATOR)
        print("Ошибка при проверке ключа Google Translate API.")
        print(f"Статус: {e.status_code}")
        print(f"Сообщение об ошибке: {e.message}")
        print(SEPARATOR)
        return False
    except (KeyError, IndexError, ValueError) as e:
        print(SEPARATOR)
        print("Ключ Google Translate API может быть действителен, но ответ API не содержит ожидаемых данных перевода.")
        print(f"Ответ API: {e}")
        print(SEPARATOR)
        return False

    print(SEPARATOR)
    print("Ключ Google Translate API действителен!")
    print(f'Переведенный текст: "{translated}"')
    print(SEPARATOR)
    return True


async def check_cloudmersive_key(api_key: str) -> bool:
    """Анализ тональности тестовой фразы."""
    test_text = "This is a test sentence."
    print("Проверка ключа Cloudmersive API...")
    print(f'Отправка запроса на анализ тональности текста: "{test_text}"')
    try:
        result = await CloudmersiveService(api_key=api_key).sentiment(test_text)
    except ProviderError as e:
        print(SEPARATOR)
        print("Ошибка при проверке ключа Cloudmersive API.")
        print(f"Статус: {e.status_code}")
        print(f"Сообщение об ошибке: {e.details or e.message}")
        print(SEPARATOR)
        return False
    except ValueError as e:
        print(SEPARATOR)
        print("Ключ действителен, но ответ не является корректным JSON.")
        print(f"Полученный ответ: {e}")
        print(SEPARATOR)
        return False

    print(SEPARATOR)
    print("Ключ Cloudmersive API действителен!")
    print(f"Результат анализа тональности: {result.model_dump()}")
    print(SEPARATOR)
    return True


CHECKS = {
    "google": (check_google_key, lambda: config.GOOGLE_TRANSLATE_API_KEY),
    "cloudmersive": (check_cloudmersive_key, lambda: config.CLOUDMERSIVE_API_KEY),
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Проверка API-ключей провайдеров")
    parser.add_argument("provider", choices=sorted(CHECKS))
    parser.add_argument("--key", default=None, help="API-ключ (по умолчанию из конфигурации)")
    args = parser.parse_args(argv)

    check, default_key = CHECKS[args.provider]
    api_key = args.key or default_key()
    if not api_key:
        print(f"Ошибка: ключ {args.provider} API не предоставлен.", file=sys.stderr)
        return 1

    return 0 if asyncio.run(check(api_key)) else 1


if __name__ == "__main__":
    sys.exit(main())
