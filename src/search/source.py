"""
src/search/source.py

ЧТО: Единая точка чтения статических JSON артефактов
ЗАЧЕМ: embeddings.json, hybrid_lookup.json, failures.json лежат рядом
       (GitHub Pages или локальная папка). Все загрузчики читают их отсюда.

ИСПОЛЬЗОВАНИЕ:
    source = StaticDataSource("https://example.org/api/v1")
    data = await source.fetch_json("embeddings.json")

    # Локальная папка (офлайн режим, тесты)
    source = StaticDataSource("./data/api/v1")
"""

import json
from pathlib import Path
from typing import Any, Optional

import httpx

from src.search.errors import LoadError
from src.utils import get_logger, load_json

logger = get_logger(__name__)


class StaticDataSource:
    """
    Читает JSON по имени файла из base_url.

    Attributes:
        base_url: http(s) адрес или путь к локальной папке
        timeout: Таймаут HTTP запроса в секундах
        transport: Кастомный httpx transport (в тестах - httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def is_remote(self) -> bool:
        return self.base_url.startswith(("http://", "https://"))

    def url_for(self, name: str) -> str:
        """Полный URL (или путь) к артефакту."""
        if self.is_remote:
            return f"{self.base_url}/{name}"
        return str(Path(self.base_url) / name)

    async def fetch_json(self, name: str) -> Any:
        """
        Загружает и парсит JSON артефакт.

        Raises:
            LoadError: Сеть недоступна, статус не 2xx, невалидный JSON,
                       файл не найден
        """
        location = self.url_for(name)

        if not self.is_remote:
            try:
                return load_json(location)
            except (OSError, json.JSONDecodeError) as e:
                raise LoadError(name, str(e)) from e

        logger.info(f"GET {location}")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(location)
        except httpx.HTTPError as e:
            raise LoadError(name, f"request failed: {e}") from e

        if not response.is_success:
            raise LoadError(
                name,
                f"{response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise LoadError(name, f"invalid JSON: {e}", status_code=response.status_code) from e
