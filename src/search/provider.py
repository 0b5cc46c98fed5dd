"""
src/search/provider.py

ЧТО: Внешний embedding provider (OpenAI-совместимый /v1/embeddings)
ЗАЧЕМ: Fallback для произвольных запросов, которых нет в hybrid lookup.
       Вызывается ТОЛЬКО если пользователь разрешил и передал свой API ключ.

ИСПОЛЬЗОВАНИЕ:
    provider = OpenAIEmbeddingProvider(api_key="sk-...")
    vector = await provider.embed("kubernetes control plane meltdown")
"""

from typing import Callable, List, Optional, Protocol

import httpx

from src.search.errors import ProviderRequestError
from src.utils import get_logger

logger = get_logger(__name__)

DEFAULT_PROVIDER_URL = "https://api.openai.com/v1/embeddings"
DEFAULT_MODEL = "text-embedding-3-small"


class EmbeddingProvider(Protocol):
    """Всё, что умеет превратить текст в один вектор."""

    async def embed(self, text: str) -> List[float]:
        ...


# Фабрика: API ключ пользователя -> provider
ProviderFactory = Callable[[str], EmbeddingProvider]


class OpenAIEmbeddingProvider:
    """
    Клиент OpenAI-совместимого endpoint'а эмбеддингов (httpx).

    Attributes:
        api_key: Bearer токен пользователя
        model: Модель (должна совпадать с той, которой построен embeddings.json)
        url: Endpoint
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        url: str = DEFAULT_PROVIDER_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def embed(self, text: str) -> List[float]:
        """
        Запрашивает один вектор для текста.

        Raises:
            ProviderRequestError: Сеть, статус не 2xx или неожиданный формат ответа
        """
        logger.info(f"Requesting embedding from provider (model={self.model})")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    self.url,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json={"model": self.model, "input": text},
                )
        except httpx.HTTPError as e:
            raise ProviderRequestError(f"request failed: {e}") from e

        if not response.is_success:
            raise ProviderRequestError(
                _error_detail(response), status_code=response.status_code
            )

        try:
            embedding = [float(x) for x in response.json()["data"][0]["embedding"]]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderRequestError(
                f"malformed response: {e!r}", status_code=response.status_code
            ) from e

        if not embedding:
            raise ProviderRequestError(
                "malformed response: empty embedding", status_code=response.status_code
            )

        return embedding


def _error_detail(response: httpx.Response) -> str:
    """Достаёт error.message из тела ответа, иначе статус."""
    try:
        message = response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        message = None

    return message or f"{response.status_code} {response.reason_phrase}"


def make_openai_provider_factory(
    model: str = DEFAULT_MODEL,
    url: str = DEFAULT_PROVIDER_URL,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ProviderFactory:
    """Фабрика OpenAIEmbeddingProvider с общими настройками из config."""

    def factory(api_key: str) -> EmbeddingProvider:
        return OpenAIEmbeddingProvider(
            api_key=api_key, model=model, url=url, timeout=timeout, transport=transport
        )

    return factory
