"""
src/search/resolver.py

ЧТО: Превращает текст запроса в вектор
ЗАЧЕМ: Частые запросы берём из hybrid lookup (бесплатно, детерминированно,
       без ключа). Произвольный текст - только через provider и только
       если пользователь это явно разрешил и дал API ключ.

ПОРЯДОК:
1. Нормализуем запрос (trim + lower)
2. Есть в hybrid lookup -> возвращаем вектор, provider НЕ вызывается
3. hybrid_only=False и есть ключ -> один запрос к provider с ИСХОДНЫМ текстом
4. Иначе -> NoEmbeddingAvailable
"""

from typing import List, Optional

from src.search.errors import NoEmbeddingAvailable
from src.search.models import normalize_query
from src.search.provider import ProviderFactory
from src.search.store import HybridLookup
from src.utils import get_logger

logger = get_logger(__name__)


class QueryEmbeddingResolver:
    """
    Attributes:
        lookup: Кэш hybrid lookup
        provider_factory: Создаёт provider из API ключа пользователя
                          (None - fallback недоступен вообще)
    """

    def __init__(
        self,
        lookup: HybridLookup,
        provider_factory: Optional[ProviderFactory] = None,
    ):
        self.lookup = lookup
        self.provider_factory = provider_factory

    async def resolve_query_vector(
        self,
        query: str,
        provider_api_key: Optional[str] = None,
        hybrid_only: bool = True,
    ) -> List[float]:
        """
        Возвращает вектор запроса.

        Args:
            query: Текст запроса как его ввёл пользователь
            provider_api_key: Ключ для внешнего provider'а (опционально)
            hybrid_only: True - никогда не ходить во внешний provider

        Raises:
            NoEmbeddingAvailable: Нет ни предрассчитанного вектора, ни fallback'а
            ProviderRequestError: Provider вернул ошибку
            LoadError: Не удалось загрузить hybrid lookup
        """
        terms = await self.lookup.load_hybrid_lookup()
        normalized = normalize_query(query)

        vector = terms.get(normalized)
        if vector is not None:
            logger.info(f"Using pre-embedded term for: '{normalized}'")
            return vector

        if not hybrid_only and provider_api_key and self.provider_factory is not None:
            logger.info(f"Term '{normalized}' not in hybrid lookup, calling provider")
            provider = self.provider_factory(provider_api_key)
            return await provider.embed(query)

        logger.info(f"No embedding available for: '{normalized}'")
        raise NoEmbeddingAvailable(query)
