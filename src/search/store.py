"""
src/search/store.py

ЧТО: Кэширующие загрузчики векторов инцидентов и hybrid lookup
ЗАЧЕМ: Оба артефакта статичны - грузим ОДИН РАЗ и держим в памяти

ТЕХНОЛОГИИ:
- asyncio.Lock - одна загрузка в полёте: если два запроса пришли
  одновременно до заполнения кэша, сеть дёргается только один раз
- pydantic - валидация каждой записи embeddings.json

ИСПОЛЬЗОВАНИЕ:
    source = StaticDataSource(config.API_BASE_URL)

    store = VectorStore(source)
    records = await store.load_embeddings()

    lookup = HybridLookup(source)
    terms = await lookup.load_hybrid_lookup()
    vector = terms.get("dns outage")
"""

import asyncio
from typing import Dict, List, Optional

from pydantic import ValidationError

from src.search.errors import LoadError
from src.search.models import EmbeddingRecord, normalize_query
from src.search.source import StaticDataSource
from src.utils import get_logger, timer

logger = get_logger(__name__)


class VectorStore:
    """
    Коллекция EmbeddingRecord, загружаемая лениво и кэшируемая навсегда.

    Attributes:
        source: Откуда читать артефакт
        filename: Имя артефакта (default: embeddings.json)
    """

    def __init__(self, source: StaticDataSource, filename: str = "embeddings.json"):
        self.source = source
        self.filename = filename
        self._records: Optional[List[EmbeddingRecord]] = None
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._records is not None

    async def load_embeddings(self) -> List[EmbeddingRecord]:
        """
        Возвращает все записи. Первый вызов загружает, остальные - из кэша.

        Raises:
            LoadError: Если артефакт недоступен или это не JSON массив
        """
        if self._records is not None:
            return self._records

        async with self._lock:
            # Пока ждали lock, кэш мог заполнить другой вызов
            if self._records is None:
                self._records = await self._fetch()

        return self._records

    @timer
    async def _fetch(self) -> List[EmbeddingRecord]:
        logger.info(f"Loading embeddings from {self.source.url_for(self.filename)}...")
        data = await self.source.fetch_json(self.filename)

        if not isinstance(data, list):
            raise LoadError(
                self.filename, f"expected JSON array, got {type(data).__name__}"
            )

        records = []
        for position, raw in enumerate(data):
            try:
                records.append(EmbeddingRecord.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    f"Skipping malformed embedding record #{position}: "
                    f"{e.error_count()} validation error(s)"
                )

        dimensions = {len(r.vector) for r in records}
        logger.info(
            f"Loaded {len(records)} embedding records "
            f"(skipped {len(data) - len(records)}), dimensions: {sorted(dimensions)}"
        )
        if len(dimensions) > 1:
            logger.warning(f"Embedding records have mixed dimensions: {sorted(dimensions)}")

        return records


class HybridLookup:
    """
    Предрассчитанные векторы для частых запросов (нормализованная строка -> вектор).

    Ключи нормализуются при загрузке, чтобы "DNS Outage " в файле
    тоже находился по запросу "dns outage".
    """

    def __init__(self, source: StaticDataSource, filename: str = "hybrid_lookup.json"):
        self.source = source
        self.filename = filename
        self._terms: Optional[Dict[str, List[float]]] = None
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._terms is not None

    async def load_hybrid_lookup(self) -> Dict[str, List[float]]:
        """
        Возвращает словарь term -> vector (кэшируется).

        Raises:
            LoadError: Если артефакт недоступен или в нём нет объекта "terms"
        """
        if self._terms is not None:
            return self._terms

        async with self._lock:
            if self._terms is None:
                self._terms = await self._fetch()

        return self._terms

    async def _fetch(self) -> Dict[str, List[float]]:
        logger.info(f"Loading hybrid lookup from {self.source.url_for(self.filename)}...")
        data = await self.source.fetch_json(self.filename)

        terms = data.get("terms") if isinstance(data, dict) else None
        if not isinstance(terms, dict):
            raise LoadError(self.filename, "missing 'terms' object")

        lookup = {}
        for term, entry in terms.items():
            vector = entry.get("vector") if isinstance(entry, dict) else None
            if not isinstance(vector, list):
                logger.warning(f"Skipping hybrid term without vector: '{term}'")
                continue
            lookup[normalize_query(term)] = vector

        logger.info(f"Loaded {len(lookup)} hybrid lookup terms")
        return lookup
