"""
src/catalog/catalog.py

ЧТО: Каталог инцидентов (failures.json + patterns.json + tags.json)
ЗАЧЕМ: Поиск возвращает только id + score, а для показа нужна полная запись.
       Каталог грузит записи, фильтрует листинг и "гидрирует" результаты поиска.

ТЕХНОЛОГИИ:
- tenacity - повтор загрузки failures.json с экспоненциальной паузой (1s, 2s)
- asyncio.Lock - одна загрузка в полёте

ИСПОЛЬЗОВАНИЕ:
    catalog = IncidentCatalog(source)

    page = await catalog.get_failures(category="outage", limit=10)
    incident = await catalog.get_failure_by_id("knight-capital-2012")

    hydrated = hydrate_results(results, await catalog.load_failures())
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from src.catalog.models import FailuresPage, HydratedResult, IncidentRecord
from src.catalog.parser import normalize_failure
from src.config import Config, get_config
from src.search.errors import LoadError
from src.search.models import SimilarityResult
from src.search.source import StaticDataSource
from src.utils import get_logger

logger = get_logger(__name__)


class IncidentCatalog:
    """
    Attributes:
        source: Откуда читать артефакты
        max_retries: Сколько всего попыток загрузки failures.json
        retry_wait: Стратегия паузы между попытками (tenacity)
    """

    def __init__(
        self,
        source: StaticDataSource,
        failures_file: str = "failures.json",
        patterns_file: str = "patterns.json",
        tags_file: str = "tags.json",
        max_retries: int = 3,
        retry_wait: Optional[wait_base] = None,
    ):
        self.source = source
        self.failures_file = failures_file
        self.patterns_file = patterns_file
        self.tags_file = tags_file
        self.max_retries = max_retries
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, exp_base=2)
        self._failures: Optional[List[IncidentRecord]] = None
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._failures is not None

    async def load_failures(self) -> List[IncidentRecord]:
        """
        Все инциденты каталога (кэшируется).

        Raises:
            LoadError: Если все попытки загрузки провалились
        """
        if self._failures is not None:
            return self._failures

        async with self._lock:
            if self._failures is None:
                self._failures = await self._fetch_with_retry()

        return self._failures

    async def _fetch_with_retry(self) -> List[IncidentRecord]:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=self.retry_wait,
            retry=retry_if_exception_type(LoadError),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(
                        f"Retrying {self.failures_file} "
                        f"(attempt {attempt.retry_state.attempt_number}/{self.max_retries})"
                    )
                return await self._fetch()

    async def _fetch(self) -> List[IncidentRecord]:
        data = await self.source.fetch_json(self.failures_file)

        # Бывает массивом, бывает {"data": [...]}
        if isinstance(data, dict):
            data = data.get("data") or []
        if not isinstance(data, list):
            raise LoadError(self.failures_file, "expected JSON array")

        failures = []
        for raw in data:
            try:
                failures.append(normalize_failure(raw))
            except (ValidationError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed incident {raw!r:.80}: {e}")

        logger.info(f"Data loaded: {len(failures)} incidents")
        return failures

    async def get_failures(
        self,
        category: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> FailuresPage:
        """
        Листинг каталога с фильтрами.

        tags - у инцидента должны быть ВСЕ указанные теги (как в поиске).
        total - количество после фильтров и пагинации.
        """
        filtered = await self.load_failures()

        if category:
            filtered = [f for f in filtered if f.category == category]

        wanted_tags = set(tags or [])
        if wanted_tags:
            filtered = [f for f in filtered if wanted_tags.issubset(f.tags)]

        if offset:
            filtered = filtered[offset:]

        if limit:
            filtered = filtered[:limit]

        return FailuresPage(total=len(filtered), data=filtered)

    async def get_failure_by_id(self, failure_id: str) -> Optional[IncidentRecord]:
        for failure in await self.load_failures():
            if failure.id == failure_id:
                return failure
        return None

    async def get_patterns(self) -> Any:
        """patterns.json как есть (без кэша)."""
        return await self.source.fetch_json(self.patterns_file)

    async def get_tags(self) -> Any:
        """tags.json (таксономия тегов) как есть."""
        return await self.source.fetch_json(self.tags_file)


def hydrate_results(
    results: List[SimilarityResult],
    incidents: Iterable[IncidentRecord],
) -> List[HydratedResult]:
    """
    Склеивает результаты поиска с записями каталога по id.

    Результаты без записи в каталоге отбрасываются, порядок ранжирования сохраняется.
    """
    by_id: Dict[str, IncidentRecord] = {incident.id: incident for incident in incidents}

    hydrated = []
    for result in results:
        incident = by_id.get(result.id)
        if incident is None:
            logger.debug(f"No catalog entry for search result '{result.id}'")
            continue
        hydrated.append(HydratedResult(result=result, incident=incident))

    return hydrated


def build_catalog(
    config: Optional[Config] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> IncidentCatalog:
    """Собирает каталог из конфигурации (source тот же, что у поиска)."""
    if config is None:
        config = get_config()

    source = StaticDataSource(
        config.API_BASE_URL, timeout=config.HTTP_TIMEOUT_SECONDS, transport=transport
    )
    return IncidentCatalog(
        source,
        failures_file=config.FAILURES_FILE,
        patterns_file=config.PATTERNS_FILE,
        tags_file=config.TAGS_FILE,
        max_retries=config.CATALOG_MAX_RETRIES,
    )
