"""
src/search/models.py

ЧТО: Модели данных поискового ядра
ЗАЧЕМ: pydantic валидирует записи из embeddings.json при загрузке,
       а frozen=True гарантирует, что кэш никто случайно не изменит

МОДЕЛИ:
- EmbeddingRecord  - вектор одного инцидента + метаданные для фильтров
- SearchFilters    - фильтры category / severity / tags
- SimilarityResult - EmbeddingRecord + similarity_score
"""

from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, confloat, field_validator


def normalize_query(text: str) -> str:
    """Нормализация запроса для hybrid lookup: trim + lower-case."""
    return text.strip().lower()


class EmbeddingRecord(BaseModel):
    """
    Одна запись из embeddings.json.

    Attributes:
        id: ID инцидента (совпадает с id в failures.json)
        vector: Вектор фиксированной размерности
        category: Категория инцидента (outage, security, ...)
        severity: Уровень критичности (critical/high/medium/low)
        tags: Набор тегов
    """

    model_config = ConfigDict(frozen=True)

    id: str
    # NaN и inf в JSON допустимы, но такая запись не ранжируется
    vector: List[confloat(allow_inf_nan=False)]
    category: str = ""
    severity: str = ""
    tags: FrozenSet[str] = Field(default_factory=frozenset)

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags_to_empty(cls, value):
        return frozenset() if value is None else value


class SearchFilters(BaseModel):
    """
    Фильтры поиска. Применяются ДО подсчёта similarity.

    - category: точное совпадение
    - severity: точное совпадение
    - tags: у записи должны быть ВСЕ указанные теги
    """

    model_config = ConfigDict(frozen=True)

    category: Optional[str] = None
    severity: Optional[str] = None
    tags: FrozenSet[str] = Field(default_factory=frozenset)

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags_to_empty(cls, value):
        return frozenset() if value is None else value

    def matches(self, record: EmbeddingRecord) -> bool:
        """Проходит ли запись через фильтры."""
        if self.category and record.category != self.category:
            return False

        if self.severity and record.severity != self.severity:
            return False

        if self.tags and not self.tags.issubset(record.tags):
            return False

        return True


class SearchRequest(BaseModel):
    """
    Запрос на поиск одним объектом (как его присылает UI / HTTP клиент).

    use_hybrid_only=None - берётся default_hybrid_only сервиса
    (USE_HYBRID_ONLY_DEFAULT, по умолчанию True: provider выключен).
    """

    query: str = Field(..., min_length=1, max_length=1000)
    top_k: int = Field(default=5)
    filters: Optional[SearchFilters] = None
    use_hybrid_only: Optional[bool] = None
    embedding_api_key: Optional[str] = None


class SimilarityResult(EmbeddingRecord):
    """Запись + cosine similarity с вектором запроса."""

    similarity_score: float

    @classmethod
    def from_record(cls, record: EmbeddingRecord, score: float) -> "SimilarityResult":
        return cls(**record.model_dump(), similarity_score=score)
