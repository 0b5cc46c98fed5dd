"""
src/catalog/models.py

ЧТО: Модели полной записи инцидента из failures.json
ЗАЧЕМ: UI/API показывает карточку инцидента, а не только вектор
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from src.search.models import SimilarityResult


class Severity(BaseModel):
    """Критичность инцидента (в старых данных - просто строка)."""

    level: str
    score: Optional[float] = None
    financial: Optional[str] = None


class Source(BaseModel):
    title: str
    url: str
    kind: Literal["primary", "secondary"] = "secondary"


class IncidentRecord(BaseModel):
    """
    Документированный отказ технологии.

    companies - вычисляется из заголовка при загрузке
    """

    id: str
    title: str
    year: Optional[int] = None
    category: str
    cause: Optional[str] = None
    severity: Severity
    summary: str = ""
    stage: Optional[str] = None
    impact: List[str] = Field(default_factory=list)
    root_cause: Optional[str] = None
    lessons: List[str] = Field(default_factory=list)
    patterns: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    sources: List[Source] = Field(default_factory=list)
    evidence_type: Optional[str] = None
    companies: List[str] = Field(default_factory=list)


class FailuresPage(BaseModel):
    """Результат листинга каталога."""

    total: int
    data: List[IncidentRecord]


class HydratedResult(BaseModel):
    """Результат поиска + полная запись инцидента."""

    result: SimilarityResult
    incident: IncidentRecord
