"""
src.catalog - Каталог документированных отказов технологий

Модули:
- models.py - IncidentRecord, Severity, FailuresPage
- parser.py - parse_ndjson, нормализация схемы
- catalog.py - IncidentCatalog (загрузка с повторами) + hydrate_results
"""

from src.catalog.catalog import IncidentCatalog, build_catalog, hydrate_results
from src.catalog.models import FailuresPage, HydratedResult, IncidentRecord, Severity
from src.catalog.parser import extract_companies, normalize_failure, parse_ndjson

__all__ = [
    "IncidentCatalog",
    "build_catalog",
    "hydrate_results",
    "FailuresPage",
    "HydratedResult",
    "IncidentRecord",
    "Severity",
    "extract_companies",
    "normalize_failure",
    "parse_ndjson",
]
