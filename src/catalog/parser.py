"""
src/catalog/parser.py

ЧТО: Разбор и нормализация сырых записей инцидентов
ЗАЧЕМ: В данных встречается дрейф схемы (severity строкой вместо объекта,
       нет списков, нет id). Всё это чиним здесь, а не в поисковом ядре.

ФУНКЦИИ:
- parse_ndjson() - один JSON объект на строку
- extract_companies() - компания из заголовка ("Knight Capital — ...")
- normalize_failure() - сырой dict -> IncidentRecord
"""

import json
import time
from typing import List

from src.catalog.models import IncidentRecord
from src.utils import get_logger

logger = get_logger(__name__)

TITLE_SEPARATORS = [" — ", " - ", ": ", " – "]


def parse_ndjson(content: str) -> List[dict]:
    """
    Разбирает NDJSON в список dict'ов.

    - Пустые строки пропускаются
    - Битые строки пропускаются с ошибкой в логе
    - Записи без id получают id вида entry-<номер строки>-<epoch ms>

    Example:
        entries = parse_ndjson(Path("failures.ndjson").read_text())
    """
    if not content:
        return []

    entries = []
    for index, line in enumerate(content.strip().split("\n")):
        if not line.strip():
            continue

        try:
            parsed = json.loads(line)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse line {index}: {e}")
            continue

        if not isinstance(parsed, dict):
            logger.error(f"Failed to parse line {index}: not a JSON object")
            continue

        if not parsed.get("id"):
            parsed["id"] = f"entry-{index}-{int(time.time() * 1000)}"

        entries.append(parsed)

    return entries


def extract_companies(title: str) -> List[str]:
    """
    Достаёт название компании из заголовка инцидента.

    1. Текст до первого разделителя (" — ", " - ", ": ", " – ")
    2. Иначе первое слово, если оно с заглавной буквы и длиннее 2 символов

    Example:
        extract_companies("Knight Capital — $440M in 45 minutes")  # ["Knight Capital"]
        extract_companies("Cloudflare regex outage")               # ["Cloudflare"]
    """
    if not title:
        return []

    for separator in TITLE_SEPARATORS:
        if separator in title:
            return [title.split(separator)[0].strip()]

    first_word = title.split(" ")[0]
    if len(first_word) > 2 and first_word[0].isupper():
        return [first_word]

    return []


def normalize_failure(raw: dict) -> IncidentRecord:
    """
    Приводит сырую запись к IncidentRecord.

    Raises:
        pydantic.ValidationError: Если нет обязательных полей (id, title, category)
    """
    data = dict(raw)

    severity = data.get("severity")
    if isinstance(severity, str):
        data["severity"] = {"level": severity}
    elif severity is None:
        data["severity"] = {"level": "unknown"}

    for field in ("impact", "lessons", "patterns", "tags", "sources"):
        if data.get(field) is None:
            data[field] = []

    data["companies"] = extract_companies(data.get("title") or "")

    return IncidentRecord.model_validate(data)
