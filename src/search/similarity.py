"""
src/search/similarity.py

ЧТО: Ранжирование инцидентов по cosine similarity с вектором запроса
ЗАЧЕМ: Корпус маленький (тысячи векторов), поэтому brute-force скан
       без ANN индексов: точно, детерминированно, просто

АЛГОРИТМ:
1. Берём все записи из VectorStore (кэш)
2. Оставляем только прошедшие фильтры (category, severity, ВСЕ tags)
3. Считаем cosine similarity для каждой
4. Стабильная сортировка по убыванию (при равенстве - исходный порядок)
5. Обрезаем до top_k

ИСПОЛЬЗОВАНИЕ:
    ranker = SimilarityRanker(store)
    results = await ranker.search(query_vector, top_k=5,
                                  filters=SearchFilters(category="outage"))
"""

from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from src.search.models import SearchFilters, SimilarityResult
from src.search.store import VectorStore
from src.utils import get_logger

logger = get_logger(__name__)


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """
    Вычисляет cosine similarity между двумя векторами.

    Если у одного из векторов нулевая длина или в нём есть NaN/inf -
    возвращаем 0.0 (это определённый случай, а не ошибка).

    Example:
        cosine_similarity([1, 0, 0], [0.7, 0.7, 0])  # ~0.7071
    """
    a = np.asarray(vec1, dtype=np.float64)
    b = np.asarray(vec2, dtype=np.float64)

    norm1 = np.linalg.norm(a)
    norm2 = np.linalg.norm(b)

    if norm1 == 0 or norm2 == 0:
        return 0.0

    dot = np.dot(a, b)
    if not (np.isfinite(dot) and np.isfinite(norm1) and np.isfinite(norm2)):
        return 0.0

    similarity = float(dot / (norm1 * norm2))

    # Погрешность float может дать 1.0000000000000002
    return max(-1.0, min(1.0, similarity))


class SimilarityRanker:
    """
    Brute-force поиск по VectorStore.

    Attributes:
        store: Источник записей (кэшируется внутри store)
    """

    def __init__(self, store: VectorStore):
        self.store = store

    async def search(
        self,
        query_vector: Sequence[float],
        top_k: int,
        filters: Optional[SearchFilters] = None,
    ) -> List[SimilarityResult]:
        """
        Находит top_k записей, наиболее похожих на query_vector.

        Returns:
            List[SimilarityResult]: Не больше top_k результатов,
                отсортированных по убыванию similarity_score
        """
        if top_k <= 0:
            return []

        records = await self.store.load_embeddings()

        if filters is not None:
            candidates = [r for r in records if filters.matches(r)]
        else:
            candidates = records

        dimension = len(query_vector)
        scored = []
        for record in candidates:
            if len(record.vector) != dimension:
                logger.warning(
                    f"Skipping record '{record.id}': vector length "
                    f"{len(record.vector)} != query length {dimension}"
                )
                continue
            score = cosine_similarity(query_vector, record.vector)
            scored.append(SimilarityResult.from_record(record, score))

        # sorted() стабильна - при равных score остаётся порядок коллекции
        ranked = sorted(scored, key=lambda r: r.similarity_score, reverse=True)

        logger.debug(
            f"Ranked {len(scored)} of {len(records)} records, returning top {top_k}"
        )
        return ranked[:top_k]


def results_to_dataframe(results: List[SimilarityResult]) -> pd.DataFrame:
    """
    Конвертирует результаты в DataFrame (без векторов).

    Example:
        df = results_to_dataframe(results)
        print(df[['id', 'category', 'similarity_score']])
    """
    columns = ["id", "category", "severity", "tags", "similarity_score"]

    rows = [
        {
            "id": r.id,
            "category": r.category,
            "severity": r.severity,
            "tags": sorted(r.tags),
            "similarity_score": r.similarity_score,
        }
        for r in results
    ]

    return pd.DataFrame(rows, columns=columns)
