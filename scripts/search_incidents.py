"""
scripts/search_incidents.py

ЧТО: CLI для поиска похожих инцидентов
ЗАЧЕМ: Быстро проверить поиск без запуска API

ЗАПУСК:
    python scripts/search_incidents.py "dns outage" --top_k 5
    python scripts/search_incidents.py "dns outage" --category outage --tag dns
    python scripts/search_incidents.py "bgp leak at a cdn" --use_provider --api_key sk-...
    python scripts/search_incidents.py "dns outage" --output results/dns.json
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Добавляем корень проекта в PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.catalog import build_catalog, hydrate_results
from src.config import get_config
from src.search import (
    NoEmbeddingAvailable,
    SearchError,
    SearchFilters,
    build_search_service,
    results_to_dataframe,
)
from src.utils import get_logger, save_json

# Инициализация
logger = get_logger(__name__)
config = get_config()


async def run_search(args: argparse.Namespace) -> int:
    """
    Выполняет поиск и печатает результаты.

    Returns:
        int: Код выхода (0 - успех, 1 - ошибка, 2 - нет вектора для запроса)
    """
    service = build_search_service(config)

    filters = None
    if args.category or args.severity or args.tag:
        filters = SearchFilters(
            category=args.category, severity=args.severity, tags=args.tag or []
        )

    try:
        results = await service.search(
            args.query,
            top_k=args.top_k,
            filters=filters,
            hybrid_only=False if args.use_provider else None,
            api_key=args.api_key,
        )
    except NoEmbeddingAvailable as e:
        logger.warning(str(e))
        return 2
    except SearchError as e:
        logger.error(f"Search failed: {e}")
        return 1

    if not results:
        logger.info("No matches found for this query in the current index.")
        return 0

    df = results_to_dataframe(results)
    print(df.to_string(index=False))

    if args.output:
        payload = [
            {"id": r.id, "category": r.category, "severity": r.severity,
             "tags": sorted(r.tags), "similarity_score": r.similarity_score}
            for r in results
        ]

        if args.hydrate:
            catalog = build_catalog(config)
            try:
                incidents = await catalog.load_failures()
            except SearchError as e:
                logger.error(f"Search failed: {e}")
                return 1

            by_id = {h.result.id: h.incident for h in hydrate_results(results, incidents)}
            for item in payload:
                incident = by_id.get(item["id"])
                item["incident"] = incident.model_dump() if incident else None

        save_json(payload, args.output)
        logger.info(f"Saved {len(payload)} results to {args.output}")

    return 0


def main():
    """Main функция для CLI."""
    parser = argparse.ArgumentParser(
        description="Search documented tech failures similar to a query"
    )

    parser.add_argument("query", type=str, help="Search query text")

    parser.add_argument(
        "--top_k",
        type=int,
        default=config.TOP_K_DEFAULT,
        help=f"Max number of results (default: {config.TOP_K_DEFAULT})"
    )

    parser.add_argument("--category", type=str, default=None, help="Exact category filter")
    parser.add_argument("--severity", type=str, default=None, help="Exact severity filter")

    parser.add_argument(
        "--tag",
        action="append",
        default=None,
        help="Required tag (repeatable, all must match)"
    )

    parser.add_argument(
        "--use_provider",
        action="store_true",
        help="Allow the embedding provider for terms missing from the hybrid lookup"
    )

    parser.add_argument("--api_key", type=str, default=None, help="Embedding provider API key")

    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Save results to a JSON file"
    )

    parser.add_argument(
        "--hydrate",
        action="store_true",
        help="Attach full catalog records to the saved results"
    )

    args = parser.parse_args()

    sys.exit(asyncio.run(run_search(args)))


if __name__ == "__main__":
    main()
