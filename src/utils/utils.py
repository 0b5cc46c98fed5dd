"""
src/utils.py

ЧТО: Общие утилиты для всего проекта
ЗАЧЕМ: Избегать дублирования кода (DRY principle)

СОДЕРЖИТ:
- setup_logging() - настройка логирования для модуля
- get_logger() - получение logger объекта
- load_json() - загрузка JSON файла
- save_json() - сохранение в JSON
- timer() - декоратор для измерения времени выполнения (sync и async)

ИСПОЛЬЗОВАНИЕ:
    from src.utils import get_logger, timer

    logger = get_logger(__name__)

    @timer
    async def load_something():
        logger.info("Doing something...")
"""

import inspect
import json
import logging
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Callable

from src.config import get_config


# =============================================================================
# LOGGING UTILITIES
# =============================================================================

def setup_logging(
    name: str = "tech_failures_search",
    log_file: str | None = None,
) -> logging.Logger:
    """
    Настраивает логирование для модуля.

    ЧТО ДЕЛАЕТ:
    - Создаёт logger с заданным именем
    - Настраивает формат вывода
    - Логи идут в консоль и (опционально) в файл
    - Уровень логирования берётся из config

    Args:
        name: Имя logger'а (обычно __name__ модуля)
        log_file: Имя файла в LOGS_DIR для сохранения логов (опционально)

    Returns:
        logging.Logger: Настроенный logger
    """
    config = get_config()

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, config.LOG_LEVEL))

    # Если уже есть обработчики, не добавляем новые
    if logger.handlers:
        return logger

    # Пример: 2024-01-26 10:30:45 - INFO - src.search.store - Loading embeddings...
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_path = config.LOGS_DIR / log_file
        file_handler = logging.FileHandler(file_path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Удобная функция для получения logger'а.

    ЗАЧЕМ: Чтобы в каждом модуле просто писать:
        from src.utils import get_logger
        logger = get_logger(__name__)
    """
    return setup_logging(name)


# =============================================================================
# FILE I/O UTILITIES
# =============================================================================

def load_json(filepath: str | Path) -> dict | list:
    """
    Загружает данные из JSON файла.

    Args:
        filepath: Путь к JSON файлу

    Returns:
        dict | list: Загруженные данные

    Raises:
        FileNotFoundError: Если файл не найден
        json.JSONDecodeError: Если файл не валидный JSON
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        return json.load(f)


def save_json(
    data: dict | list,
    filepath: str | Path,
    indent: int = 2,
    ensure_ascii: bool = False,
) -> None:
    """
    Сохраняет данные в JSON файл.

    Args:
        data: Данные для сохранения (dict или list)
        filepath: Путь к файлу для сохранения
        indent: Отступы для красивого форматирования (default: 2)
        ensure_ascii: Если False, сохраняет UTF-8 символы как есть
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii)


# =============================================================================
# PERFORMANCE UTILITIES
# =============================================================================

def timer(func: Callable) -> Callable:
    """
    Декоратор для измерения времени выполнения функции.

    Работает и с обычными функциями, и с корутинами (async def).

    Usage:
        @timer
        async def load_embeddings():
            ...

        await load_embeddings()  # Выведет: Finished 'load_embeddings' in 0.35 seconds
    """
    if inspect.iscoroutinefunction(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            logger = get_logger(func.__module__)
            start_time = time.time()
            logger.debug(f"Starting '{func.__name__}'...")

            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                elapsed_time = time.time() - start_time
                logger.error(
                    f"Error in '{func.__name__}' after {elapsed_time:.2f} seconds: {e}"
                )
                raise

            elapsed_time = time.time() - start_time
            logger.info(f"Finished '{func.__name__}' in {elapsed_time:.2f} seconds")
            return result

        return async_wrapper

    @wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start_time = time.time()
        logger.debug(f"Starting '{func.__name__}'...")

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            elapsed_time = time.time() - start_time
            logger.error(
                f"Error in '{func.__name__}' after {elapsed_time:.2f} seconds: {e}"
            )
            raise

        elapsed_time = time.time() - start_time
        logger.info(f"Finished '{func.__name__}' in {elapsed_time:.2f} seconds")
        return result

    return wrapper
