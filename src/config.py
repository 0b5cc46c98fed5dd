"""
src/config.py

ЧТО: Центральная конфигурация проекта Tech Failures Search
ЗАЧЕМ: Все настройки в одном месте, легко менять без изменения кода

АРХИТЕКТУРА:
- Config класс читает .env файл через pydantic-settings
- Автоматически определяет пути относительно корня проекта
- Предоставляет type-safe доступ к настройкам

ИСПОЛЬЗОВАНИЕ:
    from src.config import get_config

    config = get_config()
    print(config.API_BASE_URL)  # Откуда грузим embeddings.json и т.д.
    print(config.LOGS_DIR)  # pathlib.Path объект
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """
    Конфигурация Tech Failures Search.

    Автоматически загружает переменные из .env файла.
    Если переменной нет в .env, использует значение по умолчанию.
    """

    # =========================================================================
    # ПУТИ К ДИРЕКТОРИЯМ
    # =========================================================================

    # Корень проекта (родитель папки src/)
    PROJECT_ROOT: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent.resolve()
    )

    # Папка с логами
    LOGS_DIR: Path = Field(
        default_factory=lambda: Path(__file__).parent.parent / "logs"
    )

    # =========================================================================
    # СТАТИЧЕСКИЕ ДАННЫЕ (каталог + эмбеддинги)
    # =========================================================================
    API_BASE_URL: str = Field(
        default="https://rnzor.github.io/awesome-tech-failures/api/v1",
        description="Базовый URL (или локальная папка) со статическими JSON"
    )

    EMBEDDINGS_FILE: str = Field(
        default="embeddings.json",
        description="Файл с векторами инцидентов"
    )

    HYBRID_LOOKUP_FILE: str = Field(
        default="hybrid_lookup.json",
        description="Файл с предрассчитанными векторами частых запросов"
    )

    FAILURES_FILE: str = Field(
        default="failures.json",
        description="Файл с полными записями инцидентов"
    )

    PATTERNS_FILE: str = Field(default="patterns.json")

    TAGS_FILE: str = Field(default="tags.json")

    # =========================================================================
    # EMBEDDING PROVIDER (опциональный fallback для произвольных запросов)
    # =========================================================================
    EMBEDDING_PROVIDER_URL: str = Field(
        default="https://api.openai.com/v1/embeddings",
        description="OpenAI-совместимый endpoint для эмбеддингов"
    )

    EMBEDDING_MODEL: str = Field(
        default="text-embedding-3-small",
        description="Модель, которой построены векторы в embeddings.json"
    )

    HTTP_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Таймаут HTTP запросов (httpx)"
    )

    # =========================================================================
    # SEARCH SETTINGS
    # =========================================================================
    TOP_K_DEFAULT: int = Field(
        default=5,
        description="Сколько похожих инцидентов возвращать по умолчанию"
    )

    USE_HYBRID_ONLY_DEFAULT: bool = Field(
        default=True,
        description="По умолчанию не ходить во внешний provider"
    )

    CATALOG_MAX_RETRIES: int = Field(
        default=3,
        description="Сколько раз пытаться загрузить failures.json"
    )

    # =========================================================================
    # LOGGING (логирование)
    # =========================================================================
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Уровень логирования"
    )

    # =========================================================================
    # API SETTINGS (FastAPI)
    # =========================================================================
    API_HOST: str = Field(
        default="0.0.0.0",
        description="Хост для FastAPI"
    )

    API_PORT: int = Field(
        default=8000,
        description="Порт для FastAPI"
    )

    API_RELOAD: bool = Field(
        default=True,
        description="Auto-reload для разработки"
    )

    # =========================================================================
    # PYDANTIC SETTINGS CONFIG
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        """
        Инициализация конфигурации.
        Создаёт папку для логов, если её нет.
        """
        super().__init__(**kwargs)

        self.LOGS_DIR.mkdir(parents=True, exist_ok=True)


# =============================================================================
# SINGLETON PATTERN - один экземпляр Config на всё приложение
# =============================================================================

_config_instance: Config | None = None


def get_config() -> Config:
    """
    Возвращает singleton экземпляр конфигурации.

    Returns:
        Config: Экземпляр конфигурации

    Usage:
        from src.config import get_config
        config = get_config()
    """
    global _config_instance

    if _config_instance is None:
        _config_instance = Config()

    return _config_instance


def reset_config() -> None:
    """
    Сбрасывает singleton конфигурации.
    Полезно для тестов.
    """
    global _config_instance
    _config_instance = None
