"""
src/search/errors.py

ЧТО: Иерархия исключений поиска похожих инцидентов
ЗАЧЕМ: Вызывающий код (API, CLI) различает три ситуации и реагирует по-разному:
    - LoadError             -> статические данные недоступны (503)
    - NoEmbeddingAvailable  -> нормальная ситуация, показать подсказку (422)
    - ProviderRequestError  -> внешний provider отказал (502)
"""

from typing import Optional


class SearchError(Exception):
    """Базовое исключение для всех ошибок поиска."""


class LoadError(SearchError):
    """
    Не удалось загрузить или распарсить статический JSON.

    Attributes:
        source: Имя/URL источника (например, embeddings.json)
        status_code: HTTP статус, если ответ был получен
    """

    def __init__(self, source: str, reason: str, status_code: Optional[int] = None):
        self.source = source
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Failed to load {source}: {reason}")


class NoEmbeddingAvailable(SearchError):
    """
    У запроса нет предрассчитанного вектора, а provider не разрешён или нет ключа.

    Это ожидаемая ситуация, а не сбой системы.
    """

    GUIDANCE = (
        "Term not in hybrid lookup. Enable provider fallback and supply "
        "an embedding API key for custom queries."
    )

    def __init__(self, query: str):
        self.query = query
        super().__init__(f"NO_EMBEDDING_AVAILABLE: '{query}'. {self.GUIDANCE}")


class ProviderRequestError(SearchError):
    """
    Внешний embedding provider вернул ошибку или некорректный ответ.

    Attributes:
        detail: Сообщение от provider'а (error.message), если есть
        status_code: HTTP статус ответа provider'а, если есть
    """

    def __init__(self, detail: str, status_code: Optional[int] = None):
        self.detail = detail
        self.status_code = status_code
        if status_code is not None:
            super().__init__(f"Embedding API failed ({status_code}): {detail}")
        else:
            super().__init__(f"Embedding API failed: {detail}")
