from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

DEFAULT_BATCH_SIZE = 50


@dataclass(frozen=True)
class BatchFailure:
    """
    Назначение:
        Ошибка вставки одного батча.
    Поля:
        batch_index: порядковый номер батча (с 0).
        offset: индекс первой записи батча во входной последовательности.
        size: число записей в батче.
    """

    batch_index: int
    offset: int
    size: int
    message: str


@dataclass
class InsertSummary:
    """
    Назначение:
        Итог пакетной вставки: сколько записей принято и какие батчи упали.
    """

    table: str
    total: int
    inserted: int = 0
    batches: int = 0
    failures: list[BatchFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class BulkLoaderProtocol(Protocol):
    """
    Назначение/ответственность:
        Порт внешнего загрузчика: очистка, пакетная вставка и подсчёт записей таблицы.
    Ограничения:
        - Порядок батчей совпадает с порядком записей.
        - Ошибки фиксируются по батчам, не по записям; упавший батч не прерывает следующие.
    """

    def clear(self, table: str) -> bool:
        """
        Контракт:
            True, если таблица очищена; False, если удаление не удалось (не фатально).
        """
        ...

    def insert_batch(
        self,
        table: str,
        records: Sequence[dict[str, Any]],
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> InsertSummary: ...

    def count(self, table: str) -> int:
        """
        Ошибки/исключения:
            Реализации бросают AppError, если количество недоступно.
        """
        ...
