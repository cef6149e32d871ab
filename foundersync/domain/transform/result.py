from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from foundersync.domain.models import Diagnostic, RowDiagnostic, RowRef

T = TypeVar("T")


@dataclass
class RowOutcome(Generic[T]):
    """
    Назначение:
        Результат нормализации одной строки: запись либо причина пропуска.
    """

    row_ref: RowRef
    row: T | None
    skipped: Diagnostic | None = None
    warnings: list[Diagnostic] = field(default_factory=list)


@dataclass
class NormalizeResult(Generic[T]):
    """
    Назначение:
        Итог нормализации файла: отсортированные записи и диагностика по строкам.
    """

    dataset: str
    rows_total: int = 0
    rows: list[T] = field(default_factory=list)
    records: list[dict[str, Any]] = field(default_factory=list)
    skipped: list[RowDiagnostic] = field(default_factory=list)
    warnings: list[RowDiagnostic] = field(default_factory=list)

    @property
    def rows_kept(self) -> int:
        return len(self.rows)

    def skipped_by_code(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for item in self.skipped:
            counts[item.diagnostic.code] = counts.get(item.diagnostic.code, 0) + 1
        return counts
