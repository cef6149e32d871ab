from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SourceKind(str, Enum):
    """
    Назначение:
        Тип выгрузки: определяет маппинг колонок, фильтры и целевую таблицу.
    """

    GREEK_FOUNDERS = "greek_founders"
    HARMONIC_FOUNDERS = "harmonic_founders"
    EGG_ACCELERATOR = "egg_accelerator"

    @classmethod
    def parse(cls, value: str) -> "SourceKind":
        normalized = (value or "").strip().lower().replace("-", "_")
        for kind in cls:
            if kind.value == normalized or kind.name.lower() == normalized:
                return kind
        raise ValueError(f"Unsupported source: {value}")


class DiagnosticStage(str, Enum):
    """
    Назначение:
        Источник диагностического события в пайплайне.
    """

    EXTRACT = "EXTRACT"
    NORMALIZE = "NORMALIZE"
    FILTER = "FILTER"
    LOAD = "LOAD"


@dataclass
class Diagnostic:
    """
    Назначение:
        Диагностическое сообщение пайплайна (пропуск строки или деградация поля).
    """
    stage: DiagnosticStage
    code: str
    field: str | None
    message: str


@dataclass(frozen=True)
class RowRef:
    """
    Назначение:
        Ссылка на строку данных входного файла (1-based, без заголовка).
    """
    row_no: int


@dataclass(frozen=True)
class RowDiagnostic:
    row_ref: RowRef
    diagnostic: Diagnostic
