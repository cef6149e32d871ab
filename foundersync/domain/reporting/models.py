from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ReportMeta:
    """
    Назначение:
        Метаданные запуска команды.
    """

    run_id: str
    command: str
    started_at: str
    finished_at: str | None = None
    duration_ms: int | None = None
    items_limit: int | None = None
    items_truncated: bool = False
    retries_used: int | None = None


@dataclass
class ReportSummary:
    """
    Назначение:
        Счётчики выполнения по всем источникам команды.
    """

    rows_total: int = 0
    rows_passed: int = 0
    rows_skipped: int = 0
    warnings_total: int = 0
    failures_total: int = 0
    by_code: dict[str, int] = field(default_factory=dict)
    ops: dict[str, dict[str, int]] = field(default_factory=dict)


@dataclass
class ReportItem:
    """
    Назначение:
        Единица отчёта: пропущенная/деградировавшая строка или сбой источника.
    """

    status: str
    dataset: str
    row_no: int | None
    severity: str
    stage: str
    code: str
    field: str | None
    message: str


@dataclass
class ReportEnvelope:
    """
    Назначение:
        Корневой объект отчёта.
    """

    status: str
    meta: ReportMeta
    summary: ReportSummary
    items: list[ReportItem]
    context: dict[str, Any] = field(default_factory=dict)
