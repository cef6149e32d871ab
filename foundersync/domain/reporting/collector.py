from __future__ import annotations

from dataclasses import asdict
from typing import Any

from foundersync.common.time import getNowIso
from foundersync.domain.models import DiagnosticStage, RowDiagnostic
from foundersync.domain.reporting.models import ReportEnvelope, ReportItem, ReportMeta, ReportSummary
from foundersync.domain.transform.result import NormalizeResult


class ReportCollector:
    """
    Назначение/ответственность:
        Единый сборщик отчётов для команд parse/import/count.
    """

    def __init__(self, run_id: str, command: str, started_at: str | None = None) -> None:
        self.meta = ReportMeta(
            run_id=run_id,
            command=command,
            started_at=started_at or getNowIso(),
        )
        self.summary = ReportSummary()
        self.items: list[ReportItem] = []
        self.context: dict[str, Any] = {}
        self.status: str | None = None

    def set_context(self, name: str, value: dict[str, Any]) -> None:
        self.context[name] = value

    def add_op(self, name: str, *, ok: int = 0, failed: int = 0, count: int = 0) -> None:
        entry = self.summary.ops.setdefault(name, {"ok": 0, "failed": 0, "count": 0})
        entry["ok"] += ok
        entry["failed"] += failed
        entry["count"] += count

    def add_normalize_result(self, result: NormalizeResult[Any]) -> None:
        self.summary.rows_total += result.rows_total
        self.summary.rows_passed += result.rows_kept
        self.summary.rows_skipped += len(result.skipped)
        self.summary.warnings_total += len(result.warnings)
        for item in result.skipped:
            self._add_row_item(result.dataset, "SKIPPED", "info", item)
        for item in result.warnings:
            self._add_row_item(result.dataset, "OK", "warning", item)

    def add_failure(self, dataset: str, stage: DiagnosticStage, code: str, message: str) -> None:
        self.summary.failures_total += 1
        self._count_code(code)
        self._store(
            ReportItem(
                status="FAILED",
                dataset=dataset,
                row_no=None,
                severity="error",
                stage=stage.value,
                code=code,
                field=None,
                message=message,
            )
        )

    def finish(self, finished_at: str | None = None, duration_ms: int | None = None) -> None:
        self.meta.finished_at = finished_at or getNowIso()
        self.meta.duration_ms = duration_ms
        if self.status is None:
            self.status = self._derive_status()

    def build(self) -> ReportEnvelope:
        return ReportEnvelope(
            status=self.status or self._derive_status(),
            meta=self.meta,
            summary=self.summary,
            items=self.items,
            context=self.context,
        )

    def _add_row_item(self, dataset: str, status: str, severity: str, item: RowDiagnostic) -> None:
        diagnostic = item.diagnostic
        self._count_code(diagnostic.code)
        self._store(
            ReportItem(
                status=status,
                dataset=dataset,
                row_no=item.row_ref.row_no,
                severity=severity,
                stage=diagnostic.stage.value,
                code=diagnostic.code,
                field=diagnostic.field,
                message=diagnostic.message,
            )
        )

    def _store(self, item: ReportItem) -> None:
        limit = self.meta.items_limit
        if limit is not None and len(self.items) >= limit:
            self.meta.items_truncated = True
            return
        self.items.append(item)

    def _count_code(self, code: str) -> None:
        self.summary.by_code[code] = self.summary.by_code.get(code, 0) + 1

    def _derive_status(self) -> str:
        failed_ops = sum(entry["failed"] for entry in self.summary.ops.values())
        if self.summary.failures_total == 0 and failed_ops == 0:
            return "SUCCESS"
        ok_ops = sum(entry["ok"] for entry in self.summary.ops.values())
        if self.summary.rows_passed > 0 or ok_ops > 0:
            return "PARTIAL"
        return "FAILED"


def asdict_report(envelope: ReportEnvelope) -> dict[str, Any]:
    return {
        "status": envelope.status,
        "meta": asdict(envelope.meta),
        "summary": asdict(envelope.summary),
        "items": [asdict(item) for item in envelope.items],
        "context": envelope.context,
    }
