from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from foundersync.datasets.spec import DatasetSpec
from foundersync.domain.error_codes import ErrorCode
from foundersync.domain.models import DiagnosticStage
from foundersync.domain.ports.bulk_loader import BatchFailure, BulkLoaderProtocol
from foundersync.errors import AppError
from foundersync.infra.artifacts.records_file import readRecordsJson
from foundersync.infra.logging.setup import logEvent


@dataclass
class ImportTableResult:
    """
    Назначение:
        Итог загрузки одного датасета в таблицу.
    """

    dataset: str
    table: str
    ok: bool
    total: int = 0
    inserted: int = 0
    cleared: bool | None = None
    remote_count: int | None = None
    failures: list[BatchFailure] = field(default_factory=list)
    error: str | None = None


class ImportUseCase:
    """
    Назначение/ответственность:
        Use-case загрузки JSON-артефактов в удалённые таблицы:
        clear -> insert_batch -> count для каждого датасета.
    Ограничения:
        - Датасеты независимы: отсутствующий файл или упавшие батчи не прерывают остальные.
    """

    def __init__(
        self,
        loader: BulkLoaderProtocol,
        out_dir: str,
        batch_size: int,
        clear_first: bool = True,
    ) -> None:
        self.loader = loader
        self.out_dir = out_dir
        self.batch_size = batch_size
        self.clear_first = clear_first

    def run(
        self,
        specs: Sequence[DatasetSpec],
        logger: logging.Logger,
        run_id: str,
        report,
    ) -> list[ImportTableResult]:
        results = [self._import_one(spec, logger, run_id, report) for spec in specs]
        report.set_context(
            "tables",
            {
                result.table: {
                    "ok": result.ok,
                    "total": result.total,
                    "inserted": result.inserted,
                    "cleared": result.cleared,
                    "remote_count": result.remote_count,
                    "failed_batches": [failure.batch_index for failure in result.failures],
                }
                for result in results
            },
        )
        return results

    def _import_one(self, spec: DatasetSpec, logger: logging.Logger, run_id: str, report) -> ImportTableResult:
        table = spec.table_name
        records_path = str(Path(self.out_dir) / spec.output_file)
        try:
            records = readRecordsJson(records_path)
        except FileNotFoundError:
            message = f"File not found: {records_path}. Run parse first."
            logEvent(logger, logging.ERROR, run_id, table, message)
            report.add_failure(spec.dataset, DiagnosticStage.LOAD, ErrorCode.RECORDS_FILE_MISSING.value, message)
            return ImportTableResult(dataset=spec.dataset, table=table, ok=False, error=message)
        except OSError as exc:
            message = f"Records file is not readable: {records_path} ({exc})"
            logEvent(logger, logging.ERROR, run_id, table, message)
            report.add_failure(spec.dataset, DiagnosticStage.LOAD, ErrorCode.SOURCE_FILE_UNREADABLE.value, message)
            return ImportTableResult(dataset=spec.dataset, table=table, ok=False, error=message)
        except ValueError as exc:
            logEvent(logger, logging.ERROR, run_id, table, str(exc))
            report.add_failure(spec.dataset, DiagnosticStage.LOAD, ErrorCode.INVALID_JSON.value, str(exc))
            return ImportTableResult(dataset=spec.dataset, table=table, ok=False, error=str(exc))

        result = ImportTableResult(dataset=spec.dataset, table=table, ok=True, total=len(records))

        if self.clear_first:
            result.cleared = self.loader.clear(table)
            report.add_op("clear", ok=int(result.cleared), failed=int(not result.cleared), count=1)
            if result.cleared:
                logEvent(logger, logging.INFO, run_id, table, "Cleared existing rows")
            else:
                logEvent(logger, logging.WARNING, run_id, table, "Clear failed, table may be missing or empty")

        logEvent(logger, logging.INFO, run_id, table, f"Importing {len(records)} records")
        summary = self.loader.insert_batch(table, records, self.batch_size)
        result.inserted = summary.inserted
        result.failures = list(summary.failures)
        result.ok = summary.ok
        report.add_op(
            "insert_batch",
            ok=summary.batches - len(summary.failures),
            failed=len(summary.failures),
            count=summary.batches,
        )
        for failure in summary.failures:
            logEvent(
                logger,
                logging.ERROR,
                run_id,
                table,
                f"Batch {failure.batch_index} (offset {failure.offset}, {failure.size} records) failed: {failure.message}",
            )
        logEvent(logger, logging.INFO, run_id, table, f"Imported {summary.inserted}/{summary.total} records")

        try:
            result.remote_count = self.loader.count(table)
            logEvent(logger, logging.INFO, run_id, table, f"Verified: {table} has {result.remote_count} records")
        except AppError as exc:
            logEvent(logger, logging.WARNING, run_id, table, f"Could not verify {table}: {exc.summary()}")
        return result
