from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from foundersync.datasets.spec import DatasetSpec
from foundersync.domain.exceptions import SourceFileUnreadableError
from foundersync.domain.models import DiagnosticStage
from foundersync.infra.artifacts.records_file import writeRecordsJson
from foundersync.infra.logging.setup import logEvent
from foundersync.infra.sources.csv_source import CsvTextSource

HEADER_PREVIEW_FIELDS = 10


@dataclass
class ParseSourceResult:
    """
    Назначение:
        Итог разбора одного источника для вывода в консоль и отчёт.
    """

    dataset: str
    csv_path: str
    ok: bool
    records_path: str | None = None
    rows_total: int = 0
    records: int = 0
    skipped: int = 0
    warnings: int = 0
    error: str | None = None


class ParseUseCase:
    """
    Назначение/ответственность:
        Use-case разбора выгрузок: файл -> tokenize -> normalize -> JSON-артефакт.
    Ограничения:
        - Источники независимы: нечитаемый файл фиксируется как сбой своего источника,
          остальные продолжают работу.
    """

    def __init__(self, out_dir: str, column_overrides: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self.out_dir = out_dir
        self.column_overrides = column_overrides or {}

    def run(
        self,
        sources: Sequence[tuple[DatasetSpec, str]],
        logger: logging.Logger,
        run_id: str,
        report,
    ) -> list[ParseSourceResult]:
        results: list[ParseSourceResult] = []
        for spec, csv_path in sources:
            results.append(self._run_source(spec, csv_path, logger, run_id, report))
        report.set_context(
            "datasets",
            {
                result.dataset: {
                    "csv_path": result.csv_path,
                    "ok": result.ok,
                    "records_path": result.records_path,
                    "rows_total": result.rows_total,
                    "records": result.records,
                    "skipped": result.skipped,
                    "warnings": result.warnings,
                }
                for result in results
            },
        )
        return results

    def _run_source(
        self,
        spec: DatasetSpec,
        csv_path: str,
        logger: logging.Logger,
        run_id: str,
        report,
    ) -> ParseSourceResult:
        dataset = spec.dataset
        try:
            rows = CsvTextSource(csv_path).read_rows()
        except SourceFileUnreadableError as exc:
            logEvent(logger, logging.ERROR, run_id, dataset, exc.summary())
            report.add_failure(dataset, DiagnosticStage.EXTRACT, exc.code, exc.message)
            return ParseSourceResult(dataset=dataset, csv_path=csv_path, ok=False, error=exc.message)

        if rows:
            preview = ", ".join(rows[0][:HEADER_PREVIEW_FIELDS])
            logEvent(logger, logging.INFO, run_id, dataset, f"Header: {preview}")

        normalizer = spec.build_normalizer(self.column_overrides.get(dataset))
        result = normalizer.normalize(rows)
        report.add_normalize_result(result)
        for code, count in sorted(result.skipped_by_code().items()):
            logEvent(logger, logging.INFO, run_id, dataset, f"Skipped {count} rows: {code}")
        for item in result.warnings:
            logEvent(
                logger,
                logging.DEBUG,
                run_id,
                dataset,
                f"Row {item.row_ref.row_no}: {item.diagnostic.code} {item.diagnostic.message}",
            )

        records_path = writeRecordsJson(result.records, self.out_dir, spec.output_file)
        logEvent(
            logger,
            logging.INFO,
            run_id,
            dataset,
            f"Parsed {len(result.records)} of {result.rows_total} rows -> {records_path}",
        )
        return ParseSourceResult(
            dataset=dataset,
            csv_path=csv_path,
            ok=True,
            records_path=records_path,
            rows_total=result.rows_total,
            records=len(result.records),
            skipped=len(result.skipped),
            warnings=len(result.warnings),
        )
