from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

import httpx
import typer

from foundersync.common.run_id import generate_run_id
from foundersync.common.sanitize import maskSecret
from foundersync.common.time import getDurationMs
from foundersync.config import Settings, loadSettings
from foundersync.datasets.registry import get_spec, list_specs
from foundersync.datasets.spec import DatasetSpec
from foundersync.domain.exceptions import SourceFileUnreadableError
from foundersync.domain.models import DiagnosticStage
from foundersync.domain.transform.tokenizer import serialize_rows
from foundersync.errors import AppError
from foundersync.infra.artifacts.report_writer import createEmptyReport, finalizeReport, writeReportJson
from foundersync.infra.http.rest_client import RestApiClient
from foundersync.infra.logging.setup import (
    StdStreamToLogger,
    TeeStream,
    closeCommandLogger,
    createCommandLogger,
    logEvent,
    mapLogLevel,
)
from foundersync.infra.sources.csv_source import CsvTextSource
from foundersync.infra.target.rest_bulk_loader import RestBulkLoader
from foundersync.usecases.import_usecase import ImportUseCase
from foundersync.usecases.parse_usecase import ParseUseCase

app = typer.Typer(no_args_is_help=True, add_completion=False)


def ensureDir(path: str) -> None:
    """
    Назначение:
        Создаёт каталог, если он отсутствует.
    """
    Path(path).mkdir(parents=True, exist_ok=True)


def requireApi(settings: Settings) -> None:
    """
    Назначение:
        Проверяет наличие параметров REST API для import/count.

    Поведение:
        - Если чего-то не хватает, exit code 2.
    """
    missing = []
    if not settings.api_url:
        missing.append("api_url")
    if not settings.api_key:
        missing.append("api_key")

    if missing:
        typer.echo(f"ERROR: missing API settings: {', '.join(missing)}", err=True)
        raise typer.Exit(code=2)


def resolveSpecs(sourceNames: list[str] | None) -> list[DatasetSpec]:
    """
    Назначение:
        Переводит значения --source в DatasetSpec; без --source возвращает все источники.

    Поведение:
        - Неизвестный источник: exit code 2.
    """
    if not sourceNames:
        return list_specs()
    specs: list[DatasetSpec] = []
    for name in sourceNames:
        try:
            spec = get_spec(name)
        except ValueError as exc:
            typer.echo(f"ERROR: {exc}", err=True)
            raise typer.Exit(code=2)
        if spec not in specs:
            specs.append(spec)
    return specs


def buildBulkLoader(settings: Settings, transport: httpx.BaseTransport | None = None) -> RestBulkLoader:
    client = RestApiClient(
        baseUrl=settings.api_url or "",
        apiKey=settings.api_key or "",
        timeoutSeconds=settings.timeout_seconds,
        retries=settings.retries,
        retryBackoffSeconds=settings.retry_backoff_seconds,
        transport=transport,
    )
    return RestBulkLoader(client)


def printRunHeader(runId: str, command: str, settings: Settings, sources: list[str]) -> None:
    """
    Назначение:
        Печатает безопасную сводку параметров запуска (ключ API маскируется).
    """
    typer.echo(
        f"run_id={runId} command={command} "
        f"api_url={settings.api_url} api_key={maskSecret(settings.api_key)} "
        f"out_dir={settings.out_dir} sources={sources} log_level={settings.log_level}"
    )


def runWithReport(
    ctx: typer.Context,
    commandName: str,
    requiresApiAccess: bool,
    runner,
) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - создаёт логгер + файл лога
        - создаёт report.json skeleton
        - проверяет настройки API (если нужны)
        - дублирует stdout/stderr в лог (tee)
        - гарантирует запись отчёта в finally
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    sources = ctx.obj["sources"]

    startMonotonic = time.monotonic()

    logger, logFilePath = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )

    report = createEmptyReport(
        runId=runId,
        command=commandName,
        configSources=sources,
        itemsLimit=settings.report_items_limit,
    )

    originalStdout = sys.stdout
    originalStderr = sys.stderr

    sys.stdout = TeeStream(originalStdout, StdStreamToLogger(logger, logging.INFO, runId, "stdout"))
    sys.stderr = TeeStream(originalStderr, StdStreamToLogger(logger, logging.ERROR, runId, "stderr"))

    exitCode: int | None = None

    try:
        logEvent(logger, logging.INFO, runId, "core", "Command started")
        printRunHeader(runId, commandName, settings, sources)

        if requiresApiAccess:
            try:
                requireApi(settings)
            except typer.Exit:
                logEvent(logger, logging.ERROR, runId, "config", "Missing API settings")
                exitCode = 2
                return

        exitCode = runner(logger, report)

    finally:
        durationMs = getDurationMs(startMonotonic, time.monotonic())
        finalizeReport(
            report=report,
            durationMs=durationMs,
            logFile=logFilePath,
            outDir=settings.out_dir,
            reportDir=settings.report_dir,
        )
        reportPath = writeReportJson(report, settings.report_dir, f"report_{commandName}_{runId}")
        logEvent(logger, logging.INFO, runId, "report", f"Report written: {reportPath}")

        sys.stdout.flush()
        sys.stderr.flush()
        sys.stdout = originalStdout
        sys.stderr = originalStderr
        closeCommandLogger(logger)

        if exitCode:
            raise typer.Exit(code=exitCode)


def runParseCommand(
    ctx: typer.Context,
    sourceNames: list[str] | None,
    csvOverrides: dict[str, str | None],
) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]
    explicit = bool(sourceNames)
    specs = resolveSpecs(sourceNames)

    def execute(logger, report) -> int:
        selected: list[tuple[DatasetSpec, str]] = []
        for spec in specs:
            csvPath = csvOverrides.get(spec.csv_setting) or getattr(settings, spec.csv_setting)
            if csvPath:
                selected.append((spec, csvPath))
            elif explicit:
                typer.echo(f"ERROR: no CSV configured for {spec.dataset} (--{spec.csv_setting.replace('_', '-')})", err=True)
                return 2

        if not selected:
            typer.echo("ERROR: no source CSV configured (use --greek-csv/--harmonic-csv/--egg-csv or config)", err=True)
            return 2

        usecase = ParseUseCase(out_dir=settings.out_dir, column_overrides=settings.columns)
        results = usecase.run(sources=selected, logger=logger, run_id=runId, report=report)

        failed = 0
        for result in results:
            if result.ok:
                typer.echo(
                    f"{result.dataset}: {result.records} records "
                    f"({result.rows_total} rows, {result.skipped} skipped) -> {result.records_path}"
                )
            else:
                failed += 1
                typer.echo(f"ERROR: {result.dataset}: {result.error}", err=True)
        return 1 if failed else 0

    runWithReport(ctx=ctx, commandName="parse", requiresApiAccess=False, runner=execute)


def runImportCommand(
    ctx: typer.Context,
    sourceNames: list[str] | None,
    clearFirst: bool,
    apiTransport: httpx.BaseTransport | None = None,
) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]
    specs = resolveSpecs(sourceNames)
    if settings.batch_size < 1:
        typer.echo("ERROR: --batch-size must be >= 1", err=True)
        raise typer.Exit(code=2)

    def execute(logger, report) -> int:
        loader = buildBulkLoader(settings, transport=apiTransport)
        usecase = ImportUseCase(
            loader=loader,
            out_dir=settings.out_dir,
            batch_size=settings.batch_size,
            clear_first=clearFirst,
        )
        try:
            results = usecase.run(specs, logger=logger, run_id=runId, report=report)
        finally:
            report.meta.retries_used = loader.client.getRetryAttempts()
            loader.close()

        failed = 0
        for result in results:
            if result.error:
                failed += 1
                typer.echo(f"ERROR: {result.table}: {result.error}", err=True)
                continue
            verified = result.remote_count if result.remote_count is not None else "?"
            typer.echo(f"{result.table}: imported {result.inserted}/{result.total}, remote count {verified}")
            if result.failures:
                failed += 1
                for failure in result.failures:
                    typer.echo(f"  batch {failure.batch_index} failed: {failure.message}", err=True)
        return 1 if failed else 0

    runWithReport(ctx=ctx, commandName="import", requiresApiAccess=True, runner=execute)


def runCountCommand(
    ctx: typer.Context,
    sourceNames: list[str] | None,
    apiTransport: httpx.BaseTransport | None = None,
) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]
    specs = resolveSpecs(sourceNames)

    def execute(logger, report) -> int:
        loader = buildBulkLoader(settings, transport=apiTransport)
        failed = 0
        counts: dict[str, int | None] = {}
        try:
            for spec in specs:
                try:
                    counts[spec.table_name] = loader.count(spec.table_name)
                    report.add_op("count", ok=1, count=1)
                    typer.echo(f"{spec.table_name}: {counts[spec.table_name]}")
                except AppError as exc:
                    failed += 1
                    counts[spec.table_name] = None
                    report.add_op("count", failed=1, count=1)
                    report.add_failure(spec.dataset, DiagnosticStage.LOAD, exc.code, exc.message)
                    logEvent(logger, logging.ERROR, runId, spec.table_name, f"Count failed: {exc.summary()}")
                    typer.echo(f"ERROR: {spec.table_name}: {exc.message}", err=True)
        finally:
            report.meta.retries_used = loader.client.getRetryAttempts()
            loader.close()
        report.set_context("counts", counts)
        return 1 if failed else 0

    runWithReport(ctx=ctx, commandName="count", requiresApiAccess=True, runner=execute)


def runTokenizeCommand(ctx: typer.Context, csvPath: str, outPath: str | None) -> None:
    runId = ctx.obj["runId"]

    def execute(logger, report) -> int:
        try:
            rows = CsvTextSource(csvPath).read_rows()
        except SourceFileUnreadableError as exc:
            logEvent(logger, logging.ERROR, runId, "csv", exc.summary())
            report.add_failure("tokenize", DiagnosticStage.EXTRACT, exc.code, exc.message)
            typer.echo(f"ERROR: {exc.message}", err=True)
            return 2

        text = serialize_rows(rows)
        report.set_context("tokenize", {"csv_path": csvPath, "rows": len(rows), "out": outPath})
        logEvent(logger, logging.INFO, runId, "csv", f"Tokenized {len(rows)} rows from {csvPath}")
        if outPath:
            Path(outPath).parent.mkdir(parents=True, exist_ok=True)
            Path(outPath).write_text(text, encoding="utf-8")
            typer.echo(f"{len(rows)} rows -> {outPath}")
        else:
            typer.echo(text, nl=False)
        return 0

    runWithReport(ctx=ctx, commandName="tokenize", requiresApiAccess=False, runner=execute)


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (UUID). If omitted, generated."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    reportDir: str | None = typer.Option(None, "--report-dir", help="Directory for reports."),
    outDir: str | None = typer.Option(None, "--out-dir", help="Directory for parsed JSON records."),
    apiUrl: str | None = typer.Option(None, "--api-url", help="REST API base URL"),
    apiKey: str | None = typer.Option(None, "--api-key", help="REST API key (avoid; use env/config)"),
    timeoutSeconds: float | None = typer.Option(None, "--timeout-seconds", help="API timeout in seconds"),
    retries: int | None = typer.Option(None, "--retries", help="Retry attempts for API calls"),
    retryBackoffSeconds: float | None = typer.Option(None, "--retry-backoff-seconds", help="Base backoff for retries"),
    batchSize: int | None = typer.Option(None, "--batch-size", help="Records per insert batch"),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - создаёт каталоги log/report/out
        - сохраняет всё в ctx.obj для подкоманд
    """
    if not runId:
        runId = generate_run_id()

    cliOverrides = {
        "api_url": apiUrl,
        "api_key": apiKey,
        "log_level": logLevel,
        "log_dir": logDir,
        "report_dir": reportDir,
        "out_dir": outDir,
        "timeout_seconds": timeoutSeconds,
        "retries": retries,
        "retry_backoff_seconds": retryBackoffSeconds,
        "batch_size": batchSize,
    }
    try:
        loaded = loadSettings(config_path=config, cli_overrides=cliOverrides)
        mapLogLevel(loaded.settings.log_level)
    except (ValueError, TypeError) as exc:
        typer.echo(f"ERROR: invalid settings: {exc}", err=True)
        raise typer.Exit(code=2)

    ensureDir(loaded.settings.log_dir)
    ensureDir(loaded.settings.report_dir)
    ensureDir(loaded.settings.out_dir)

    ctx.obj = {
        "runId": runId,
        "settings": loaded.settings,
        "sources": loaded.sources_used,
        "configPath": config,
    }


@app.command("parse")
def parse(
    ctx: typer.Context,
    source: list[str] | None = typer.Option(
        None, "--source", help="Source to parse: greek_founders|harmonic_founders|egg_accelerator (repeatable)"
    ),
    greekCsv: str | None = typer.Option(None, "--greek-csv", help="Greek Founders CSV export"),
    harmonicCsv: str | None = typer.Option(None, "--harmonic-csv", help="Harmonic Founders CSV export"),
    eggCsv: str | None = typer.Option(None, "--egg-csv", help="Egg Accelerator CSV export"),
):
    runParseCommand(
        ctx,
        sourceNames=source,
        csvOverrides={"greek_csv": greekCsv, "harmonic_csv": harmonicCsv, "egg_csv": eggCsv},
    )


@app.command("import")
def importRecords(
    ctx: typer.Context,
    source: list[str] | None = typer.Option(None, "--source", help="Dataset to import (repeatable)"),
    clear: bool = typer.Option(True, "--clear/--no-clear", help="Delete existing rows before insert"),
):
    runImportCommand(ctx, sourceNames=source, clearFirst=clear)


@app.command("count")
def count(
    ctx: typer.Context,
    source: list[str] | None = typer.Option(None, "--source", help="Dataset to count (repeatable)"),
):
    runCountCommand(ctx, sourceNames=source)


@app.command("tokenize")
def tokenizeCsv(
    ctx: typer.Context,
    csv: str = typer.Option(..., "--csv", help="Path to input CSV"),
    out: str | None = typer.Option(None, "--out", help="Write re-quoted CSV here instead of stdout"),
):
    runTokenizeCommand(ctx, csvPath=csv, outPath=out)


if __name__ == "__main__":
    app()
