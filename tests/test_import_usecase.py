from __future__ import annotations

import json
import logging

from foundersync.datasets.registry import get_spec
from foundersync.domain.ports.bulk_loader import BatchFailure, InsertSummary
from foundersync.domain.reporting.collector import ReportCollector
from foundersync.errors import AppError
from foundersync.infra.artifacts.records_file import writeRecordsJson
from foundersync.usecases.import_usecase import ImportUseCase


class FakeLoader:
    def __init__(self, clear_ok: bool = True, fail_batches: tuple[int, ...] = (), count_error: bool = False):
        self.clear_ok = clear_ok
        self.fail_batches = fail_batches
        self.count_error = count_error
        self.calls: list[tuple[str, str]] = []
        self.stored: dict[str, list[dict]] = {}

    def clear(self, table: str) -> bool:
        self.calls.append(("clear", table))
        if self.clear_ok:
            self.stored[table] = []
        return self.clear_ok

    def insert_batch(self, table, records, batch_size=50) -> InsertSummary:
        self.calls.append(("insert", table))
        summary = InsertSummary(table=table, total=len(records))
        for index, offset in enumerate(range(0, len(records), batch_size)):
            batch = list(records[offset:offset + batch_size])
            summary.batches += 1
            if index in self.fail_batches:
                summary.failures.append(BatchFailure(index, offset, len(batch), "HTTP 400: boom"))
                continue
            self.stored.setdefault(table, []).extend(batch)
            summary.inserted += len(batch)
        return summary

    def count(self, table: str) -> int:
        self.calls.append(("count", table))
        if self.count_error:
            raise AppError(category="api", code="HTTP_ERROR", message="HTTP 500")
        return len(self.stored.get(table, []))


def run_import(loader, out_dir, specs, clear_first=True, batch_size=2):
    report = ReportCollector(run_id="run-1", command="import")
    usecase = ImportUseCase(loader=loader, out_dir=str(out_dir), batch_size=batch_size, clear_first=clear_first)
    results = usecase.run(specs, logger=logging.getLogger("test.import"), run_id="run-1", report=report)
    return results, report


def test_import_clears_inserts_and_verifies(tmp_path):
    records = [{"company_name": f"C{i}"} for i in range(5)]
    writeRecordsJson(records, str(tmp_path), "greek_founders.json")
    loader = FakeLoader()

    results, report = run_import(loader, tmp_path, [get_spec("greek_founders")])

    result = results[0]
    assert result.ok
    assert (result.total, result.inserted, result.cleared, result.remote_count) == (5, 5, True, 5)
    assert loader.calls == [("clear", "greek_founders"), ("insert", "greek_founders"), ("count", "greek_founders")]
    assert report.summary.ops["insert_batch"] == {"ok": 3, "failed": 0, "count": 3}
    assert report.build().status == "SUCCESS"


def test_failed_batch_is_reported_and_others_load(tmp_path):
    writeRecordsJson([{"n": i} for i in range(5)], str(tmp_path), "egg_accelerator.json")
    loader = FakeLoader(fail_batches=(1,))

    results, report = run_import(loader, tmp_path, [get_spec("egg_accelerator")])

    result = results[0]
    assert not result.ok
    assert result.inserted == 3
    assert [f.batch_index for f in result.failures] == [1]
    assert report.context["tables"]["egg_accelerator"]["failed_batches"] == [1]
    assert report.build().status == "PARTIAL"


def test_missing_records_file_does_not_stop_other_tables(tmp_path):
    writeRecordsJson([{"full_name": "Maria"}], str(tmp_path), "harmonic_founders.json")
    loader = FakeLoader()

    results, report = run_import(loader, tmp_path, [get_spec("greek_founders"), get_spec("harmonic_founders")])

    assert not results[0].ok
    assert "Run parse first" in results[0].error
    assert results[1].ok
    assert results[1].remote_count == 1
    assert report.summary.by_code == {"RECORDS_FILE_MISSING": 1}


def test_invalid_records_file(tmp_path):
    (tmp_path / "greek_founders.json").write_text(json.dumps({"not": "a list"}), encoding="utf-8")

    results, report = run_import(FakeLoader(), tmp_path, [get_spec("greek_founders")])

    assert results[0].error is not None
    assert report.summary.by_code == {"INVALID_JSON": 1}


def test_clear_failure_and_count_failure_are_not_fatal(tmp_path):
    writeRecordsJson([{"n": 1}], str(tmp_path), "greek_founders.json")
    loader = FakeLoader(clear_ok=False, count_error=True)

    results, report = run_import(loader, tmp_path, [get_spec("greek_founders")])

    assert results[0].ok
    assert results[0].cleared is False
    assert results[0].remote_count is None
    assert report.summary.ops["clear"] == {"ok": 0, "failed": 1, "count": 1}


def test_no_clear_skips_delete(tmp_path):
    writeRecordsJson([{"n": 1}], str(tmp_path), "greek_founders.json")
    loader = FakeLoader()

    results, _ = run_import(loader, tmp_path, [get_spec("greek_founders")], clear_first=False)

    assert results[0].cleared is None
    assert ("clear", "greek_founders") not in loader.calls


def test_unreadable_records_path_does_not_stop_other_tables(tmp_path):
    (tmp_path / "greek_founders.json").mkdir()
    writeRecordsJson([{"n": 1}, {"n": 2}], str(tmp_path), "egg_accelerator.json")
    loader = FakeLoader()

    results, report = run_import(loader, tmp_path, [get_spec("greek_founders"), get_spec("egg_accelerator")])

    assert not results[0].ok
    assert "not readable" in results[0].error
    assert results[1].ok
    assert results[1].remote_count == 2
    assert report.summary.by_code == {"SOURCE_FILE_UNREADABLE": 1}
