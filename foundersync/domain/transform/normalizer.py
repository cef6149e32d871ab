from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Mapping, Protocol, Sequence, TypeVar

from foundersync.domain.error_codes import ErrorCode
from foundersync.domain.models import Diagnostic, DiagnosticStage, RowDiagnostic, RowRef
from foundersync.domain.transform.education import EducationParseError, fallback_education, summarize_education
from foundersync.domain.transform.result import NormalizeResult, RowOutcome
from foundersync.domain.transform.sorting import sort_by_score_desc
from foundersync.domain.transform.values import clean_value, parse_number

T = TypeVar("T")

ValueParser = Callable[[str | None, str, list[Diagnostic]], Any]
RowFilter = Callable[[Mapping[str, Any]], Diagnostic | None]

ColumnMap = Mapping[str, int]


def parse_text(raw: str | None, field: str, warnings: list[Diagnostic]) -> str | None:
    _ = field, warnings
    return clean_value(raw)


def parse_score(raw: str | None, field: str, warnings: list[Diagnostic]) -> float | None:
    value = parse_number(raw)
    if value is None and clean_value(raw):
        warnings.append(
            Diagnostic(
                stage=DiagnosticStage.NORMALIZE,
                code=ErrorCode.UNPARSEABLE_NUMBER.value,
                field=field,
                message=f"{field} is not a number: {raw[:40]}",
            )
        )
    return value


def parse_education(raw: str | None, field: str, warnings: list[Diagnostic]) -> str:
    cleaned = clean_value(raw)
    try:
        return summarize_education(cleaned)
    except EducationParseError as exc:
        warnings.append(
            Diagnostic(
                stage=DiagnosticStage.NORMALIZE,
                code=ErrorCode.UNPARSEABLE_NESTED_STRUCTURE.value,
                field=field,
                message=f"{field} kept as raw text: {exc}",
            )
        )
        return fallback_education(cleaned)


@dataclass(frozen=True)
class ColumnRule:
    """
    Назначение:
        Декларативное правило извлечения одного поля по индексу колонки.
    """

    target: str
    column: int
    parser: ValueParser = parse_text

    def read(self, fields: Sequence[str]) -> str | None:
        if self.column < 0 or self.column >= len(fields):
            return None
        return fields[self.column]

    def apply(self, fields: Sequence[str], warnings: list[Diagnostic]) -> Any:
        return self.parser(self.read(fields), self.target, warnings)


def build_column_rules(
    columns: ColumnMap,
    parsers: Mapping[str, ValueParser],
) -> tuple[ColumnRule, ...]:
    """
    Назначение:
        Собирает правила из таблицы колонок: поле -> индекс, парсер по имени поля.
    """
    return tuple(
        ColumnRule(target=name, column=index, parser=parsers.get(name, parse_text))
        for name, index in columns.items()
    )


def filtered_out(field: str, message: str) -> Diagnostic:
    return Diagnostic(
        stage=DiagnosticStage.FILTER,
        code=ErrorCode.FILTERED_OUT.value,
        field=field,
        message=message,
    )


class NormalizerSpec(Protocol[T]):
    """
    Назначение:
        Контракт набора правил нормализации для источника.
    """

    dataset: str
    min_fields: int
    score_field: str
    rules: tuple[ColumnRule, ...]
    filters: tuple[RowFilter, ...]

    def build_row(self, values: Mapping[str, Any]) -> T: ...

    def to_payload(self, row: T) -> dict[str, Any]: ...


class Normalizer(Generic[T]):
    """
    Назначение:
        Ядро нормализатора: пропускает заголовок, применяет правила и фильтры
        спецификации, сортирует результат по оценке.
    Ограничения:
        - Аномалии разбора не бросаются наружу: строка пропускается либо поле
          обнуляется с предупреждением.
    """

    def __init__(self, spec: NormalizerSpec[T]) -> None:
        self.spec = spec

    def normalize(self, rows: Sequence[Sequence[str]]) -> NormalizeResult[T]:
        result: NormalizeResult[T] = NormalizeResult(dataset=self.spec.dataset)
        kept: list[T] = []
        for row_no, fields in enumerate(rows[1:], start=1):
            result.rows_total += 1
            outcome = self.normalize_row(fields, RowRef(row_no=row_no))
            if outcome.skipped is not None:
                result.skipped.append(RowDiagnostic(row_ref=outcome.row_ref, diagnostic=outcome.skipped))
                continue
            kept.append(outcome.row)
            result.warnings.extend(
                RowDiagnostic(row_ref=outcome.row_ref, diagnostic=warning) for warning in outcome.warnings
            )

        score_field = self.spec.score_field
        result.rows = sort_by_score_desc(kept, lambda row: getattr(row, score_field))
        result.records = [self.spec.to_payload(row) for row in result.rows]
        return result

    def normalize_row(self, fields: Sequence[str], row_ref: RowRef) -> RowOutcome[T]:
        if len(fields) < self.spec.min_fields:
            return RowOutcome(
                row_ref=row_ref,
                row=None,
                skipped=Diagnostic(
                    stage=DiagnosticStage.EXTRACT,
                    code=ErrorCode.MALFORMED_ROW.value,
                    field=None,
                    message=f"expected at least {self.spec.min_fields} fields, got {len(fields)}",
                ),
            )

        warnings: list[Diagnostic] = []
        values: dict[str, Any] = {}
        for rule in self.spec.rules:
            values[rule.target] = rule.apply(fields, warnings)

        for row_filter in self.spec.filters:
            rejected = row_filter(values)
            if rejected is not None:
                return RowOutcome(row_ref=row_ref, row=None, skipped=rejected)

        return RowOutcome(row_ref=row_ref, row=self.spec.build_row(values), warnings=warnings)


__all__ = [
    "ColumnMap",
    "ColumnRule",
    "Normalizer",
    "NormalizerSpec",
    "RowFilter",
    "ValueParser",
    "build_column_rules",
    "filtered_out",
    "parse_education",
    "parse_score",
    "parse_text",
]
