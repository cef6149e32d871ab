from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from foundersync.domain.models import SourceKind
from foundersync.domain.transform.normalizer import ColumnMap, Normalizer, NormalizerSpec

NormalizerSpecFactory = Callable[[ColumnMap], NormalizerSpec[Any]]


@dataclass(frozen=True)
class DatasetSpec:
    """
    Назначение:
        Описание источника: таблица назначения, JSON-артефакт, настройка пути к CSV
        и фабрика правил нормализации.
    """

    kind: SourceKind
    table_name: str
    output_file: str
    csv_setting: str
    default_columns: ColumnMap
    make_normalizer_spec: NormalizerSpecFactory

    @property
    def dataset(self) -> str:
        return self.kind.value

    def build_normalizer(self, column_overrides: Mapping[str, Any] | None = None) -> Normalizer[Any]:
        columns = merge_columns(self.default_columns, column_overrides)
        return Normalizer(self.make_normalizer_spec(columns))


def merge_columns(defaults: ColumnMap, overrides: Mapping[str, Any] | None) -> dict[str, int]:
    """
    Назначение:
        Накладывает переопределения индексов колонок (из config) на таблицу по умолчанию.

    Ошибки/исключения:
        ValueError для неизвестного поля или отрицательного/нечислового индекса.
    """
    merged = dict(defaults)
    for name, index in (overrides or {}).items():
        if name not in merged:
            raise ValueError(f"Unknown column field: {name}")
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            raise ValueError(f"Invalid column index for {name}: {index!r}")
        merged[name] = index
    return merged
