from __future__ import annotations

from typing import Any, Mapping, Sequence

from foundersync.datasets.registry import get_spec
from foundersync.domain.models import SourceKind
from foundersync.domain.transform.result import NormalizeResult


def normalize(
    rows: Sequence[Sequence[str]],
    source_kind: SourceKind | str,
    column_overrides: Mapping[str, Any] | None = None,
) -> NormalizeResult[Any]:
    """
    Назначение:
        Нормализует токенизированные строки выгрузки (первая строка - заголовок)
        по правилам источника.

    Выходные данные:
        NormalizeResult: записи в порядке убывания основной оценки + диагностика.
    """
    spec = get_spec(source_kind)
    return spec.build_normalizer(column_overrides).normalize(rows)
