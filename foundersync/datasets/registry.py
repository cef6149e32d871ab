from __future__ import annotations

from foundersync.datasets.companies.normalizer_spec import (
    COMPANY_FOUNDER_COLUMNS,
    columns_without_visits,
    make_egg_accelerator_spec,
    make_greek_founders_spec,
)
from foundersync.datasets.harmonic.normalizer_spec import HARMONIC_COLUMNS, make_harmonic_founders_spec
from foundersync.datasets.spec import DatasetSpec
from foundersync.domain.models import SourceKind

_registry: dict[SourceKind, DatasetSpec] = {
    SourceKind.GREEK_FOUNDERS: DatasetSpec(
        kind=SourceKind.GREEK_FOUNDERS,
        table_name="greek_founders",
        output_file="greek_founders.json",
        csv_setting="greek_csv",
        default_columns=dict(COMPANY_FOUNDER_COLUMNS),
        make_normalizer_spec=make_greek_founders_spec,
    ),
    SourceKind.HARMONIC_FOUNDERS: DatasetSpec(
        kind=SourceKind.HARMONIC_FOUNDERS,
        table_name="harmonic_founders",
        output_file="harmonic_founders.json",
        csv_setting="harmonic_csv",
        default_columns=dict(HARMONIC_COLUMNS),
        make_normalizer_spec=make_harmonic_founders_spec,
    ),
    SourceKind.EGG_ACCELERATOR: DatasetSpec(
        kind=SourceKind.EGG_ACCELERATOR,
        table_name="egg_accelerator",
        output_file="egg_accelerator.json",
        csv_setting="egg_csv",
        default_columns=columns_without_visits(),
        make_normalizer_spec=make_egg_accelerator_spec,
    ),
}


def get_spec(kind: SourceKind | str) -> DatasetSpec:
    """
    Возвращает DatasetSpec по типу источника или ValueError, если не зарегистрирован.
    """
    if not isinstance(kind, SourceKind):
        kind = SourceKind.parse(kind)
    try:
        return _registry[kind]
    except KeyError as exc:
        raise ValueError(f"Unsupported source: {kind}") from exc


def list_specs() -> list[DatasetSpec]:
    return list(_registry.values())
