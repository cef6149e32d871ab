from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

from foundersync.datasets.companies.models import CompanyFounderRow, build_founder_name
from foundersync.domain.models import Diagnostic
from foundersync.domain.transform.normalizer import (
    ColumnMap,
    ColumnRule,
    RowFilter,
    build_column_rules,
    filtered_out,
    parse_score,
)

PRODUCT_COMPANY = "product_company"
MIN_FIELDS = 10

COMPANY_FOUNDER_COLUMNS: dict[str, int] = {
    "first_name": 1,
    "last_name": 2,
    "company_linkedin_url": 3,
    "company_name": 4,
    "company_website": 5,
    "person_linkedin_url": 6,
    "company_type": 7,
    "founder_score": 12,
    "product_score": 18,
    "market_opportunity_score": 19,
    "overall_weighted_score": 20,
    "total_visits": 29,
}

SCORE_FIELDS: tuple[str, ...] = (
    "founder_score",
    "product_score",
    "market_opportunity_score",
    "overall_weighted_score",
)

_NUMERIC_PARSERS = {name: parse_score for name in (*SCORE_FIELDS, "total_visits")}


def columns_without_visits() -> dict[str, int]:
    return {name: index for name, index in COMPANY_FOUNDER_COLUMNS.items() if name != "total_visits"}


@dataclass(frozen=True)
class CompanyFoundersNormalizerSpec:
    """
    Назначение:
        Правила нормализации выгрузок компаний с основателями.
    Инварианты/гарантии:
        - В выдачу попадают только company_type == "product_company" с непустым company_name.
        - require_scores=True (Greek Founders) отбрасывает строки без любой из четырёх оценок;
          Egg Accelerator сохраняет пустые оценки.
        - include_total_visits управляет наличием total_visits в записи.
    """

    dataset: str
    columns: ColumnMap
    require_scores: bool
    include_total_visits: bool
    min_fields: int = MIN_FIELDS
    score_field: str = "overall_weighted_score"

    @property
    def rules(self) -> tuple[ColumnRule, ...]:
        return build_column_rules(self.columns, _NUMERIC_PARSERS)

    @property
    def filters(self) -> tuple[RowFilter, ...]:
        filters: list[RowFilter] = [_require_product_company]
        if self.require_scores:
            filters.append(_require_scores)
        filters.append(_require_company_name)
        return tuple(filters)

    def build_row(self, values: Mapping[str, Any]) -> CompanyFounderRow:
        return CompanyFounderRow(
            first_name=values.get("first_name"),
            last_name=values.get("last_name"),
            founder_name=build_founder_name(values.get("first_name"), values.get("last_name")),
            company_linkedin_url=values.get("company_linkedin_url"),
            company_name=values.get("company_name"),
            company_website=values.get("company_website"),
            person_linkedin_url=values.get("person_linkedin_url"),
            company_type=values.get("company_type"),
            founder_score=values.get("founder_score"),
            product_score=values.get("product_score"),
            market_opportunity_score=values.get("market_opportunity_score"),
            overall_weighted_score=values.get("overall_weighted_score"),
            total_visits=values.get("total_visits") if self.include_total_visits else None,
        )

    def to_payload(self, row: CompanyFounderRow) -> dict[str, Any]:
        payload = asdict(row)
        if not self.include_total_visits:
            payload.pop("total_visits", None)
        return payload


def make_greek_founders_spec(columns: ColumnMap) -> CompanyFoundersNormalizerSpec:
    return CompanyFoundersNormalizerSpec(
        dataset="greek_founders",
        columns=columns,
        require_scores=True,
        include_total_visits=True,
    )


def make_egg_accelerator_spec(columns: ColumnMap) -> CompanyFoundersNormalizerSpec:
    return CompanyFoundersNormalizerSpec(
        dataset="egg_accelerator",
        columns=columns,
        require_scores=False,
        include_total_visits=False,
    )


def _require_product_company(values: Mapping[str, Any]) -> Diagnostic | None:
    company_type = values.get("company_type")
    if company_type != PRODUCT_COMPANY:
        return filtered_out("company_type", f"company_type is {company_type!r}, expected {PRODUCT_COMPANY!r}")
    return None


def _require_scores(values: Mapping[str, Any]) -> Diagnostic | None:
    for name in SCORE_FIELDS:
        if values.get(name) is None:
            return filtered_out(name, f"{name} is required")
    return None


def _require_company_name(values: Mapping[str, Any]) -> Diagnostic | None:
    if not values.get("company_name"):
        return filtered_out("company_name", "company_name is empty")
    return None
