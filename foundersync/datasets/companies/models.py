from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CompanyFounderRow:
    """
    Назначение:
        Нормализованная запись основателя/компании (Greek Founders, Egg Accelerator).
    """

    first_name: str | None
    last_name: str | None
    founder_name: str
    company_linkedin_url: str | None
    company_name: str | None
    company_website: str | None
    person_linkedin_url: str | None
    company_type: str | None
    founder_score: float | None
    product_score: float | None
    market_opportunity_score: float | None
    overall_weighted_score: float | None
    total_visits: float | None = None


def build_founder_name(first_name: str | None, last_name: str | None) -> str:
    return f"{first_name or ''} {last_name or ''}".strip()
