from __future__ import annotations

from dataclasses import dataclass


@dataclass
class HarmonicFounderRow:
    """
    Назначение:
        Нормализованная запись основателя из выгрузки Harmonic.
    """

    full_name: str
    linkedin_url: str | None
    education: str
    founder_score: float
