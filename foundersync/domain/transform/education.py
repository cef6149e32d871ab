from __future__ import annotations

import json
from typing import Any

MAX_EDUCATION_ENTRIES = 2
FALLBACK_TEXT_LIMIT = 100


class EducationParseError(ValueError):
    """
    Назначение:
        Вложенная структура образования не разбирается как массив объектов.
    """


def summarize_education(raw: str | None) -> str:
    """
    Назначение:
        Строит читаемую сводку образования из JSON-массива записей.

    Контракт:
        - raw не начинается с "[" (или пуст) -> "".
        - Запись: "<degreeType> <fieldOfStudy> at <institutionName>" без
          отсутствующих частей; пустые записи отбрасываются.
        - Записи-не объекты (строки, числа, списки) пропускаются.
        - Берутся первые MAX_EDUCATION_ENTRIES записей, разделитель "; ".

    Ошибки/исключения:
        EducationParseError, если JSON битый, это не массив или в нём есть null.
    """
    if not raw or not raw.startswith("["):
        return ""
    try:
        entries = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise EducationParseError(str(exc)) from exc
    if not isinstance(entries, list):
        raise EducationParseError("education is not a list")

    rendered: list[str] = []
    for entry in entries:
        if entry is None:
            raise EducationParseError("education entry is null")
        if not isinstance(entry, dict):
            continue
        text = _render_entry(entry)
        if text:
            rendered.append(text)
    return "; ".join(rendered[:MAX_EDUCATION_ENTRIES])


def fallback_education(raw: str | None) -> str:
    if not raw:
        return ""
    return raw[:FALLBACK_TEXT_LIMIT]


def _render_entry(entry: dict[str, Any]) -> str:
    parts: list[str] = []
    degree = entry.get("degreeType")
    field = entry.get("fieldOfStudy")
    institution = entry.get("institutionName")
    if degree:
        parts.append(str(degree))
    if field:
        parts.append(str(field))
    if institution:
        parts.append(f"at {institution}")
    return " ".join(parts)


__all__ = [
    "EducationParseError",
    "FALLBACK_TEXT_LIMIT",
    "MAX_EDUCATION_ENTRIES",
    "fallback_education",
    "summarize_education",
]
