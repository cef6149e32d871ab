from __future__ import annotations

import math
import re

_NULL_LITERALS = ("null", "undefined")
_SURROUNDING_QUOTES = ('"', "'")
_NUMBER_PREFIX_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def clean_value(raw: str | None) -> str | None:
    """
    Назначение:
        Приводит сырое поле к строке или None.

    Контракт:
        - None, "", "null", "undefined" -> None.
        - Иначе снимает одну ведущую и одну замыкающую кавычку (' или ") и тримит.
    """
    if raw is None or raw == "" or raw in _NULL_LITERALS:
        return None
    value = raw
    if value.startswith(_SURROUNDING_QUOTES):
        value = value[1:]
    if value.endswith(_SURROUNDING_QUOTES):
        value = value[:-1]
    return value.strip()


def parse_number(raw: str | None) -> float | None:
    """
    Назначение:
        Разбирает число с плавающей точкой по числовому префиксу.

    Контракт:
        - None, "", "null" -> None.
        - "42abc" -> 42.0 (хвост после числа игнорируется).
        - Нет числового префикса -> None, без исключений.
    """
    if raw is None or raw == "" or raw == "null":
        return None
    match = _NUMBER_PREFIX_RE.match(raw)
    if match is None:
        return None
    number = float(match.group(1))
    if not math.isfinite(number):
        return None
    return number


__all__ = ["clean_value", "parse_number"]
