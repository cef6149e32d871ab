from __future__ import annotations

from typing import Callable, Iterable, TypeVar

T = TypeVar("T")


def sort_by_score_desc(items: Iterable[T], score: Callable[[T], float | None]) -> list[T]:
    """
    Назначение:
        Стабильная сортировка по убыванию оценки, записи без оценки в конце.

    Контракт:
        - None идёт после любого числа, два None равны.
        - Равные оценки сохраняют исходный порядок.
    """
    return sorted(items, key=lambda item: _score_key(score(item)))


def _score_key(value: float | None) -> tuple[int, float]:
    if value is None:
        return (1, 0.0)
    return (0, -value)


__all__ = ["sort_by_score_desc"]
