from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(eq=False)
class AppError(Exception):
    """
    Назначение:
        Базовая ошибка foundersync: категория (source/api), код ErrorCode и текст.

    Контракт:
        - str(err) == message, ошибку можно печатать в CLI как есть.
        - summary() даёт "<code>: <message>" для логов.
    """

    category: str
    code: str
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def summary(self) -> str:
        return f"{self.code}: {self.message}"


__all__ = ["AppError"]
