from __future__ import annotations

from foundersync.domain.error_codes import ErrorCode
from foundersync.errors import AppError


class SourceFileUnreadableError(AppError):
    """
    Назначение:
        Входной файл источника отсутствует или не читается.
    Инварианты/гарантии:
        - code установлен в ErrorCode.SOURCE_FILE_UNREADABLE.
        - Фатальна только для своего источника, остальные продолжают работу.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            category="source",
            code=ErrorCode.SOURCE_FILE_UNREADABLE.value,
            message=f"Source file is not readable: {path} ({reason})",
            details={"path": path, "reason": reason},
        )
        self.path = path


__all__ = ["SourceFileUnreadableError"]
