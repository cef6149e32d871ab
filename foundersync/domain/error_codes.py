from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Единая таксономия кодов диагностики: разбор строк, чтение файлов, HTTP.
    """

    MALFORMED_ROW = "MALFORMED_ROW"
    FILTERED_OUT = "FILTERED_OUT"
    UNPARSEABLE_NUMBER = "UNPARSEABLE_NUMBER"
    UNPARSEABLE_NESTED_STRUCTURE = "UNPARSEABLE_NESTED_STRUCTURE"
    SOURCE_FILE_UNREADABLE = "SOURCE_FILE_UNREADABLE"
    RECORDS_FILE_MISSING = "RECORDS_FILE_MISSING"

    NETWORK_ERROR = "NETWORK_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    INVALID_JSON = "INVALID_JSON"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"

    @classmethod
    def from_status(cls, status_code: int | None) -> "ErrorCode":
        """
        Назначение:
            Подбор общего кода по HTTP-статусу.
        """
        if status_code == 401:
            return cls.UNAUTHORIZED
        if status_code == 403:
            return cls.FORBIDDEN
        return cls.HTTP_ERROR
