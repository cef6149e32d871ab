from __future__ import annotations

from pathlib import Path

from foundersync.domain.exceptions import SourceFileUnreadableError
from foundersync.domain.transform.tokenizer import Row, tokenize


def read_source_text(path: str) -> str:
    """
    Назначение:
        Читает файл выгрузки целиком (utf-8, BOM допускается).

    Ошибки/исключения:
        SourceFileUnreadableError, если файла нет или он не читается/не декодируется.
    """
    p = Path(path)
    if not p.exists():
        raise SourceFileUnreadableError(path, "file not found")
    if not p.is_file():
        raise SourceFileUnreadableError(path, "not a regular file")
    try:
        with p.open("r", encoding="utf-8-sig", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceFileUnreadableError(path, str(exc)) from exc


class CsvTextSource:
    """
    Назначение/ответственность:
        CSV-источник в памяти: читает файл и отдаёт строки полей через tokenize.
    Ограничения:
        - Файл читается целиком; потоковый разбор не поддерживается.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def read_rows(self) -> list[Row]:
        return tokenize(read_source_text(self.path))
