from __future__ import annotations

import csv
import io
from typing import Iterable, Sequence

Row = list[str]

_QUOTE = '"'
_DELIMITER = ","


def tokenize(text: str) -> list[Row]:
    """
    Назначение:
        Разбирает сырой текст CSV-выгрузки в строки полей.

    Контракт:
        - Пустой текст -> пустой список.
        - Кавычки по RFC4180: запятые, переводы строк и "" внутри кавычек
          остаются частью поля.
        - Никогда не бросает исключений на битых кавычках: незакрытая кавычка
          действует до конца входа.

    Алгоритм:
        1) split_logical_lines: деление на логические строки с учётом кавычек.
        2) split_fields: деление каждой логической строки на поля.
    """
    return [split_fields(line) for line in split_logical_lines(text)]


def split_logical_lines(text: str) -> list[str]:
    """
    Назначение:
        Фаза 1: деление текста на логические строки.

    Алгоритм:
        - Одиночная кавычка переключает режим in_quotes.
        - "" внутри кавычек переносится в строку как есть, режим не меняется
          (раскрытие выполняет фаза 2).
        - \\n, \\r и \\r\\n вне кавычек завершают строку; внутри кавычек сохраняются.
        - Пустые после trim строки отбрасываются.
    """
    lines: list[str] = []
    current: list[str] = []
    in_quotes = False
    length = len(text)
    i = 0
    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ""
        if char == _QUOTE:
            if in_quotes and next_char == _QUOTE:
                current.append(_QUOTE * 2)
                i += 2
                continue
            in_quotes = not in_quotes
            current.append(char)
        elif char in ("\n", "\r") and not in_quotes:
            _flush_line(lines, current)
            current = []
            if char == "\r" and next_char == "\n":
                i += 1
        else:
            current.append(char)
        i += 1
    _flush_line(lines, current)
    return lines


def split_fields(line: str) -> Row:
    """
    Назначение:
        Фаза 2: деление логической строки на поля.

    Алгоритм:
        - Запятая вне кавычек завершает поле.
        - "" внутри кавычек раскрывается в одну кавычку, одиночная кавычка
          закрывает режим кавычек.
        - Поля тримятся после раскрытия; последнее поле выдаётся всегда.
    """
    fields: Row = []
    field: list[str] = []
    in_quote = False
    length = len(line)
    i = 0
    while i < length:
        char = line[i]
        if char == _QUOTE:
            if not in_quote:
                in_quote = True
            elif i + 1 < length and line[i + 1] == _QUOTE:
                field.append(_QUOTE)
                i += 1
            else:
                in_quote = False
        elif char == _DELIMITER and not in_quote:
            fields.append("".join(field).strip())
            field = []
        else:
            field.append(char)
        i += 1
    fields.append("".join(field).strip())
    return fields


def serialize_rows(rows: Iterable[Sequence[str]]) -> str:
    """
    Назначение:
        Обратная операция к tokenize: все поля в кавычках, кавычки удвоены.
    """
    buffer = io.StringIO(newline="")
    writer = csv.writer(buffer, delimiter=_DELIMITER, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow(row)
    return buffer.getvalue()


def _flush_line(lines: list[str], current: list[str]) -> None:
    line = "".join(current)
    if line.strip():
        lines.append(line)


__all__ = ["Row", "serialize_rows", "split_fields", "split_logical_lines", "tokenize"]
