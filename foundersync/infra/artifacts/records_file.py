from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence


def writeRecordsJson(records: Sequence[dict[str, Any]], outDir: str, fileName: str) -> str:
    """
    Назначение:
        Записывает нормализованные записи в JSON-файл для загрузчика.

    Выходные данные:
        str
            Путь к файлу.
    """
    Path(outDir).mkdir(parents=True, exist_ok=True)
    recordsPath = str(Path(outDir) / fileName)
    with open(recordsPath, "w", encoding="utf-8") as f:
        json.dump(list(records), f, ensure_ascii=False, indent=2)
    return recordsPath


def readRecordsJson(path: str) -> list[dict[str, Any]]:
    """
    Назначение:
        Читает JSON-массив записей, подготовленный командой parse.

    Ошибки/исключения:
        FileNotFoundError, если файла нет; ValueError, если внутри не массив объектов.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError(f"Records file must contain a JSON array of objects: {path}")
    return data
