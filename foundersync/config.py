from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
import os
import yaml

from foundersync.datasets.registry import get_spec
from foundersync.datasets.spec import merge_columns

ENV_PREFIX = "FOUNDERS_"


@dataclass(frozen=True)
class Settings:
    # Bulk loader (REST)
    api_url: str | None = None
    api_key: str | None = None
    batch_size: int = 50
    timeout_seconds: float = 20.0
    retries: int = 3
    retry_backoff_seconds: float = 0.5

    # Sources
    greek_csv: str | None = None
    harmonic_csv: str | None = None
    egg_csv: str | None = None
    columns: dict[str, dict[str, int]] = field(default_factory=dict)

    # Paths
    out_dir: str = "./out"
    log_dir: str = "./logs"
    report_dir: str = "./reports"

    # Misc
    log_level: str = "INFO"
    report_items_limit: int = 200


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


def _parse_int(v: str) -> int:
    return int(v)


def _parse_float(v: str) -> float:
    return float(v)


def _parse_str(v: str) -> str:
    return v


# key -> parser для значений из ENV (FOUNDERS_<KEY>)
_ENV_KEYS = {
    "api_url": _parse_str,
    "api_key": _parse_str,
    "batch_size": _parse_int,
    "timeout_seconds": _parse_float,
    "retries": _parse_int,
    "retry_backoff_seconds": _parse_float,
    "greek_csv": _parse_str,
    "harmonic_csv": _parse_str,
    "egg_csv": _parse_str,
    "out_dir": _parse_str,
    "log_dir": _parse_str,
    "report_dir": _parse_str,
    "log_level": _parse_str,
    "report_items_limit": _parse_int,
}


def _read_yaml_config(path: Path) -> dict:
    if not path.exists():
        return {}
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            return {}
        return data


def _env_get(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def _validate_columns(columns) -> dict[str, dict[str, int]]:
    """
    Назначение:
        Проверяет переопределения колонок до начала работы команды.

    Ошибки/исключения:
        ValueError для неизвестного источника, поля или некорректного индекса.
    """
    if not isinstance(columns, dict):
        raise ValueError("config 'columns' must be a mapping of source -> {field: index}")
    validated: dict[str, dict[str, int]] = {}
    for source, mapping in columns.items():
        try:
            spec = get_spec(str(source))
        except ValueError as exc:
            raise ValueError(f"config 'columns': {exc}") from exc
        if mapping is None:
            continue
        if not isinstance(mapping, dict):
            raise ValueError(f"config 'columns.{source}' must be a mapping of field -> index")
        merge_columns(spec.default_columns, mapping)
        validated[spec.dataset] = dict(mapping)
    return validated


def loadSettings(
    config_path: str | None,
    cli_overrides: dict,
) -> LoadedSettings:
    """
    Priority: CLI > ENV > config > defaults
    """
    sources: list[str] = []
    known = {f.name for f in fields(Settings)}
    merged: dict = {}

    # 1) config file
    if config_path:
        cfg = _read_yaml_config(Path(config_path))
        if cfg:
            sources.append("config")
        for k, v in cfg.items():
            if k in known and v is not None:
                merged[k] = v

    # 2) env
    env_used = False
    for key, parser in _ENV_KEYS.items():
        raw = _env_get(ENV_PREFIX + key.upper())
        if raw is None:
            continue
        env_used = True
        try:
            merged[key] = parser(raw)
        except ValueError as exc:
            raise ValueError(f"Invalid env value {ENV_PREFIX + key.upper()}={raw!r}") from exc
    if env_used:
        sources.append("env")

    # 3) CLI overrides (only those explicitly passed)
    if any(v is not None for v in cli_overrides.values()):
        sources.append("cli")
    for k, v in cli_overrides.items():
        if v is None:
            continue
        merged[k] = v

    merged["columns"] = _validate_columns(merged.get("columns") or {})

    return LoadedSettings(settings=Settings(**merged), sources_used=sources)
