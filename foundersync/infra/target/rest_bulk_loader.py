from __future__ import annotations

from typing import Any, Sequence

from foundersync.common.sanitize import truncateText
from foundersync.domain.ports.bulk_loader import DEFAULT_BATCH_SIZE, BatchFailure, InsertSummary
from foundersync.infra.http.rest_client import ApiError, RestApiClient

REST_PREFIX = "/rest/v1"


class RestBulkLoader:
    """
    Назначение/ответственность:
        Реализация BulkLoaderProtocol поверх PostgREST-совместимого API (Supabase).
    Взаимодействия:
        - clear:  DELETE /rest/v1/<table>?id=gt.0
        - insert: POST   /rest/v1/<table> (JSON-массив батча)
        - count:  GET    /rest/v1/<table>?select=count, Prefer: count=exact
    """

    def __init__(self, client: RestApiClient) -> None:
        self.client = client

    def close(self) -> None:
        self.client.close()

    def clear(self, table: str) -> bool:
        try:
            response = self.client.requestAny(
                "DELETE",
                self._path(table),
                params={"id": "gt.0"},
                headers={"Prefer": "return=minimal"},
            )
        except ApiError:
            return False
        return response.ok

    def insert_batch(
        self,
        table: str,
        records: Sequence[dict[str, Any]],
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> InsertSummary:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        summary = InsertSummary(table=table, total=len(records))
        for batch_index, offset in enumerate(range(0, len(records), batch_size)):
            batch = list(records[offset:offset + batch_size])
            summary.batches += 1
            message = self._post_batch(table, batch)
            if message is None:
                summary.inserted += len(batch)
                continue
            summary.failures.append(
                BatchFailure(batch_index=batch_index, offset=offset, size=len(batch), message=message)
            )
        return summary

    def count(self, table: str) -> int:
        response = self.client.requestOk(
            "GET",
            self._path(table),
            params={"select": "count"},
            headers={"Prefer": "count=exact"},
        )
        total = parse_content_range_total(response.headers.get("content-range"))
        if total is None:
            raise ApiError(
                f"Missing count in Content-Range for {table}",
                status_code=response.status_code,
                body_snippet=response.body_snippet,
            )
        return total

    def _post_batch(self, table: str, batch: list[dict[str, Any]]) -> str | None:
        """
        Назначение:
            Отправляет один батч ровно один раз; возвращает текст ошибки или None при успехе.
        """
        try:
            response = self.client.requestAny(
                "POST",
                self._path(table),
                json=batch,
                headers={"Content-Type": "application/json", "Prefer": "return=minimal"},
                retry=False,
            )
        except ApiError as err:
            return truncateText(err.message)
        if response.ok:
            return None
        return truncateText(f"HTTP {response.status_code}: {response.body_snippet or ''}".strip())

    @staticmethod
    def _path(table: str) -> str:
        return f"{REST_PREFIX}/{table}"


def parse_content_range_total(value: str | None) -> int | None:
    """
    Назначение:
        Извлекает общее количество из заголовка Content-Range ("0-24/573" или "*/573").
    """
    if not value or "/" not in value:
        return None
    total = value.rsplit("/", 1)[1].strip()
    if not total.isdigit():
        return None
    return int(total)
