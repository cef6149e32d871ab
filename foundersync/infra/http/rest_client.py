from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import httpx

from foundersync.domain.error_codes import ErrorCode
from foundersync.errors import AppError


class ApiError(AppError):
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body_snippet: str | None = None,
        retryable: bool = False,
        details: dict | None = None,
        code: str | None = None,
    ):
        """
        Назначение:
            Исключение для ошибок HTTP/API уровня RestApiClient.
        Контракт:
            - code: строковый код (HTTP_ERROR, NETWORK_ERROR, INVALID_JSON и т.п.).
            - status_code/body_snippet используются для диагностики.
        """
        super().__init__(
            category="api",
            code=code or ErrorCode.from_status(status_code).value,
            message=message,
            retryable=retryable,
            details=details or {},
        )
        self.status_code = status_code
        self.body_snippet = body_snippet


@dataclass
class ApiResponse:
    """
    Назначение:
        Ответ REST API без проверки ожидаемых статусов (headers в нижнем регистре).
    """

    status_code: int
    data: Any | None
    body_snippet: str | None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299


class RestApiClient:
    def __init__(
        self,
        baseUrl: str,
        apiKey: str,
        timeoutSeconds: float = 20.0,
        retries: int = 3,
        retryBackoffSeconds: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Назначение:
            Клиент REST-хранилища (PostgREST/Supabase) с простой политикой ретраев.
        Контракт:
            - baseUrl и apiKey обязательны; ключ уходит в apikey и Authorization: Bearer.
            - retries/retryBackoffSeconds управляют повторами на 429/5xx и сетевых ошибках.
        """
        self.baseUrl = baseUrl.rstrip("/")
        self.apiKey = apiKey
        self.retries = retries
        self.retryBackoffSeconds = retryBackoffSeconds
        self.retry_attempts = 0

        self.client = httpx.Client(
            base_url=self.baseUrl,
            timeout=timeoutSeconds,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def getRetryAttempts(self) -> int:
        """Возвращает количество выполненных повторных попыток."""
        return self.retry_attempts

    def _headers_with(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        """Заголовки аутентификации + дополнительные."""
        base = {
            "apikey": self.apiKey,
            "Authorization": f"Bearer {self.apiKey}",
        }
        if extra:
            base.update(extra)
        return base

    def _should_retry(self, resp: httpx.Response) -> bool:
        """Решает, стоит ли повторить запрос (429 или 5xx)."""
        if resp.status_code == 429:
            return True
        return 500 <= resp.status_code <= 599

    def _sleep_backoff(self, attempt: int) -> None:
        """Задержка с экспоненциальным ростом для ретраев."""
        delay = self.retryBackoffSeconds * (2 ** attempt)
        time.sleep(delay)

    def requestAny(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        headers: dict[str, str] | None = None,
        retry: bool = True,
    ) -> ApiResponse:
        """
        Назначение:
            Выполняет запрос с ретраями и возвращает ответ без проверки статуса.

        Контракт:
            - retry=False: ровно одна попытка (неидемпотентные вставки не повторяются).

        Ошибки/исключения:
            ApiError(code=NETWORK_ERROR), если сетевые ошибки не прошли после всех ретраев.
        """
        params = params or {}
        maxRetries = self.retries if retry else 0
        attempt = 0
        while True:
            try:
                resp = self.client.request(
                    method,
                    path,
                    params=params,
                    headers=self._headers_with(headers),
                    json=json,
                )
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                if attempt >= maxRetries:
                    raise ApiError(
                        f"Network error: {exc}",
                        status_code=None,
                        retryable=False,
                        code=ErrorCode.NETWORK_ERROR.value,
                    ) from exc
                self.retry_attempts += 1
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            if self._should_retry(resp) and attempt < maxRetries:
                self.retry_attempts += 1
                self._sleep_backoff(attempt)
                attempt += 1
                continue

            body_snippet = resp.text[:200] if resp.text else None
            data: Any | None = None
            if resp.text:
                try:
                    data = resp.json()
                except ValueError:
                    data = resp.text
            return ApiResponse(
                status_code=resp.status_code,
                data=data,
                body_snippet=body_snippet,
                headers={k.lower(): v for k, v in resp.headers.items()},
            )

    def requestOk(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> ApiResponse:
        """
        Назначение:
            Как requestAny, но для статусов вне 2xx бросает ApiError.
        """
        response = self.requestAny(method, path, params=params, json=json, headers=headers)
        if response.ok:
            return response
        raise ApiError(
            f"HTTP {response.status_code}",
            status_code=response.status_code,
            body_snippet=response.body_snippet,
            retryable=response.status_code == 429 or response.status_code >= 500,
            details={"body_snippet": response.body_snippet},
        )
