"""
HTTP client for the managed backend (records, object storage, AI proxy).

One ``BackendClient`` is built by the application lifespan and handed to the
services that need it; nothing in the package holds a module-level client.

Every public coroutine returns a :class:`~mysticwriter.schemas.Result`.
Transport failures, non-2xx responses and malformed payloads become failed
results instead of exceptions so callers can pick their own soft default.
Idempotent reads are retried on 429/503 and connection errors; writes,
uploads and AI calls are single attempts.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from mysticwriter.config import Settings, get_settings
from mysticwriter.schemas import GeneratedImage, Result
from mysticwriter.utils.logging_config import get_logger

logger = get_logger("mysticwriter.backend")

RETRYABLE_STATUS = frozenset({429, 503})

# A filter value is either a plain value (eq), a list (in) or an explicit (op, value)
FilterValue = Union[str, int, float, bool, Sequence[Any], Tuple[str, Any]]
# Pairs allow the same column twice, e.g. a gte/lte date range
Filters = Union[Dict[str, FilterValue], Sequence[Tuple[str, FilterValue]]]


class MalformedResponse(ValueError):
    """The backend answered 2xx but the payload is missing expected fields."""


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return isinstance(exc, httpx.TransportError)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_filter_params(filters: Optional[Filters]) -> List[Tuple[str, str]]:
    """Translate ``{"user_id": "u1", "date": ("gte", "2024-01-01")}`` into query params."""
    params: List[Tuple[str, str]] = []
    pairs = filters.items() if isinstance(filters, dict) else (filters or [])
    for column, value in pairs:
        if isinstance(value, tuple) and len(value) == 2 and isinstance(value[0], str):
            op, operand = value
            params.append((column, f"{op}.{_format_value(operand)}"))
        elif isinstance(value, (list, set, frozenset)):
            joined = ",".join(_format_value(v) for v in value)
            params.append((column, f"in.({joined})"))
        else:
            params.append((column, f"eq.{_format_value(value)}"))
    return params


class BackendClient:
    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        read_max_retries: int = 3,
        read_base_delay: float = 0.5,
    ):
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        # Default httpx transport timeout applies; there is no pipeline-level timeout
        self._client = http_client or httpx.AsyncClient(base_url=self.base_url, headers=headers)
        if http_client is not None:
            self._client.headers.update(headers)
        self._read_max_retries = max(1, read_max_retries)
        self._read_base_delay = read_base_delay

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "BackendClient":
        settings = settings or get_settings()
        return cls(
            settings.backend_url,
            settings.backend_api_key,
            read_max_retries=settings.read_max_retries,
            read_base_delay=settings.read_base_delay,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(method, path, **kwargs)
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    async def _read(self, path: str, **kwargs) -> Any:
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self._read_max_retries),
            wait=wait_exponential(multiplier=self._read_base_delay),
            reraise=True,
        ):
            with attempt:
                number = attempt.retry_state.attempt_number
                if number > 1:
                    logger.warning("backend_read_retry | path=%s | attempt=%d/%d",
                                   path, number, self._read_max_retries)
                return await self._request("GET", path, **kwargs)

    @staticmethod
    def _fail(operation: str, exc: Exception) -> Result:
        if isinstance(exc, httpx.HTTPStatusError):
            detail = f"HTTP {exc.response.status_code}: {exc.response.text[:200]}"
        else:
            detail = f"{type(exc).__name__}: {exc}"
        logger.warning("backend_call_failed | op=%s | error=%s", operation, detail)
        return Result.failure(detail)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    @staticmethod
    def _records_path(table: str) -> str:
        return f"/api/database/records/{table}"

    async def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order: Optional[str] = None,
        columns: str = "*",
    ) -> Result[List[dict]]:
        """Read rows. ``order`` uses ``column.asc`` / ``column.desc``."""
        params = build_filter_params(filters)
        if columns != "*":
            params.append(("select", columns))
        if order:
            params.append(("order", order))
        try:
            rows = await self._read(self._records_path(table), params=params)
            if rows is None:
                rows = []
            if not isinstance(rows, list):
                raise MalformedResponse(f"expected a list of rows, got {type(rows).__name__}")
            return Result.success(rows)
        except (httpx.HTTPError, ValueError) as exc:
            return self._fail(f"select:{table}", exc)

    async def select_one(
        self,
        table: str,
        filters: Filters,
    ) -> Result[Optional[dict]]:
        """Read at most one row; ``Result.success(None)`` when nothing matches."""
        result = await self.select(table, filters=filters)
        if not result.ok:
            return result
        rows = result.value or []
        return Result.success(rows[0] if rows else None)

    async def insert(self, table: str, rows: Iterable[dict]) -> Result[List[dict]]:
        try:
            created = await self._request(
                "POST",
                self._records_path(table),
                json=list(rows),
                headers={"Prefer": "return=representation"},
            )
            if not isinstance(created, list) or not created:
                raise MalformedResponse("insert returned no rows")
            return Result.success(created)
        except (httpx.HTTPError, ValueError) as exc:
            return self._fail(f"insert:{table}", exc)

    async def update(
        self,
        table: str,
        values: dict,
        filters: Filters,
    ) -> Result[List[dict]]:
        try:
            updated = await self._request(
                "PATCH",
                self._records_path(table),
                params=build_filter_params(filters),
                json=values,
                headers={"Prefer": "return=representation"},
            )
            return Result.success(updated if isinstance(updated, list) else [])
        except (httpx.HTTPError, ValueError) as exc:
            return self._fail(f"update:{table}", exc)

    # ------------------------------------------------------------------
    # Object storage
    # ------------------------------------------------------------------

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/api/storage/buckets/{bucket}/objects/{key}"

    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> Result[dict]:
        """Upload ``data`` under ``key``. Success value is ``{"url", "key"}``.

        A reply that names the stored key without a URL gets the public object URL.
        """
        try:
            payload = await self._request(
                "PUT",
                f"/api/storage/buckets/{bucket}/objects/{key}",
                files={"file": (key, data, content_type)},
            )
            payload = payload if isinstance(payload, dict) else {}
            stored_key = payload.get("key") or ""
            url = payload.get("url") or ""
            if url.startswith("/"):
                url = f"{self.base_url}{url}"
            elif not url and stored_key:
                url = self.public_url(bucket, stored_key)
            return Result.success({"url": url, "key": stored_key})
        except (httpx.HTTPError, ValueError) as exc:
            return self._fail(f"upload:{bucket}", exc)

    # ------------------------------------------------------------------
    # AI proxy
    # ------------------------------------------------------------------

    async def generate_image(self, prompt: str, model: str) -> Result[GeneratedImage]:
        try:
            payload = await self._request(
                "POST",
                "/api/ai/image/generation",
                json={"model": model, "prompt": prompt},
            )
            data = payload.get("data") if isinstance(payload, dict) else None
            if not data or not isinstance(data, list) or not isinstance(data[0], dict):
                raise MalformedResponse("image response has no data entries")
            image = GeneratedImage.model_validate(data[0])
            if not image.url and not image.b64_json:
                raise MalformedResponse("no image URL or base64 data in response")
            return Result.success(image)
        except (httpx.HTTPError, ValueError) as exc:
            return self._fail("generate_image", exc)

    async def chat_completion(
        self,
        model: str,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> Result[str]:
        try:
            payload = await self._request(
                "POST",
                "/api/ai/chat/completion",
                json={
                    "model": model,
                    "messages": messages,
                    "temperature": temperature,
                    "maxTokens": max_tokens,
                },
            )
            content = _extract_chat_content(payload)
            if not content:
                raise MalformedResponse("chat response has no message content")
            return Result.success(content)
        except (httpx.HTTPError, ValueError) as exc:
            return self._fail("chat_completion", exc)


def _extract_chat_content(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if isinstance(message, dict) and isinstance(message.get("content"), str):
            return message["content"]
    for key in ("text", "content"):
        if isinstance(payload.get(key), str):
            return payload[key]
    return None
