"""API 요청 로깅 미들웨어 (Axiom + 표준 logging).

API request logging middleware.
Builds one structured event per request (method, path, params, masked body,
status, duration, error detail) and ships it to Axiom when configured.
Every event is also written to the ``app.access`` logger.
Sensitive fields (password, token, secret) are masked.
"""

import json
import logging
import re
import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from axiom_py import Client as AxiomClient

from app.config import settings

logger = logging.getLogger("app.access")

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

# 본문이 큰 엔드포인트 — 계획 문서 전체를 로그에 남기지 않음
# Request bodies longer than this are truncated (plan progress maps can be large)
_MAX_BODY_CHARS = 2000


def mask_sensitive(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else mask_sensitive(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item, depth + 1) for item in data[:20]]
    return data


def _truncate(value: Any) -> Any:
    serialized = json.dumps(value, ensure_ascii=False, default=str)
    if len(serialized) > _MAX_BODY_CHARS:
        return serialized[:_MAX_BODY_CHARS] + "...(truncated)"
    return value


async def _read_error_detail(response: Response) -> tuple[str | None, Response]:
    """에러 응답 본문에서 detail을 추출하고 응답을 다시 감쌉니다.

    Consume the streamed error body, extract ``detail``, and return a new
    response carrying the same bytes.
    """
    resp_body = b""
    async for chunk in response.body_iterator:
        resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

    try:
        error_data = json.loads(resp_body)
        detail = error_data.get("detail", str(error_data)) if isinstance(error_data, dict) else str(error_data)
        if not isinstance(detail, str):
            detail = json.dumps(detail, default=str)
    except (json.JSONDecodeError, UnicodeDecodeError):
        detail = resp_body.decode("utf-8", errors="replace")
    if len(detail) > 500:
        detail = detail[:500] + "..."

    rewrapped = Response(
        content=resp_body,
        status_code=response.status_code,
        headers=dict(response.headers),
        media_type=response.media_type,
    )
    return detail, rewrapped


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 로깅하는 미들웨어.

    Middleware that logs all API requests and responses to the ``app.access``
    logger and, when AXIOM_API_TOKEN/AXIOM_DATASET are set, to Axiom.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    def _emit(self, event: dict[str, Any]) -> None:
        level = logging.WARNING if event["status_code"] >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s -> %s (%.2f ms)%s",
            event["method"],
            event["path"],
            event["status_code"],
            event["duration_ms"],
            f" error={event['error']}" if "error" in event else "",
        )
        if self._client is None:
            return
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            # 로깅 실패가 요청 처리에 영향주지 않도록 — Never break a request on log failure
            logger.exception("Axiom ingest failed")

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.time()
        method = request.method
        path = request.url.path
        query_params = dict(request.query_params) if request.query_params else None

        request_body: Any = None
        if method in ("POST", "PUT", "PATCH"):
            try:
                body_bytes = await request.body()
                if body_bytes:
                    request_body = _truncate(mask_sensitive(json.loads(body_bytes)))
            except (json.JSONDecodeError, UnicodeDecodeError):
                request_body = "(non-json body)"

        error_detail: str | None = None
        status_code: int = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            if status_code >= 400:
                error_detail, response = await _read_error_detail(response)
        except Exception as exc:
            error_detail = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event: dict[str, Any] = {
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            }
            if query_params:
                event["query_params"] = mask_sensitive(query_params)
            if request_body is not None:
                event["request_body"] = request_body
            if error_detail:
                event["error"] = error_detail
            self._emit(event)

        return response
