"""LoggingMiddleware

为每个 HTTP 请求绑定 request_id 与会话用户，记录耗时与状态码。
调用方已携带 X-Request-ID 时沿用，便于与前端日志对齐。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from taskforest.core.logging_config import bind_request_context
from ulid import ULID

log = structlog.get_logger()


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(ULID())
        bind_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            user_id=request.headers.get("X-User-Id"),
        )
        start_time = time.monotonic()

        response = await call_next(request)

        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        if response.status_code >= 500:
            await log.awarning(
                "request_failed",
                status_code=response.status_code,
                elapsed_ms=elapsed_ms,
            )
        else:
            await log.ainfo(
                "request_completed",
                status_code=response.status_code,
                elapsed_ms=elapsed_ms,
            )

        response.headers["X-Request-ID"] = request_id
        return response
