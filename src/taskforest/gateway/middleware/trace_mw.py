"""TraceMiddleware

为单个任务的读写绑定 trace_id，同一任务的日志可以串起来查看。
trace_id 从 /api/tasks/{task_id}[/...] 路径中提取。
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from taskforest.core.logging_config import bind_task_trace

# ULID 字符串长度
_TASK_ID_LENGTH = 26


def extract_task_id(path: str) -> str | None:
    """从请求路径提取 task_id，不是任务路径时返回 None"""
    parts = path.strip("/").split("/")
    for i, part in enumerate(parts):
        if part == "tasks" and i + 1 < len(parts):
            task_id = parts[i + 1]
            if len(task_id) == _TASK_ID_LENGTH:
                return task_id
    return None


class TraceMiddleware(BaseHTTPMiddleware):
    """任务级追踪中间件 -- 为任务操作绑定 trace_id"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        task_id = extract_task_id(request.url.path)
        if task_id:
            bind_task_trace(task_id)

        return await call_next(request)
