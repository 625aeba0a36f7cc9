"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 进程级查询缓存 + 路由注册。
"""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from taskforest.core.cache import InvalidationCoordinator, QueryCache
from taskforest.core.config import get_db_path
from taskforest.core.logging_config import setup_logging
from taskforest.core.store import create_store_group

from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, profiles, tasks

log = structlog.get_logger()


def init_cache_state(app: FastAPI) -> QueryCache:
    """初始化进程级缓存与失效协调器（所有请求共享）"""
    cache = QueryCache()
    app.state.query_cache = cache
    app.state.invalidation_coordinator = InvalidationCoordinator(cache)
    return cache


def setup_logfire(app: FastAPI) -> None:
    """Logfire APM（apm extra）：LOGFIRE_SEND_TO_LOGFIRE=true 时启用

    初始化失败时只记录告警，任务服务以纯本地日志继续运行。
    """
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return
    try:
        import logfire

        logfire.configure()
        logfire.instrument_fastapi(app)
    except Exception as e:
        log.warning("logfire_init_failed", error_type=type(e).__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB 与缓存，关闭时清理连接"""
    db_path = get_db_path()
    app.state.store_group = await create_store_group(db_path)
    init_cache_state(app)
    log.info("taskforest_gateway_started", db_path=db_path)

    yield

    # 关闭：清理数据库连接
    if hasattr(app.state, "store_group") and app.state.store_group:
        await app.state.store_group.conn.close()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="TaskForest Gateway",
        version="0.1.0",
        description="层级任务管理 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    # 初始化日志
    setup_logging()
    setup_logfire(app)

    # 注册路由
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(profiles.router, tags=["profiles"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
