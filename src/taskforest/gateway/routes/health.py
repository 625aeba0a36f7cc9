"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 SQLite 连通性、外键约束、磁盘空间。
"""

import shutil

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse
from taskforest.core.store.sqlite_init import verify_foreign_keys

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查 -- 验证核心依赖可用性

    检查项：
    1. sqlite: 数据库连通性
    2. foreign_keys: 级联删除依赖的外键约束是否开启
    3. disk_space_mb: 磁盘剩余空间
    """
    checks = {}
    all_ok = True

    # 1. SQLite 连通性检查
    try:
        store_group = request.app.state.store_group
        cursor = await store_group.conn.execute("SELECT 1")
        await cursor.fetchone()
        checks["sqlite"] = "ok"
    except Exception as e:
        log.warning("ready_check_sqlite_failed", error=str(e))
        checks["sqlite"] = f"error: {str(e)}"
        all_ok = False

    # 2. 外键约束检查
    if checks["sqlite"] == "ok":
        try:
            enabled = await verify_foreign_keys(request.app.state.store_group.conn)
            checks["foreign_keys"] = "ok" if enabled else "disabled"
            all_ok = all_ok and enabled
        except Exception as e:
            checks["foreign_keys"] = f"error: {str(e)}"
            all_ok = False
    else:
        checks["foreign_keys"] = "skipped"

    # 3. 磁盘空间检查
    try:
        disk_usage = shutil.disk_usage("/")
        checks["disk_space_mb"] = disk_usage.free // (1024 * 1024)
    except Exception:
        checks["disk_space_mb"] = 0
        all_ok = False

    status_code = 200 if all_ok else 503
    status_text = "ready" if all_ok else "not_ready"

    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_text,
            "checks": checks,
        },
    )
