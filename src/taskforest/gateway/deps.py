"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store、缓存与会话

Store 实例、QueryCache 与 InvalidationCoordinator 通过 app.state 管理，
在 lifespan 中初始化/清理；会话用户按请求解析。
"""

from fastapi import Depends, Request
from taskforest.core.auth import AuthSession
from taskforest.core.config import get_default_user_id
from taskforest.core.store import StoreGroup

from .services.task_service import TaskService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_auth_session(
    request: Request,
    store_group: StoreGroup = Depends(get_store_group),
) -> AuthSession:
    """按请求构建会话：X-User-Id 请求头优先，其次默认用户"""
    user_id = request.headers.get("X-User-Id") or get_default_user_id()
    return AuthSession(store_group.profile_store, user_id)


def get_task_service(
    request: Request,
    store_group: StoreGroup = Depends(get_store_group),
    auth: AuthSession = Depends(get_auth_session),
) -> TaskService:
    """构建 TaskService（缓存与失效协调器为进程级共享）"""
    return TaskService(
        store_group,
        request.app.state.query_cache,
        request.app.state.invalidation_coordinator,
        auth,
    )
