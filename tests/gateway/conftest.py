"""gateway 测试配置 -- TaskService 实例与 httpx AsyncClient fixture"""

from collections.abc import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from taskforest.core.auth import AuthSession
from taskforest.core.cache import InvalidationCoordinator, QueryCache
from taskforest.gateway.services.task_service import TaskService


@pytest_asyncio.fixture
async def query_cache() -> QueryCache:
    return QueryCache()


@pytest_asyncio.fixture
async def service(store_group, query_cache, alice_id) -> TaskService:
    """以 alice 身份登录的 TaskService"""
    return TaskService(
        store_group,
        query_cache,
        InvalidationCoordinator(query_cache),
        AuthSession(store_group.profile_store, alice_id),
    )


@pytest_asyncio.fixture
async def app(store_group, monkeypatch):
    """创建测试用 FastAPI app 实例（手动初始化，绕过 lifespan）"""
    monkeypatch.setenv("LOGFIRE_SEND_TO_LOGFIRE", "false")
    monkeypatch.delenv("TASKFOREST_DEFAULT_USER_ID", raising=False)

    from taskforest.gateway.main import create_app, init_cache_state

    application = create_app()
    application.state.store_group = store_group
    init_cache_state(application)
    return application


@pytest_asyncio.fixture
async def client(app, alice_id) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient，默认以 alice 身份请求"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"X-User-Id": alice_id},
    ) as ac:
        yield ac
