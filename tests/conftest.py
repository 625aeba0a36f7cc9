"""全局 pytest 配置 -- 临时 SQLite 数据库与内存假存储 fixture"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import aiosqlite
import pytest
import pytest_asyncio
from taskforest.core.models import Profile, Task, TaskFilter
from taskforest.core.store import StoreGroup, create_store_group

# 测试用户
ALICE = "01JUSER0000000000000ALICE1"
BOB = "01JUSER00000000000000BOB01"


class InMemoryTaskStore:
    """内存任务存储，只实现读接口，用于遍历与故障注入测试"""

    def __init__(self) -> None:
        self.tasks: dict[str, Task] = {}
        self.children: dict[str | None, list[str]] = {}
        self.fail_on_children_of: set[str] = set()
        self.list_calls = 0
        self._clock = datetime(2026, 1, 1, tzinfo=UTC)

    def add(
        self,
        task_id: str,
        parent_id: str | None = None,
        is_completed: bool = False,
    ) -> Task:
        self._clock += timedelta(seconds=1)
        task = Task(
            task_id=task_id,
            parent_id=parent_id,
            title=task_id,
            is_completed=is_completed,
            created_at=self._clock,
            updated_at=self._clock,
        )
        self.tasks[task_id] = task
        self.children.setdefault(parent_id, []).insert(0, task_id)
        return task

    async def get_task(self, task_id: str) -> Task | None:
        return self.tasks.get(task_id)

    async def list_tasks(
        self,
        parent_id: str | None,
        task_filter: TaskFilter | None = None,
    ) -> list[Task]:
        self.list_calls += 1
        if parent_id in self.fail_on_children_of:
            raise ConnectionError(f"store unreachable while listing {parent_id}")
        # children 索引按插入倒序维护，即 created_at 倒序
        return [self.tasks[task_id] for task_id in self.children.get(parent_id, [])]

    async def list_child_ids(self, task_id: str) -> list[str]:
        return [t.task_id for t in await self.list_tasks(task_id)]


@pytest.fixture
def alice_id() -> str:
    return ALICE


@pytest.fixture
def bob_id() -> str:
    return BOB


@pytest.fixture
def memory_store() -> InMemoryTaskStore:
    """内存任务存储"""
    return InMemoryTaskStore()


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """已初始化、预置 alice/bob 两个用户的 StoreGroup"""
    group = await create_store_group(str(tmp_db_path))
    now = datetime.now(UTC)
    for profile_id, username in ((ALICE, "alice"), (BOB, "bob")):
        await group.profile_store.create_profile(
            Profile(
                profile_id=profile_id,
                username=username,
                created_at=now,
                updated_at=now,
            )
        )
    await group.conn.commit()
    yield group
    await group.conn.close()


@pytest_asyncio.fixture
async def db_conn(tmp_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接（无预置数据）"""
    from taskforest.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_path / "bare.db"))
    await init_db(conn)
    yield conn
    await conn.close()
