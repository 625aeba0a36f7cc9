"""TaskService -- 任务读写业务逻辑

读：列表/详情/进度经 QueryCache 读取，缺失或 Stale 时回源。
写：校验 -> 单事务写入 -> 提交成功后通知 InvalidationCoordinator。
失败的写入不会触发失效，也不会部分生效。
"""

from datetime import UTC, datetime

import structlog
from taskforest.core.auth import AuthSession
from taskforest.core.cache import (
    InvalidationCoordinator,
    QueryCache,
    detail_key,
    list_key,
    progress_key,
)
from taskforest.core.config import get_title_max_length
from taskforest.core.errors import (
    ChildrenReparentError,
    NotFoundError,
    StoreError,
    TaskValidationError,
)
from taskforest.core.hierarchy import ensure_no_cycle
from taskforest.core.models import (
    CreateTaskInput,
    MutationKind,
    Task,
    TaskFilter,
    TaskWithProfile,
    UpdateTaskInput,
)
from taskforest.core.progress import ProgressAggregator
from taskforest.core.store import StoreGroup, translate_store_errors, write_transaction
from ulid import ULID

log = structlog.get_logger()


class TaskService:
    """任务业务服务"""

    def __init__(
        self,
        store_group: StoreGroup,
        cache: QueryCache,
        coordinator: InvalidationCoordinator,
        auth: AuthSession,
    ) -> None:
        self._stores = store_group
        self._cache = cache
        self._coordinator = coordinator
        self._auth = auth
        self._aggregator = ProgressAggregator(store_group.task_store)

    # ---- 读 ----

    async def list_tasks(
        self,
        parent_id: str | None,
        task_filter: TaskFilter | None = None,
    ) -> list[TaskWithProfile]:
        """查询直接子任务列表（parent_id 为 None 时查询根任务）"""

        async def load() -> list[TaskWithProfile]:
            with translate_store_errors("list_tasks"):
                return await self._stores.task_store.list_tasks(parent_id, task_filter)

        return await self._cache.fetch(list_key(parent_id, task_filter), load)

    async def get_task(self, task_id: str) -> TaskWithProfile:
        """查询任务详情

        Raises:
            NotFoundError: 任务不存在
        """

        async def load() -> TaskWithProfile:
            with translate_store_errors("get_task"):
                task = await self._stores.task_store.get_task(task_id)
            if task is None:
                raise NotFoundError(task_id)
            return task

        return await self._cache.fetch(detail_key(task_id), load)

    async def get_progress(self, task_id: str) -> float:
        """查询任务进度（聚合结果缓存在 Progress 分区）

        Raises:
            NotFoundError: 任务不存在
            DerivedComputationError: 子树读取失败
        """
        return await self._cache.fetch(
            progress_key(task_id),
            lambda: self._aggregator.compute_progress(task_id),
        )

    async def count_children(self, task_id: str) -> int:
        """统计直接子任务数量（不缓存）"""
        with translate_store_errors("count_children"):
            return await self._stores.task_store.count_children(task_id)

    # ---- 写 ----

    async def create_task(self, data: CreateTaskInput) -> Task:
        """创建任务

        流程：
        1. 校验标题（在任何 store 调用之前）
        2. 校验父任务存在
        3. 写入任务，提交后失效缓存
        4. inherit_children 时把父任务原有子任务挂到新任务下（独立事务）

        Raises:
            TaskValidationError: 标题为空或过长
            NotFoundError: 父任务不存在
            StoreError: 写入失败
            ChildrenReparentError: 任务已创建，但子任务继承失败
        """
        title = self._validate_title(data.title)

        if data.parent_id is not None:
            await self._require_task(data.parent_id)

        creator = await self._auth.current_user()
        creator_id = creator.profile_id if creator is not None else None

        now = datetime.now(UTC)
        task = Task(
            task_id=str(ULID()),
            parent_id=data.parent_id,
            title=title,
            description=data.description.strip(),
            is_completed=False,
            created_by=creator_id,
            assigned_to=data.assigned_to or creator_id,
            created_at=now,
            updated_at=now,
        )

        async with write_transaction(self._stores.conn, "create_task"):
            await self._stores.task_store.create_task(task)
        self._coordinator.on_mutation_success(MutationKind.CREATE, task.task_id)

        await log.ainfo(
            "task_created",
            task_id=task.task_id,
            parent_id=task.parent_id,
            inherit_children=data.inherit_children,
        )

        if data.inherit_children:
            await self._inherit_children(task)

        return task

    async def _inherit_children(self, task: Task) -> None:
        """把新任务的兄弟任务全部挂到新任务下

        失败时不回滚已创建的任务，错误单独上抛。
        """
        try:
            async with write_transaction(self._stores.conn, "reparent_children"):
                moved = await self._stores.task_store.reparent_children(
                    old_parent_id=task.parent_id,
                    new_parent_id=task.task_id,
                    updated_at=datetime.now(UTC).isoformat(),
                )
        except StoreError as e:
            log.error(
                "task_inherit_children_failed",
                task_id=task.task_id,
                error_type=type(e.original_error).__name__,
            )
            raise ChildrenReparentError(task, e.original_error) from e

        self._coordinator.on_mutation_success(MutationKind.UPDATE, task.task_id)
        await log.ainfo("task_children_inherited", task_id=task.task_id, moved=moved)

    async def update_task(self, task_id: str, data: UpdateTaskInput) -> TaskWithProfile:
        """部分更新任务

        Raises:
            TaskValidationError: 标题为空或过长
            NotFoundError: 任务或新父任务不存在
            CycleError: 新父任务是任务自身或其后代
            StoreError: 写入失败
        """
        changes = data.changes()
        if "title" in changes:
            if changes["title"] is None:
                raise TaskValidationError("title", "title must not be null")
            changes["title"] = self._validate_title(changes["title"])
        for field in ("description", "is_completed"):
            if field in changes and changes[field] is None:
                raise TaskValidationError(field, f"{field} must not be null")

        await self._require_task(task_id)

        if "parent_id" in changes and changes["parent_id"] is not None:
            new_parent_id = changes["parent_id"]
            with translate_store_errors("ensure_no_cycle"):
                await ensure_no_cycle(self._stores.task_store, task_id, new_parent_id)
            await self._require_task(new_parent_id)

        async with write_transaction(self._stores.conn, "update_task"):
            await self._stores.task_store.update_task(
                task_id,
                changes,
                updated_at=datetime.now(UTC).isoformat(),
            )
        self._coordinator.on_mutation_success(MutationKind.UPDATE, task_id)

        await log.ainfo("task_updated", task_id=task_id, fields=sorted(changes))

        with translate_store_errors("get_task"):
            updated = await self._stores.task_store.get_task(task_id)
        if updated is None:
            # 并发删除：写入之后任务已不存在
            raise NotFoundError(task_id)
        return updated

    async def delete_task(self, task_id: str) -> str | None:
        """删除任务及其整棵子树

        必须在删除前读取 parent_id，删除后该记录不可再查询。

        Returns:
            删除前的父任务 ID（供调用方导航使用）

        Raises:
            NotFoundError: 任务不存在
            StoreError: 删除失败
        """
        task = await self._require_task(task_id)
        prior_parent_id = task.parent_id

        async with write_transaction(self._stores.conn, "delete_task"):
            deleted = await self._stores.task_store.delete_task(task_id)
        if deleted == 0:
            raise NotFoundError(task_id)

        self._coordinator.on_mutation_success(
            MutationKind.DELETE,
            task_id,
            prior_parent_id=prior_parent_id,
        )
        await log.ainfo("task_deleted", task_id=task_id, prior_parent_id=prior_parent_id)
        return prior_parent_id

    # ---- 内部 ----

    async def _require_task(self, task_id: str) -> Task:
        """直接读取存储（不经缓存），不存在时抛 NotFoundError"""
        with translate_store_errors("get_task"):
            task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    @staticmethod
    def _validate_title(title: str) -> str:
        title = title.strip()
        if not title:
            raise TaskValidationError("title", "title must not be empty")
        max_length = get_title_max_length()
        if len(title) > max_length:
            raise TaskValidationError("title", f"title must be at most {max_length} characters")
        return title
