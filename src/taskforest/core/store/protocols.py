"""Store Protocol 接口定义

定义 TaskStore、ProfileStore 的抽象接口，
使用 Python Protocol 实现结构化子类型（duck typing）。
进度聚合与层级遍历只依赖这里声明的读操作。
"""

from typing import Protocol

from ..models.inputs import TaskFilter
from ..models.profile import Profile
from ..models.task import Task


class TaskReader(Protocol):
    """Task 只读接口 -- 进度聚合与环检测所需的最小集合"""

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        ...

    async def list_tasks(
        self,
        parent_id: str | None,
        task_filter: TaskFilter | None = None,
    ) -> list[Task]:
        """查询直接子任务，按 created_at 倒序"""
        ...

    async def list_child_ids(self, task_id: str) -> list[str]:
        """查询直接子任务 ID"""
        ...


class TaskStore(TaskReader, Protocol):
    """Task 存储接口"""

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        ...

    async def update_task(self, task_id: str, fields: dict, updated_at: str) -> None:
        """部分更新任务字段"""
        ...

    async def reparent_children(
        self,
        old_parent_id: str | None,
        new_parent_id: str,
        updated_at: str,
    ) -> int:
        """批量移动直接子任务"""
        ...

    async def delete_task(self, task_id: str) -> int:
        """删除任务（级联删除子树）"""
        ...

    async def count_children(self, task_id: str) -> int:
        """统计直接子任务数量"""
        ...


class ProfileStore(Protocol):
    """Profile 存储接口"""

    async def create_profile(self, profile: Profile) -> None:
        """创建用户资料"""
        ...

    async def get_profile(self, profile_id: str) -> Profile | None:
        """根据 profile_id 查询用户资料"""
        ...

    async def list_profiles(self) -> list[Profile]:
        """查询全部用户资料"""
        ...
