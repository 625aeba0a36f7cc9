"""进度聚合 -- 由完整子树推导任务完成百分比

规则：
- 无子任务：is_completed 为真返回 100，否则 0
- 有子任务：直接子任务进度的算术平均（每个子树计一份，与叶子数量无关）

每次调用都重新遍历，不做记忆化；缓存由调用方负责。
遍历为显式栈上的后序遍历，避免深树触发递归上限。
"""

import time

import structlog

from .errors import DerivedComputationError, NotFoundError
from .models.status import AggregateStatus, LeafStatus, classify_status
from .models.task import Task
from .store.protocols import TaskReader

log = structlog.get_logger()


class ProgressAggregator:
    """进度聚合器 -- 对任务存储只读，无内部可变状态"""

    def __init__(self, store: TaskReader) -> None:
        self._store = store

    async def compute_progress(self, task_id: str) -> float:
        """计算任务完成百分比 [0, 100]

        Args:
            task_id: 必须存在的任务 ID

        Returns:
            完成百分比

        Raises:
            NotFoundError: 根任务不存在
            DerivedComputationError: 任一后代读取失败，整体进度不可用
        """
        subtree = await self.compute_subtree(task_id)
        return subtree[task_id]

    async def compute_subtree(self, task_id: str) -> dict[str, float]:
        """一次后序遍历算出子树内每个任务的完成百分比

        Returns:
            task_id -> 完成百分比，包含根任务自身

        Raises:
            NotFoundError: 根任务不存在
            DerivedComputationError: 任一后代读取失败，整体进度不可用
        """
        start_time = time.monotonic()

        try:
            root = await self._store.get_task(task_id)
        except Exception as e:
            raise DerivedComputationError(task_id, task_id, e) from e
        if root is None:
            raise NotFoundError(task_id)

        results: dict[str, float] = {}
        visited: set[str] = {root.task_id}
        # 栈帧：(任务, 已展开的完成度变体)；变体为 None 表示尚未读取子任务
        stack: list[tuple[Task, AggregateStatus | None]] = [(root, None)]
        node_count = 0

        while stack:
            task, status = stack.pop()

            if status is not None:
                # 子任务已全部算完，回到父节点求平均
                percents = [results[child_id] for child_id in status.child_ids]
                results[task.task_id] = sum(percents) / len(percents)
                continue

            node_count += 1
            children = await self._fetch_children(task_id, task.task_id)
            variant = classify_status(task, children)

            if isinstance(variant, LeafStatus):
                results[task.task_id] = variant.percent
                continue

            stack.append((task, variant))
            for child in children:
                if child.task_id in visited:
                    raise DerivedComputationError(task_id, task.task_id)
                visited.add(child.task_id)
                stack.append((child, None))

        log.debug(
            "progress_computed",
            task_id=task_id,
            progress=results[root.task_id],
            node_count=node_count,
            elapsed_ms=int((time.monotonic() - start_time) * 1000),
        )
        return results

    async def _fetch_children(self, root_id: str, task_id: str) -> list[Task]:
        """读取直接子任务（含已完成），失败即整体失败"""
        try:
            return await self._store.list_tasks(task_id)
        except Exception as e:
            log.warning(
                "progress_child_fetch_failed",
                task_id=root_id,
                failed_task_id=task_id,
                error_type=type(e).__name__,
            )
            raise DerivedComputationError(root_id, task_id, e) from e
