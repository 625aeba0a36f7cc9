"""任务层级遍历 -- 后代收集与父子环检测

遍历使用显式工作队列，深度只受任务树实际深度限制，不受解释器递归上限影响。
"""

from collections import deque

import structlog

from .errors import CycleError
from .store.protocols import TaskReader

log = structlog.get_logger()


async def collect_descendant_ids(store: TaskReader, task_id: str) -> set[str]:
    """收集 task_id 的全部后代 ID（不含自身）

    Args:
        store: 任务只读接口
        task_id: 子树根

    Returns:
        后代 ID 集合
    """
    descendants: set[str] = set()
    queue: deque[str] = deque([task_id])
    while queue:
        current = queue.popleft()
        for child_id in await store.list_child_ids(current):
            # 已见过的节点说明存储中已有环，跳过避免死循环
            if child_id in descendants or child_id == task_id:
                continue
            descendants.add(child_id)
            queue.append(child_id)
    return descendants


async def ensure_no_cycle(
    store: TaskReader,
    task_id: str,
    new_parent_id: str | None,
) -> None:
    """校验把 task_id 挂到 new_parent_id 下不会形成环

    Raises:
        CycleError: new_parent_id 是任务自身或其后代
    """
    if new_parent_id is None:
        return
    if new_parent_id == task_id:
        raise CycleError(task_id, new_parent_id)

    descendants = await collect_descendant_ids(store, task_id)
    if new_parent_id in descendants:
        log.warning(
            "reparent_cycle_rejected",
            task_id=task_id,
            new_parent_id=new_parent_id,
            descendant_count=len(descendants),
        )
        raise CycleError(task_id, new_parent_id)
