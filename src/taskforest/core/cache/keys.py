"""缓存键模型

三个分区的键：
- List:     (LIST, parent_id, TaskFilter)
- Detail:   (DETAIL, task_id, None)
- Progress: (PROGRESS, task_id, None)
"""

from typing import NamedTuple

from ..models.enums import CachePartition
from ..models.inputs import TaskFilter


class CacheKey(NamedTuple):
    """缓存键；partition 决定失效时归属的分区"""

    partition: CachePartition
    ident: str | None
    task_filter: TaskFilter | None = None


def list_key(parent_id: str | None, task_filter: TaskFilter | None = None) -> CacheKey:
    """列表键；缺省筛选条件归一为 TaskFilter()，避免同一视图两份缓存"""
    return CacheKey(CachePartition.LIST, parent_id, task_filter or TaskFilter())


def detail_key(task_id: str) -> CacheKey:
    return CacheKey(CachePartition.DETAIL, task_id)


def progress_key(task_id: str) -> CacheKey:
    return CacheKey(CachePartition.PROGRESS, task_id)
