"""InvalidationCoordinator -- 变更成功后的缓存失效扇出

策略：任何一次成功的 create / update / delete 都把 List、Detail、Progress
三个分区全部标记为 Stale。

- 重新挂载会同时改变两个父任务的子列表，筛选条件也可能被任意数量地满足或违反，
  因此列表不能按父任务或筛选条件收窄
- 祖先任务的详情与进度都可能随任一后代变化，而缓存没有维护祖先索引

只在存储确认成功之后调用，失败的变更从不触发失效。
"""

import structlog

from ..models.enums import ALL_PARTITIONS, MutationKind
from .query_cache import QueryCache

log = structlog.get_logger()


class InvalidationCoordinator:
    """缓存失效协调器"""

    def __init__(self, cache: QueryCache) -> None:
        self._cache = cache

    def on_mutation_success(
        self,
        kind: MutationKind,
        task_id: str,
        prior_parent_id: str | None = None,
    ) -> None:
        """变更成功后全局失效

        Args:
            kind: 变更类型
            task_id: 被变更的任务
            prior_parent_id: 删除前的父任务，仅用于日志，不收窄失效范围
        """
        marked = {
            partition.value: self._cache.invalidate_partition(partition)
            for partition in ALL_PARTITIONS
        }
        log.info(
            "task_cache_invalidated",
            kind=kind.value,
            task_id=task_id,
            prior_parent_id=prior_parent_id,
            **marked,
        )
