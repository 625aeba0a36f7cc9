"""枚举定义

包含变更类型 MutationKind、缓存分区 CachePartition 与缓存条目状态 EntryState。
"""

from enum import StrEnum


class MutationKind(StrEnum):
    """成功落盘的变更类型，驱动缓存失效"""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class CachePartition(StrEnum):
    """缓存分区 -- 三个分区彼此独立"""

    LIST = "list"
    DETAIL = "detail"
    PROGRESS = "progress"


class EntryState(StrEnum):
    """缓存条目新鲜度：Fresh -> Stale -> (refetch) -> Fresh

    没有 Error 状态：重新读取失败时条目直接移除，下次读取重试。
    """

    FRESH = "fresh"
    STALE = "stale"


# 失效时需要全局清扫的分区，顺序即日志输出顺序
ALL_PARTITIONS: tuple[CachePartition, ...] = (
    CachePartition.LIST,
    CachePartition.DETAIL,
    CachePartition.PROGRESS,
)
