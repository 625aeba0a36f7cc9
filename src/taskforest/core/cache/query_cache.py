"""QueryCache -- 进程内查询结果缓存

缓存只保存存储状态的投影，从不产生数据：
- 值只会被整体写入（重新读取）或按分区整体清除（失效）
- 失效时分区内的值被丢弃，只留下键级 Stale 标记，到下一次失效为止
- 同一个键上被新请求取代的旧响应直接丢弃
- 跨越失效发出的请求，其响应不会以 Fresh 写回
- 读取失败时条目被移除，下次读取重试
"""

import itertools
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from ..models.enums import ALL_PARTITIONS, CachePartition, EntryState
from .keys import CacheKey

log = structlog.get_logger()

T = TypeVar("T")


class QueryCache:
    """三分区查询缓存（List / Detail / Progress）"""

    def __init__(self) -> None:
        # 只保存 Fresh 值
        self._entries: dict[CacheKey, Any] = {}
        # 最近一次失效时仍为 Fresh 的键；下一次失效整体替换
        self._stale: dict[CachePartition, set[CacheKey]] = {
            partition: set() for partition in ALL_PARTITIONS
        }
        # 每个键最近一次发出的请求序号
        self._latest_request: dict[CacheKey, int] = {}
        self._request_counter = itertools.count(1)
        # 分区代数：每次失效 +1
        self._generations: dict[CachePartition, int] = dict.fromkeys(ALL_PARTITIONS, 0)

    def __len__(self) -> int:
        """当前保存的 Fresh 值数量"""
        return len(self._entries)

    async def fetch(self, key: CacheKey, loader: Callable[[], Awaitable[T]]) -> T:
        """读取缓存；条目缺失或 Stale 时调用 loader 重新读取

        Args:
            key: 缓存键
            loader: 从存储读取最新值的协程工厂

        Returns:
            Fresh 缓存值或本次读取结果
        """
        if key in self._entries:
            return self._entries[key]

        request_id = next(self._request_counter)
        self._latest_request[key] = request_id
        generation = self._generations[key.partition]

        try:
            value = await loader()
        except Exception:
            if self._latest_request.get(key) == request_id:
                self._latest_request.pop(key, None)
                self._stale[key.partition].discard(key)
            raise

        if self._latest_request.get(key) != request_id:
            # 已被同键的新请求取代，由新请求负责写回
            log.debug("cache_response_superseded", partition=key.partition, ident=key.ident)
            return value

        self._latest_request.pop(key, None)
        if self._generations[key.partition] != generation:
            # 请求在途期间分区被失效，结果可能早于变更，不能当作 Fresh
            log.debug("cache_response_outdated", partition=key.partition, ident=key.ident)
            return value

        self._stale[key.partition].discard(key)
        self._entries[key] = value
        return value

    def invalidate_partition(self, partition: CachePartition) -> int:
        """清除分区内全部值，并把这些键标记为 Stale

        Returns:
            本次由 Fresh 变为 Stale 的条目数
        """
        self._generations[partition] += 1
        dropped = [key for key in self._entries if key.partition is partition]
        for key in dropped:
            del self._entries[key]
        self._stale[partition] = set(dropped)
        return len(dropped)

    def state(self, key: CacheKey) -> EntryState | None:
        """查询条目状态；None 表示条目不存在"""
        if key in self._entries:
            return EntryState.FRESH
        if key in self._stale[key.partition]:
            return EntryState.STALE
        return None

    def keys(self, partition: CachePartition | None = None) -> list[CacheKey]:
        """列出持有 Fresh 值的缓存键，可按分区过滤"""
        return [
            key for key in self._entries if partition is None or key.partition is partition
        ]

    def clear(self) -> None:
        """清空全部条目；清空前发出的在途请求不会写回"""
        self._entries.clear()
        self._latest_request.clear()
        for partition in ALL_PARTITIONS:
            self._stale[partition].clear()
            self._generations[partition] += 1
