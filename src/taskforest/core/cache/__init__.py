"""TaskForest Core Cache -- 查询缓存与失效协调"""

from .invalidation import InvalidationCoordinator
from .keys import CacheKey, detail_key, list_key, progress_key
from .query_cache import QueryCache

__all__ = [
    "CacheKey",
    "QueryCache",
    "InvalidationCoordinator",
    "list_key",
    "detail_key",
    "progress_key",
]
