"""TaskForest Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import ALL_PARTITIONS, CachePartition, EntryState, MutationKind
from .inputs import CreateTaskInput, TaskFilter, UpdateTaskInput
from .profile import Profile
from .status import AggregateStatus, CompletionStatus, LeafStatus, classify_status
from .task import Task, TaskWithProfile

__all__ = [
    # 枚举
    "MutationKind",
    "CachePartition",
    "EntryState",
    "ALL_PARTITIONS",
    # Task
    "Task",
    "TaskWithProfile",
    # Profile
    "Profile",
    # 输入
    "TaskFilter",
    "CreateTaskInput",
    "UpdateTaskInput",
    # 完成度变体
    "LeafStatus",
    "AggregateStatus",
    "CompletionStatus",
    "classify_status",
]
