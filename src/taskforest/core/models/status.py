"""完成度变体 -- LeafStatus / AggregateStatus

叶子任务读取自身 is_completed；一旦拥有子任务，自身标记失效，
完成度只能由子任务聚合得出。
"""

from dataclasses import dataclass

from .task import Task


@dataclass(frozen=True)
class LeafStatus:
    """无子任务：完成度由 is_completed 决定"""

    is_completed: bool

    @property
    def percent(self) -> float:
        return 100.0 if self.is_completed else 0.0


@dataclass(frozen=True)
class AggregateStatus:
    """有子任务：完成度为直接子任务进度的算术平均"""

    child_ids: tuple[str, ...]


CompletionStatus = LeafStatus | AggregateStatus


def classify_status(task: Task, children: list[Task]) -> CompletionStatus:
    """根据直接子任务判定任务的完成度变体"""
    if not children:
        return LeafStatus(is_completed=task.is_completed)
    return AggregateStatus(child_ids=tuple(child.task_id for child in children))
