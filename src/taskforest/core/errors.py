"""TaskForest 异常体系

所有错误原样向调用方传播，核心层不做静默吞没，也不自动重试。
"""


class TaskForestError(Exception):
    """核心包基础异常"""


class NotFoundError(TaskForestError):
    """请求的任务不存在"""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class TaskValidationError(TaskForestError):
    """输入校验失败（在任何 store 调用之前拒绝）"""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class CycleError(TaskForestError):
    """重新挂载父任务会使任务成为自己的祖先"""

    def __init__(self, task_id: str, new_parent_id: str) -> None:
        super().__init__(
            f"Cannot move task {task_id} under {new_parent_id}: "
            "the new parent is the task itself or one of its descendants"
        )
        self.task_id = task_id
        self.new_parent_id = new_parent_id


class StoreError(TaskForestError):
    """底层存储失败（连接、约束冲突等）"""

    def __init__(self, operation: str, original_error: Exception) -> None:
        """
        Args:
            operation: 失败的存储操作名
            original_error: 原始异常
        """
        super().__init__(f"Store operation {operation} failed: {original_error}")
        self.operation = operation
        self.original_error = original_error


class ChildrenReparentError(StoreError):
    """创建任务成功，但继承兄弟任务的二次挂载失败

    已创建的任务不会回滚，通过 created_task 交给调用方。
    """

    def __init__(self, created_task, original_error: Exception) -> None:
        super().__init__("reparent_children", original_error)
        self.created_task = created_task


class DerivedComputationError(TaskForestError):
    """进度计算过程中某个后代读取失败，整体进度不可用"""

    def __init__(
        self,
        task_id: str,
        failed_task_id: str,
        original_error: Exception | None = None,
    ) -> None:
        """
        Args:
            task_id: 进度计算的根任务
            failed_task_id: 读取子任务失败的节点
            original_error: 原始异常（检测到父子环时为 None）
        """
        detail = original_error if original_error is not None else "parent cycle detected"
        super().__init__(
            f"Progress of task {task_id} is unavailable "
            f"(children of {failed_task_id}: {detail})"
        )
        self.task_id = task_id
        self.failed_task_id = failed_task_id
        self.original_error = original_error
