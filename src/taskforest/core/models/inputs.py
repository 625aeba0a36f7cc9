"""输入模型 -- 列表筛选条件与创建/更新请求体"""

from pydantic import BaseModel, ConfigDict, Field


class TaskFilter(BaseModel):
    """列表筛选条件

    冻结模型，可哈希，作为 List 缓存键的一部分。
    """

    model_config = ConfigDict(frozen=True)

    user_id: str | None = Field(
        default=None,
        description="只保留该用户创建或负责的任务",
    )
    show_completed: bool | None = Field(
        default=None,
        description="为 False 时隐藏已完成任务；None/True 显示全部",
    )


class CreateTaskInput(BaseModel):
    """创建任务请求"""

    parent_id: str | None = Field(default=None, description="父任务 ID")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    assigned_to: str | None = Field(
        default=None,
        description="负责人，缺省时为创建者本人",
    )
    inherit_children: bool = Field(
        default=False,
        description="将父任务现有的子任务全部挂到新任务下",
    )


class UpdateTaskInput(BaseModel):
    """部分更新请求

    只写入调用方显式设置的字段；显式传 None 表示清空
    （assigned_to）或移动到根（parent_id）。
    """

    title: str | None = None
    description: str | None = None
    is_completed: bool | None = None
    assigned_to: str | None = None
    parent_id: str | None = None

    def changes(self) -> dict:
        """返回显式设置过的字段"""
        return self.model_dump(exclude_unset=True)
