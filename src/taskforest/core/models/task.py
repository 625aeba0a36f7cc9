"""Task Domain Model

任务树中唯一的领域实体。父子关系由 parent_id 单向表达，
进度永远由子树推导，不落库。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .profile import Profile


class Task(BaseModel):
    """Task 数据模型

    parent_id 为 None 表示根任务；is_completed 只对叶子任务有意义，
    一旦拥有子任务，完成度完全由子树决定。
    """

    task_id: str = Field(description="唯一标识，ULID 格式")
    parent_id: str | None = Field(default=None, description="父任务 ID，根任务为 None")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    is_completed: bool = Field(default=False, description="叶子级完成标记")
    created_by: str | None = Field(default=None, description="创建者 profile_id")
    assigned_to: str | None = Field(default=None, description="负责人 profile_id")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")


class TaskWithProfile(Task):
    """附带创建者与负责人资料的任务（列表/详情读取结果）"""

    creator: Profile | None = Field(default=None, description="创建者资料")
    assignee: Profile | None = Field(default=None, description="负责人资料")
