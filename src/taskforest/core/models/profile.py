"""Profile Domain Model -- 用户资料（由认证协作方维护）"""

from datetime import datetime

from pydantic import BaseModel, Field


class Profile(BaseModel):
    """用户资料"""

    profile_id: str = Field(description="用户标识")
    username: str = Field(description="用户名")
    avatar_url: str | None = Field(default=None, description="头像地址")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
