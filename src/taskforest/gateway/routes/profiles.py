"""用户资料路由

GET /api/profiles: 全部用户资料，按 username 升序。
GET /api/me: 当前会话用户，未登录返回 401。
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from starlette.responses import JSONResponse
from taskforest.core.auth import AuthSession
from taskforest.core.models import Profile

from ..deps import get_auth_session

router = APIRouter()


class ProfileListResponse(BaseModel):
    """用户资料列表响应"""

    profiles: list[Profile]


@router.get("/api/profiles", response_model=ProfileListResponse)
async def list_profiles(auth: AuthSession = Depends(get_auth_session)):
    return ProfileListResponse(profiles=await auth.list_profiles())


@router.get("/api/me", response_model=Profile)
async def current_user(auth: AuthSession = Depends(get_auth_session)):
    """当前会话用户"""
    profile = await auth.current_user()
    if profile is None:
        return JSONResponse(
            status_code=401,
            content={
                "error": {
                    "code": "NOT_SIGNED_IN",
                    "message": "No signed-in user for this request",
                }
            },
        )
    return profile
