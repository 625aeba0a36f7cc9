"""AuthSession -- 会话协作方

会话只记住当前用户 ID；资料从 ProfileStore 读取。
"""

import structlog

from .models.profile import Profile
from .store.protocols import ProfileStore

log = structlog.get_logger()


class AuthSession:
    """当前会话"""

    def __init__(self, profile_store: ProfileStore, user_id: str | None = None) -> None:
        self._profile_store = profile_store
        self._user_id = user_id

    @property
    def user_id(self) -> str | None:
        return self._user_id

    async def current_user(self) -> Profile | None:
        """返回当前登录用户资料；未登录或资料不存在时为 None"""
        if self._user_id is None:
            return None
        return await self._profile_store.get_profile(self._user_id)

    async def list_profiles(self) -> list[Profile]:
        """全部用户资料，按 username 升序"""
        return await self._profile_store.list_profiles()

    def sign_out(self) -> None:
        """登出：清除会话用户"""
        if self._user_id is not None:
            log.info("session_signed_out", user_id=self._user_id)
        self._user_id = None
