"""ProfileStore SQLite 实现"""

from datetime import datetime

import aiosqlite

from ..models.profile import Profile


class SqliteProfileStore:
    """ProfileStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_profile(self, profile: Profile) -> None:
        """创建用户资料（不自动提交）"""
        await self._conn.execute(
            """
            INSERT INTO profiles (profile_id, username, avatar_url, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                profile.profile_id,
                profile.username,
                profile.avatar_url,
                profile.created_at.isoformat(),
                profile.updated_at.isoformat(),
            ),
        )

    async def get_profile(self, profile_id: str) -> Profile | None:
        cursor = await self._conn.execute(
            "SELECT profile_id, username, avatar_url, created_at, updated_at "
            "FROM profiles WHERE profile_id = ?",
            (profile_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_profile(row)

    async def list_profiles(self) -> list[Profile]:
        """查询全部用户资料，按 username 升序"""
        cursor = await self._conn.execute(
            "SELECT profile_id, username, avatar_url, created_at, updated_at "
            "FROM profiles ORDER BY username ASC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_profile(row) for row in rows]

    @staticmethod
    def _row_to_profile(row: aiosqlite.Row) -> Profile:
        return Profile(
            profile_id=row[0],
            username=row[1],
            avatar_url=row[2],
            created_at=datetime.fromisoformat(row[3]),
            updated_at=datetime.fromisoformat(row[4]),
        )
