"""TaskStore SQLite 实现

tasks 表是任务树的唯一事实来源。
此处仅提供数据库操作，不提交事务；提交由 transaction.write_transaction 负责。
"""

from datetime import datetime

import aiosqlite

from ..models.inputs import TaskFilter
from ..models.profile import Profile
from ..models.task import Task, TaskWithProfile

# 创建者 / 负责人资料通过 LEFT JOIN 一并读出
_SELECT_TASKS = """
SELECT t.task_id, t.parent_id, t.title, t.description, t.is_completed,
       t.created_by, t.assigned_to, t.created_at, t.updated_at,
       c.profile_id, c.username, c.avatar_url, c.created_at, c.updated_at,
       a.profile_id, a.username, a.avatar_url, a.created_at, a.updated_at
FROM tasks t
LEFT JOIN profiles c ON c.profile_id = t.created_by
LEFT JOIN profiles a ON a.profile_id = t.assigned_to
"""

# update_task 允许写入的列
_UPDATABLE_COLUMNS = ("title", "description", "is_completed", "assigned_to", "parent_id")


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        await self._conn.execute(
            """
            INSERT INTO tasks (task_id, parent_id, title, description, is_completed,
                               created_by, assigned_to, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.task_id,
                task.parent_id,
                task.title,
                task.description,
                int(task.is_completed),
                task.created_by,
                task.assigned_to,
                task.created_at.isoformat(),
                task.updated_at.isoformat(),
            ),
        )

    async def get_task(self, task_id: str) -> TaskWithProfile | None:
        """根据 task_id 查询任务"""
        cursor = await self._conn.execute(
            _SELECT_TASKS + "WHERE t.task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def list_tasks(
        self,
        parent_id: str | None,
        task_filter: TaskFilter | None = None,
    ) -> list[TaskWithProfile]:
        """查询某个父任务下的直接子任务，按 created_at 倒序

        parent_id 为 None 时查询根任务。
        """
        clauses: list[str] = []
        params: list = []

        if parent_id is None:
            clauses.append("t.parent_id IS NULL")
        else:
            clauses.append("t.parent_id = ?")
            params.append(parent_id)

        if task_filter is not None:
            # 用户筛选：创建者或负责人任一匹配
            if task_filter.user_id:
                clauses.append("(t.created_by = ? OR t.assigned_to = ?)")
                params.extend([task_filter.user_id, task_filter.user_id])
            if task_filter.show_completed is False:
                clauses.append("t.is_completed = 0")

        sql = (
            _SELECT_TASKS
            + "WHERE "
            + " AND ".join(clauses)
            + " ORDER BY t.created_at DESC, t.rowid DESC"
        )
        cursor = await self._conn.execute(sql, params)
        rows = await cursor.fetchall()
        return [self._row_to_task(row) for row in rows]

    async def list_child_ids(self, task_id: str) -> list[str]:
        """查询直接子任务的 ID（不带资料，用于树遍历）"""
        cursor = await self._conn.execute(
            "SELECT task_id FROM tasks WHERE parent_id = ? ORDER BY created_at DESC, rowid DESC",
            (task_id,),
        )
        rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def count_children(self, task_id: str) -> int:
        """统计直接子任务数量"""
        cursor = await self._conn.execute(
            "SELECT COUNT(*) FROM tasks WHERE parent_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def update_task(
        self,
        task_id: str,
        fields: dict,
        updated_at: str,
    ) -> None:
        """部分更新任务字段

        Args:
            task_id: 任务 ID
            fields: 列名 -> 新值，只接受可更新列
            updated_at: ISO 格式更新时间
        """
        unknown = set(fields) - set(_UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown task columns: {sorted(unknown)}")

        assignments = [f"{column} = ?" for column in fields]
        params: list = [
            int(value) if column == "is_completed" else value
            for column, value in fields.items()
        ]
        assignments.append("updated_at = ?")
        params.extend([updated_at, task_id])

        await self._conn.execute(
            f"UPDATE tasks SET {', '.join(assignments)} WHERE task_id = ?",
            params,
        )

    async def reparent_children(
        self,
        old_parent_id: str | None,
        new_parent_id: str,
        updated_at: str,
    ) -> int:
        """把 old_parent_id 的直接子任务（新父任务本身除外）挂到 new_parent_id 下

        Returns:
            被移动的任务数
        """
        if old_parent_id is None:
            parent_clause = "parent_id IS NULL"
            params: tuple = (new_parent_id, updated_at, new_parent_id)
        else:
            parent_clause = "parent_id = ?"
            params = (new_parent_id, updated_at, old_parent_id, new_parent_id)
        cursor = await self._conn.execute(
            f"""
            UPDATE tasks SET parent_id = ?, updated_at = ?
            WHERE {parent_clause} AND task_id != ?
            """,
            params,
        )
        return cursor.rowcount

    async def delete_task(self, task_id: str) -> int:
        """删除任务（子树由外键级联删除）

        Returns:
            直接删除的行数（0 表示任务不存在）
        """
        cursor = await self._conn.execute(
            "DELETE FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        return cursor.rowcount

    @staticmethod
    def _row_to_profile(columns: tuple) -> Profile | None:
        """将 JOIN 出来的 5 列资料转换为 Profile（LEFT JOIN 未命中时为 None）"""
        if columns[0] is None:
            return None
        return Profile(
            profile_id=columns[0],
            username=columns[1],
            avatar_url=columns[2],
            created_at=datetime.fromisoformat(columns[3]),
            updated_at=datetime.fromisoformat(columns[4]),
        )

    @classmethod
    def _row_to_task(cls, row: aiosqlite.Row) -> TaskWithProfile:
        """将数据库行转换为 TaskWithProfile 模型"""
        values = tuple(row)
        return TaskWithProfile(
            task_id=values[0],
            parent_id=values[1],
            title=values[2],
            description=values[3],
            is_completed=bool(values[4]),
            created_by=values[5],
            assigned_to=values[6],
            created_at=datetime.fromisoformat(values[7]),
            updated_at=datetime.fromisoformat(values[8]),
            creator=cls._row_to_profile(values[9:14]),
            assignee=cls._row_to_profile(values[14:19]),
        )
