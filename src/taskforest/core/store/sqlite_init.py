"""SQLite 数据库初始化

PRAGMA 配置 + profiles/tasks 两张表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# profiles 表 DDL
_PROFILES_DDL = """
CREATE TABLE IF NOT EXISTS profiles (
    profile_id  TEXT PRIMARY KEY,
    username    TEXT NOT NULL,
    avatar_url  TEXT,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
"""

_PROFILES_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_profiles_username ON profiles(username);",
]

# tasks 表 DDL
# 删除父任务时由外键级联删除整棵子树
_TASKS_DDL = """
CREATE TABLE IF NOT EXISTS tasks (
    task_id       TEXT PRIMARY KEY,
    parent_id     TEXT,
    title         TEXT NOT NULL,
    description   TEXT NOT NULL DEFAULT '',
    is_completed  INTEGER NOT NULL DEFAULT 0,
    created_by    TEXT,
    assigned_to   TEXT,
    created_at    TEXT NOT NULL,
    updated_at    TEXT NOT NULL,

    FOREIGN KEY (parent_id) REFERENCES tasks(task_id) ON DELETE CASCADE,
    FOREIGN KEY (created_by) REFERENCES profiles(profile_id) ON DELETE SET NULL,
    FOREIGN KEY (assigned_to) REFERENCES profiles(profile_id) ON DELETE SET NULL
);
"""

_TASKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_parent_id ON tasks(parent_id);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_created_at ON tasks(created_at DESC);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assigned_to ON tasks(assigned_to);",
    "CREATE INDEX IF NOT EXISTS idx_tasks_created_by ON tasks(created_by);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 设置 PRAGMA（foreign_keys 是连接级设置，级联删除依赖它）
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA foreign_keys = ON;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    # 创建表
    await conn.execute(_PROFILES_DDL)
    await conn.execute(_TASKS_DDL)

    # 创建索引
    for idx_sql in _PROFILES_INDEXES + _TASKS_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_foreign_keys(conn: aiosqlite.Connection) -> bool:
    """验证外键约束是否生效

    Returns:
        True 如果 foreign_keys 已开启
    """
    cursor = await conn.execute("PRAGMA foreign_keys;")
    row = await cursor.fetchone()
    return row is not None and row[0] == 1
