"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、默认会话用户、任务标题长度限制等可配置项。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("TASKFOREST_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "TASKFOREST_DB_PATH",
        str(_get_base_dir() / "sqlite" / "taskforest.db"),
    )


def get_default_user_id() -> str | None:
    """获取默认会话用户（请求未携带 X-User-Id 时使用）"""
    return os.environ.get("TASKFOREST_DEFAULT_USER_ID") or None


def get_title_max_length() -> int:
    """任务标题最大长度"""
    return int(os.environ.get("TASKFOREST_TITLE_MAX_LENGTH", "200"))


# 树形输出时每层缩进宽度
TREE_INDENT: int = 2
