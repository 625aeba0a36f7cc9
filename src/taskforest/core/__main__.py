"""CLI 入口模块 -- python -m taskforest.core <command>

支持的命令：
  init-db                 初始化数据库
  progress <task_id>      计算任务进度
  tree [root_task_id]     输出任务树及每个任务的进度
"""

import asyncio
import os
import sys

from .config import TREE_INDENT, get_db_path
from .errors import TaskForestError
from .logging_config import setup_logging

_USAGE = """用法: python -m taskforest.core <command>
命令:
  init-db                 初始化数据库
  progress <task_id>      计算任务进度
  tree [root_task_id]     输出任务树及每个任务的进度"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    # CLI 默认 key=value 日志，输出到 stderr，不混入 stdout 结果
    setup_logging(os.environ.get("TASKFOREST_LOG_FORMAT", "plain"))
    command = sys.argv[1]

    try:
        if command == "init-db":
            asyncio.run(init_database())
        elif command == "progress" and len(sys.argv) == 3:
            asyncio.run(print_progress(sys.argv[2]))
        elif command == "tree":
            root_id = sys.argv[2] if len(sys.argv) > 2 else None
            asyncio.run(print_tree(root_id))
        else:
            print(f"未知命令: {' '.join(sys.argv[1:])}")
            print(_USAGE)
            sys.exit(1)
    except TaskForestError as e:
        print(f"错误: {e}")
        sys.exit(2)


async def init_database() -> None:
    """创建表结构"""
    from .store import create_store_group

    db_path = get_db_path()
    store_group = await create_store_group(db_path)
    await store_group.conn.close()
    print(f"数据库已初始化: {db_path}")


async def print_progress(task_id: str) -> None:
    """输出单个任务的进度"""
    from .progress import ProgressAggregator
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        aggregator = ProgressAggregator(store_group.task_store)
        progress = await aggregator.compute_progress(task_id)
        print(f"{task_id}: {progress:.2f}%")
    finally:
        await store_group.conn.close()


async def print_tree(root_id: str | None) -> None:
    """按层级输出任务树（深度优先，显式栈）"""
    from .progress import ProgressAggregator
    from .store import create_store_group

    store_group = await create_store_group(get_db_path())
    try:
        task_store = store_group.task_store
        aggregator = ProgressAggregator(task_store)

        if root_id is None:
            roots = await task_store.list_tasks(None)
        else:
            root = await task_store.get_task(root_id)
            roots = [root] if root is not None else []

        # 每棵树只遍历一次，子任务进度从同一次结果中读取
        progress: dict[str, float] = {}
        for tree_root in roots:
            progress.update(await aggregator.compute_subtree(tree_root.task_id))

        # 逆序入栈以保持列表顺序输出
        stack = [(task, 0) for task in reversed(roots)]
        while stack:
            task, depth = stack.pop()
            mark = "x" if task.is_completed else " "
            indent = " " * TREE_INDENT * depth
            print(f"{indent}[{mark}] {task.title} ({progress[task.task_id]:.0f}%)")
            children = await task_store.list_tasks(task.task_id)
            stack.extend((child, depth + 1) for child in reversed(children))
    finally:
        await store_group.conn.close()


if __name__ == "__main__":
    main()
