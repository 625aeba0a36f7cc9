"""CLI 单元测试 -- init-db / progress / tree"""

from datetime import UTC, datetime, timedelta

import pytest
from taskforest.core import __main__ as cli
from taskforest.core.models import Task
from taskforest.core.store import create_store_group, write_transaction


@pytest.fixture
def db_env(monkeypatch, tmp_path):
    db_path = tmp_path / "sqlite" / "cli.db"
    monkeypatch.setenv("TASKFOREST_DB_PATH", str(db_path))
    return db_path


async def _seed(db_path) -> None:
    group = await create_store_group(str(db_path))
    base = datetime(2026, 5, 1, tzinfo=UTC)
    rows = [
        ("R", None, "发布", False),
        ("A", "R", "写文档", True),
        ("B", "R", "打包", False),
    ]
    try:
        async with write_transaction(group.conn, "seed"):
            for offset, (task_id, parent_id, title, done) in enumerate(rows):
                ts = base + timedelta(minutes=offset)
                await group.task_store.create_task(
                    Task(
                        task_id=task_id,
                        parent_id=parent_id,
                        title=title,
                        is_completed=done,
                        created_at=ts,
                        updated_at=ts,
                    )
                )
    finally:
        await group.conn.close()


class TestCli:
    async def test_init_db_creates_file(self, db_env, capsys):
        await cli.init_database()
        assert db_env.exists()
        assert str(db_env) in capsys.readouterr().out

    async def test_progress(self, db_env, capsys):
        await _seed(db_env)
        await cli.print_progress("R")
        assert "R: 50.00%" in capsys.readouterr().out.splitlines()

    async def test_tree_indents_children(self, db_env, capsys):
        await _seed(db_env)
        await cli.print_tree(None)
        out = capsys.readouterr().out
        # structlog 默认输出到 stdout，只比较树形行
        lines = [line for line in out.splitlines() if line.lstrip().startswith("[")]
        assert lines == [
            "[ ] 发布 (50%)",
            "  [ ] 打包 (0%)",
            "  [x] 写文档 (100%)",
        ]

    async def test_tree_walks_each_root_once(self, db_env, capsys, monkeypatch):
        """树形输出不按节点逐个重算子树进度"""
        from taskforest.core.progress import ProgressAggregator

        await _seed(db_env)
        calls: list[str] = []
        original = ProgressAggregator.compute_subtree

        async def counting(self, task_id):
            calls.append(task_id)
            return await original(self, task_id)

        async def per_node(self, task_id):
            raise AssertionError("per-node progress must not be computed")

        monkeypatch.setattr(ProgressAggregator, "compute_subtree", counting)
        monkeypatch.setattr(ProgressAggregator, "compute_progress", per_node)

        await cli.print_tree(None)

        assert calls == ["R"]
        assert "  [x] 写文档 (100%)" in capsys.readouterr().out.splitlines()

    def test_usage_without_command(self, monkeypatch):
        monkeypatch.setattr("sys.argv", ["taskforest"])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 1

    def test_missing_task_exits_2(self, monkeypatch, db_env):
        monkeypatch.setattr("sys.argv", ["taskforest", "progress", "ghost"])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 2
