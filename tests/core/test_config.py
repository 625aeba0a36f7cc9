"""配置模块单元测试 -- 环境变量映射与默认值"""

from pathlib import Path

from taskforest.core.config import get_db_path, get_default_user_id, get_title_max_length


class TestDbPath:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("TASKFOREST_DB_PATH", raising=False)
        monkeypatch.delenv("TASKFOREST_DATA_DIR", raising=False)
        assert Path(get_db_path()) == Path("data") / "sqlite" / "taskforest.db"

    def test_data_dir(self, monkeypatch, tmp_path):
        monkeypatch.delenv("TASKFOREST_DB_PATH", raising=False)
        monkeypatch.setenv("TASKFOREST_DATA_DIR", str(tmp_path))
        assert Path(get_db_path()) == tmp_path / "sqlite" / "taskforest.db"

    def test_explicit_path_wins(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TASKFOREST_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("TASKFOREST_DB_PATH", "/var/lib/tf.db")
        assert get_db_path() == "/var/lib/tf.db"


class TestDefaultUser:
    def test_unset(self, monkeypatch):
        monkeypatch.delenv("TASKFOREST_DEFAULT_USER_ID", raising=False)
        assert get_default_user_id() is None

    def test_empty_is_unset(self, monkeypatch):
        monkeypatch.setenv("TASKFOREST_DEFAULT_USER_ID", "")
        assert get_default_user_id() is None

    def test_set(self, monkeypatch):
        monkeypatch.setenv("TASKFOREST_DEFAULT_USER_ID", "u-1")
        assert get_default_user_id() == "u-1"


class TestTitleMaxLength:
    def test_default(self, monkeypatch):
        monkeypatch.delenv("TASKFOREST_TITLE_MAX_LENGTH", raising=False)
        assert get_title_max_length() == 200

    def test_override(self, monkeypatch):
        monkeypatch.setenv("TASKFOREST_TITLE_MAX_LENGTH", "10")
        assert get_title_max_length() == 10
