"""层级遍历单元测试 -- 后代收集与父子环检测"""

import pytest
from taskforest.core.errors import CycleError
from taskforest.core.hierarchy import collect_descendant_ids, ensure_no_cycle


@pytest.fixture
def forest(memory_store):
    """R -> (A -> (A1, A2 -> A2x), B)；另有独立根 S"""
    memory_store.add("R")
    memory_store.add("A", parent_id="R")
    memory_store.add("A1", parent_id="A")
    memory_store.add("A2", parent_id="A")
    memory_store.add("A2x", parent_id="A2")
    memory_store.add("B", parent_id="R")
    memory_store.add("S")
    return memory_store


class TestCollectDescendants:
    async def test_whole_subtree(self, forest):
        assert await collect_descendant_ids(forest, "R") == {"A", "A1", "A2", "A2x", "B"}

    async def test_leaf_has_none(self, forest):
        assert await collect_descendant_ids(forest, "A2x") == set()

    async def test_corrupt_cycle_terminates(self, forest):
        forest.children.setdefault("A2x", []).append("A")
        assert await collect_descendant_ids(forest, "A") == {"A1", "A2", "A2x"}


class TestEnsureNoCycle:
    async def test_move_under_self_rejected(self, forest):
        with pytest.raises(CycleError) as exc_info:
            await ensure_no_cycle(forest, "A", "A")
        assert exc_info.value.new_parent_id == "A"

    @pytest.mark.parametrize("descendant", ["A1", "A2", "A2x"])
    async def test_move_under_descendant_rejected(self, forest, descendant):
        with pytest.raises(CycleError):
            await ensure_no_cycle(forest, "A", descendant)

    @pytest.mark.parametrize("new_parent", ["B", "S", "R"])
    async def test_move_elsewhere_allowed(self, forest, new_parent):
        await ensure_no_cycle(forest, "A", new_parent)

    async def test_move_to_root_allowed(self, forest):
        await ensure_no_cycle(forest, "A2x", None)

    async def test_move_under_own_ancestor_sibling_allowed(self, forest):
        """把 A2x 挂到祖父 A 的另一个子 A1 下"""
        await ensure_no_cycle(forest, "A2x", "A1")
