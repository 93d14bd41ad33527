"""Tests for breadth-first descendant collection and tree assembly."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from folder_explorer.core import traversal
from folder_explorer.core.traversal import build_tree, chunked, collect_descendant_ids
from folder_explorer.db import InMemoryEntityStore
from folder_explorer.models import HierarchyNode

_NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _node(node_id: int, parent_id: int | None = None, name: str | None = None) -> HierarchyNode:
    return HierarchyNode(
        id=node_id,
        name=name or f"n{node_id}",
        parent_id=parent_id,
        created_at=_NOW,
        updated_at=_NOW,
    )


async def _chain(store: InMemoryEntityStore, depth: int) -> list[int]:
    ids = [await store.insert("level0", None, True)]
    for level in range(1, depth):
        ids.append(await store.insert(f"level{level}", ids[-1], True))
    return ids


def test_chunked_splits_evenly_with_remainder() -> None:
    assert [list(c) for c in chunked([1, 2, 3, 4, 5], 2)] == [[1, 2], [3, 4], [5]]


class TestCollectDescendantIds:
    @pytest.mark.asyncio
    async def test_collects_every_level_and_excludes_root(self, store: InMemoryEntityStore) -> None:
        ids = await _chain(store, 5)
        sibling = await store.insert("sibling", ids[1], False)

        collected = await collect_descendant_ids(store, ids[0])

        assert sorted(collected) == sorted([*ids[1:], sibling])

    @pytest.mark.asyncio
    async def test_leaf_has_no_descendants(self, store: InMemoryEntityStore) -> None:
        leaf = await store.insert("leaf.txt", None, False)
        assert await collect_descendant_ids(store, leaf) == []

    @pytest.mark.asyncio
    async def test_one_query_per_level(self) -> None:
        store = AsyncMock()
        store.child_ids.side_effect = [[2, 3], [4], []]

        assert await collect_descendant_ids(store, 1) == [2, 3, 4]
        assert store.child_ids.await_count == 3

    @pytest.mark.asyncio
    async def test_wide_frontier_is_chunked(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(traversal, "FRONTIER_BATCH_SIZE", 2)
        store = AsyncMock()
        store.child_ids.side_effect = [[2, 3, 4, 5, 6], [], [], []]

        await collect_descendant_ids(store, 1)

        chunks = [call.args[0] for call in store.child_ids.await_args_list]
        assert [list(c) for c in chunks] == [[1], [2, 3], [4, 5], [6]]

    @pytest.mark.asyncio
    async def test_skips_deleted_unless_asked(self, store: InMemoryEntityStore) -> None:
        ids = await _chain(store, 3)
        await store.set_deleted_at([ids[1]], _NOW)

        assert await collect_descendant_ids(store, ids[0]) == []
        assert sorted(await collect_descendant_ids(store, ids[0], include_deleted=True)) == ids[1:]


class TestBuildTree:
    def test_nests_children_under_parents(self) -> None:
        roots = build_tree([_node(1), _node(2, 1), _node(3, 2), _node(4)])

        assert [r.id for r in roots] == [1, 4]
        assert [c.id for c in roots[0].children] == [2]
        assert [c.id for c in roots[0].children[0].children] == [3]

    def test_sets_has_children(self) -> None:
        roots = build_tree([_node(1), _node(2, 1)])
        assert roots[0].has_children is True
        assert roots[0].children[0].has_children is False

    def test_drops_orphans(self) -> None:
        roots = build_tree([_node(1), _node(5, 99)])
        assert [r.id for r in roots] == [1]
        assert roots[0].children == []

    def test_keeps_input_order_among_siblings(self) -> None:
        roots = build_tree([_node(1), _node(3, 1, "b"), _node(2, 1, "a")])
        assert [c.name for c in roots[0].children] == ["b", "a"]

    def test_empty_input(self) -> None:
        assert build_tree([]) == []

    def test_handles_large_flat_sets(self) -> None:
        nodes = [_node(1)] + [_node(i, 1) for i in range(2, 10_002)]
        roots = build_tree(nodes)
        assert len(roots[0].children) == 10_000
