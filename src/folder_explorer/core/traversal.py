"""Pure hierarchy algorithms over ``EntityStore`` query primitives."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import TypeVar

from folder_explorer.core.ports.store import EntityStore
from folder_explorer.models import HierarchyNode, TreeNode

FRONTIER_BATCH_SIZE = 1000

_T = TypeVar("_T")


def chunked(items: Sequence[_T], size: int) -> Iterator[Sequence[_T]]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


async def collect_descendant_ids(store: EntityStore, root_id: int, include_deleted: bool = False) -> list[int]:
    """Return the ids of every transitive descendant of ``root_id``, level by level.

    One store round-trip per frontier chunk, so the number of queries grows with
    the depth of the subtree rather than its size. The root itself is not
    included. Assumes ``parent_id`` edges are acyclic.
    """
    collected: list[int] = []
    frontier = [root_id]
    while frontier:
        next_frontier: list[int] = []
        for chunk in chunked(frontier, FRONTIER_BATCH_SIZE):
            next_frontier.extend(await store.child_ids(chunk, include_deleted=include_deleted))
        collected.extend(next_frontier)
        frontier = next_frontier
    return collected


def build_tree(nodes: Iterable[HierarchyNode]) -> list[TreeNode]:
    """Assemble a nested tree from a flat, complete node set in O(n).

    Nodes whose parent is not part of the set are dropped. Input order is kept
    within each sibling list.
    """
    records = list(nodes)
    by_id: dict[int, TreeNode] = {}

    # first pass: one wrapper per record
    for record in records:
        by_id[record.id] = TreeNode(**record.model_dump(exclude={"children", "has_children"}), children=[])

    # second pass: link to parents
    roots: list[TreeNode] = []
    for record in records:
        wrapper = by_id[record.id]
        if record.parent_id is None:
            roots.append(wrapper)
            continue
        parent = by_id.get(record.parent_id)
        if parent is not None:
            parent.children.append(wrapper)

    for wrapper in by_id.values():
        wrapper.has_children = bool(wrapper.children)
    return roots
