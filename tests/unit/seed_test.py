import random

import pytest

from folder_explorer.core.repository import HierarchyRepository
from folder_explorer.core.seed import ROOT_FOLDERS, clear_hierarchy, seed_hierarchy


@pytest.mark.asyncio
async def test_seed_builds_demo_hierarchy(repo: HierarchyRepository) -> None:
    total = await seed_hierarchy(repo, random.Random(1))

    assert total == await repo.count()
    assert 966 <= total <= 1428
    roots = await repo.list_children(None)
    assert sorted(r.name for r in roots) == sorted(ROOT_FOLDERS)
    assert all(r.is_container for r in roots)


@pytest.mark.asyncio
async def test_clear_removes_everything(repo: HierarchyRepository) -> None:
    docs = await repo.create("docs")
    await repo.create("a.txt", parent_id=docs.id, is_container=False)
    gone = await repo.create("gone")
    await repo.soft_delete(gone.id)

    assert await clear_hierarchy(repo, page_size=1) == 2
    assert await repo.count(include_deleted=True) == 0
