"""Demo hierarchy generator for local development."""

from __future__ import annotations

import logging
import random

from folder_explorer.core.repository import HierarchyRepository

logger = logging.getLogger(__name__)

ROOT_FOLDERS = ("Documents", "Downloads", "Pictures", "Music", "Videos", "Desktop", "Projects")
FOLDER_NAMES = ("Projects", "Reports", "Archive", "Backup", "Templates", "Resources", "Assets", "Data", "Config", "Logs")
FILE_NAMES = ("report", "document", "notes", "data", "summary", "analysis", "presentation", "draft", "final", "backup")
FILE_EXTENSIONS = ("txt", "pdf", "doc", "docx", "xls", "xlsx", "jpg", "png", "mp3", "mp4", "zip", "json", "xml", "csv", "html")


def _file_name(rng: random.Random) -> str:
    return f"{rng.choice(FILE_NAMES)}_{rng.randrange(100)}.{rng.choice(FILE_EXTENSIONS)}"


async def clear_hierarchy(repo: HierarchyRepository, page_size: int = 100) -> int:
    """Permanently delete every root-level node (and with it everything below)."""
    root_ids: list[int] = []
    page = 1
    while True:
        result = await repo.list_all(page=page, limit=page_size, include_deleted=True)
        root_ids.extend(n.id for n in result.data if n.parent_id is None)
        if page >= result.pagination.total_pages:
            break
        page += 1
    for node_id in root_ids:
        await repo.hard_delete(node_id)
    return len(root_ids)


async def seed_hierarchy(repo: HierarchyRepository, rng: random.Random | None = None) -> int:
    """Create seven root folders, each three levels deep with files mixed in.

    Returns the number of nodes created (roughly a thousand).
    """
    rng = rng or random.Random()
    total = 0

    async def add(name: str, parent_id: int | None, is_container: bool) -> int:
        nonlocal total
        node = await repo.create(name, parent_id=parent_id, is_container=is_container)
        total += 1
        return node.id

    for root_name in ROOT_FOLDERS:
        root_id = await add(root_name, None, True)
        for i in range(7 + rng.randrange(3)):
            sub_id = await add(f"{rng.choice(FOLDER_NAMES)}_{i + 1}", root_id, True)
            for j in range(2):
                nested_id = await add(f"{rng.choice(FOLDER_NAMES)}_{j + 1}", sub_id, True)
                for _ in range(5 + rng.randrange(2)):
                    await add(_file_name(rng), nested_id, False)
            for _ in range(6 + rng.randrange(2)):
                await add(_file_name(rng), sub_id, False)
        for _ in range(4 + rng.randrange(2)):
            await add(_file_name(rng), root_id, False)
        logger.debug("seeded %s (%d nodes so far)", root_name, total)

    logger.info("Seeded %d nodes", total)
    return total
