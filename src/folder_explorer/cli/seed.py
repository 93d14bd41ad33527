import asyncio
import random
from typing import Annotated

import typer
from rich.console import Console

from folder_explorer.cache import build_cache
from folder_explorer.config import Settings
from folder_explorer.core.cached import KEY_PREFIX
from folder_explorer.core.repository import HierarchyRepository
from folder_explorer.core.seed import clear_hierarchy, seed_hierarchy
from folder_explorer.services import build_repository, build_store

console = Console()


def _get_repository(settings: Settings) -> HierarchyRepository:
    return build_repository(build_store(settings), settings)


def seed(
    reset: Annotated[bool, typer.Option(help="Delete every existing node first.")] = True,
    random_seed: Annotated[int | None, typer.Option("--seed", help="Random seed for reproducible data.")] = None,
) -> None:
    """Fill the database with a demo hierarchy of roughly a thousand nodes."""
    settings = Settings.from_env()
    repo = _get_repository(settings)

    async def _run() -> None:
        cache = build_cache(settings)
        try:
            if reset:
                removed = await clear_hierarchy(repo)
                console.print(f"Removed {removed} existing root nodes")
            total = await seed_hierarchy(repo, random.Random(random_seed))
            # API processes share the Redis cache; stale views must go
            await cache.delete_prefix(KEY_PREFIX)
            console.print(f"[green]Seeded {total} nodes[/green]")
        finally:
            await cache.close()
            await repo.dispose()

    asyncio.run(_run())
