import asyncio
from typing import Annotated

import typer
from rich.console import Console
from rich.tree import Tree

from folder_explorer.config import Settings
from folder_explorer.core.repository import HierarchyRepository
from folder_explorer.models import TreeNode
from folder_explorer.services import build_repository, build_store

console = Console()


def _get_repository() -> HierarchyRepository:
    settings = Settings.from_env()
    return build_repository(build_store(settings), settings)


def _add_nodes(branch: Tree, nodes: list[TreeNode], depth: int, max_depth: int | None) -> None:
    for node in nodes:
        child = branch.add(f"[bold blue]{node.name}[/bold blue] [dim]#{node.id}[/dim]")
        if node.children and (max_depth is None or depth < max_depth):
            _add_nodes(child, node.children, depth + 1, max_depth)


def tree(
    depth: Annotated[int | None, typer.Option(help="Only print this many levels.")] = None,
) -> None:
    """Print every folder as a tree."""
    repo = _get_repository()

    async def _run() -> None:
        try:
            roots = await repo.get_full_tree()
        finally:
            await repo.dispose()
        if not roots:
            console.print("[yellow]No folders.[/yellow]")
            return
        root = Tree("[bold]/[/bold]")
        _add_nodes(root, roots, 1, depth)
        console.print(root)

    asyncio.run(_run())
