from fastapi import APIRouter, Depends, Path, Query, Response, status

from folder_explorer.api.dependencies import get_repository
from folder_explorer.api.schemas import FolderCreate, FolderUpdate
from folder_explorer.core.cached import CachedHierarchyRepository
from folder_explorer.core.errors import NotFoundError, ValidationError
from folder_explorer.models import CursorPage, HierarchyNode, OffsetPage, TreeNode

router = APIRouter(prefix="/api/v1/folders", tags=["folders"])

_ROOT = "root"


def _parse_parent(parent: str) -> int | None:
    """``root`` selects the top level; anything else must be a positive folder id."""
    if parent == _ROOT:
        return None
    try:
        parent_id = int(parent)
    except ValueError:
        parent_id = 0
    if parent_id <= 0:
        raise ValidationError("Invalid folder ID", details={"field": "id", "value": parent})
    return parent_id


@router.get("/tree", response_model=list[TreeNode])
async def tree(repo: CachedHierarchyRepository = Depends(get_repository)) -> list[TreeNode]:
    """Root folders, each flagged with ``hasChildren`` for lazy expansion."""
    return await repo.get_tree()


@router.get("/tree/full", response_model=list[TreeNode])
async def full_tree(repo: CachedHierarchyRepository = Depends(get_repository)) -> list[TreeNode]:
    """Every folder, nested. Only for small hierarchies."""
    return await repo.get_full_tree()


@router.get("/search", response_model=list[HierarchyNode])
async def search(
    q: str = Query(""),
    limit: int | None = Query(None, ge=1),
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> list[HierarchyNode]:
    return await repo.search(q, limit=limit)


@router.get("/search/cursor", response_model=CursorPage)
async def search_cursor(
    q: str = Query(""),
    limit: int | None = Query(None, ge=1),
    cursor: str | None = Query(None),
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> CursorPage:
    return await repo.search_page(q, limit=limit, cursor=cursor)


@router.get("", response_model=OffsetPage)
async def list_folders(
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    include_deleted: bool = Query(False, alias="includeDeleted"),
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> OffsetPage:
    return await repo.list_all(page=page, limit=limit, include_deleted=include_deleted)


@router.get("/{node_id}", response_model=HierarchyNode)
async def get_folder(
    node_id: int = Path(ge=1),
    include_deleted: bool = Query(False, alias="includeDeleted"),
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> HierarchyNode:
    node = await repo.get_by_id(node_id, include_deleted=include_deleted)
    if node is None:
        raise NotFoundError(node_id)
    return node


@router.get("/{parent}/children", response_model=list[HierarchyNode])
async def children(
    parent: str,
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> list[HierarchyNode]:
    return await repo.list_children(_parse_parent(parent))


@router.get("/{parent}/children/cursor", response_model=CursorPage)
async def children_cursor(
    parent: str,
    limit: int | None = Query(None, ge=1),
    cursor: str | None = Query(None),
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> CursorPage:
    return await repo.list_children_page(_parse_parent(parent), limit=limit, cursor=cursor)


@router.get("/{parent}/tree-children", response_model=list[HierarchyNode])
async def tree_children(
    parent: str,
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> list[HierarchyNode]:
    """Sub-folders only, for expanding one level of the tree."""
    return await repo.list_container_children(_parse_parent(parent))


@router.post("", response_model=HierarchyNode, status_code=status.HTTP_201_CREATED)
async def create_folder(
    body: FolderCreate,
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> HierarchyNode:
    return await repo.create(body.name, parent_id=body.parent_id, is_container=body.is_container)


@router.patch("/{node_id}", response_model=HierarchyNode)
async def rename_folder(
    body: FolderUpdate,
    node_id: int = Path(ge=1),
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> HierarchyNode:
    return await repo.rename(node_id, body.name)


@router.delete("/{node_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_folder(
    node_id: int = Path(ge=1),
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> Response:
    await repo.soft_delete(node_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{node_id}/permanent", status_code=status.HTTP_204_NO_CONTENT)
async def purge_folder(
    node_id: int = Path(ge=1),
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> Response:
    await repo.hard_delete(node_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{node_id}/restore", response_model=HierarchyNode)
async def restore_folder(
    node_id: int = Path(ge=1),
    repo: CachedHierarchyRepository = Depends(get_repository),
) -> HierarchyNode:
    return await repo.restore(node_id)
