"""Project, folder and photo endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, HTTPException, Request, status

from props_assets.api.auth import require_identity
from props_assets.api.errors import raise_for_error
from props_assets.api.models import NameRequest  # noqa: TC001
from props_assets.domain.errors import StoreError
from props_assets.domain.paths import Scope
from props_assets.services.auth import Identity  # noqa: TC001

if TYPE_CHECKING:
    from props_assets.containers import AppContainer
    from props_assets.domain.deletion import DeletionReport
    from props_assets.domain.errors import TreeError
    from props_assets.domain.models import Project

router = APIRouter(
    prefix="/projects",
    tags=["projects"],
    dependencies=[Depends(require_identity)],
)


@router.get("")
async def list_projects(request: Request) -> dict[str, object]:
    """Return all projects, seeding the defaults into an empty catalog."""
    state = await _container(request).catalog().list_projects()
    raise_for_error(state.error)
    return {"projects": state.projects}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_project(body: NameRequest, request: Request) -> dict[str, object]:
    """Create a project after loading its siblings for the name check."""
    catalog = _container(request).catalog()
    state = await catalog.list_projects()
    raise_for_error(state.error)
    state = await catalog.create_project(body.name)
    raise_for_error(state.error)
    return {"projects": state.projects}


@router.delete("/{project_id}")
async def delete_project(project_id: str, request: Request) -> dict[str, object]:
    """Delete a project and its whole subtree."""
    container = _container(request)
    project = await _project_or_404(container, project_id)
    report = await container.catalog().delete_project(project)
    return _deletion_payload(report)


@router.get("/{project_id}/folders")
async def load_root(project_id: str, request: Request) -> dict[str, object]:
    """Return the top-level folders of a project."""
    container = _container(request)
    scope = await _scope_or_404(container, project_id)
    state = await container.folder_tree(scope).load()
    raise_for_error(state.error)
    return {"folders": state.subfolders}


@router.post("/{project_id}/folders", status_code=status.HTTP_201_CREATED)
async def add_folder(
    project_id: str, body: NameRequest, request: Request
) -> dict[str, object]:
    """Create a top-level folder in a project."""
    container = _container(request)
    scope = await _scope_or_404(container, project_id)
    return await _add_child(container, scope, body.name)


@router.get("/{project_id}/folders/{folder_id}")
async def load_folder(
    project_id: str, folder_id: str, request: Request
) -> dict[str, object]:
    """Return a folder's subfolders and photos."""
    container = _container(request)
    scope = await _scope_or_404(container, project_id, folder_id)
    state = await container.folder_tree(scope).load()
    raise_for_error(state.error)
    return {
        "folder": scope.folder,
        "subfolders": state.subfolders,
        "photos": state.photos,
    }


@router.delete("/{project_id}/folders/{folder_id}")
async def delete_folder(
    project_id: str, folder_id: str, request: Request
) -> dict[str, object]:
    """Delete a top-level folder with its subfolders and photos."""
    container = _container(request)
    scope = await _scope_or_404(container, project_id)
    folder = await _lookup(container.tree_store.get_folder(scope.project, folder_id))
    if folder is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    report = await container.folder_tree(scope).delete_subfolder(folder)
    return _deletion_payload(report)


@router.post(
    "/{project_id}/folders/{folder_id}/subfolders",
    status_code=status.HTTP_201_CREATED,
)
async def add_subfolder(
    project_id: str, folder_id: str, body: NameRequest, request: Request
) -> dict[str, object]:
    """Create a subfolder inside a folder."""
    container = _container(request)
    scope = await _scope_or_404(container, project_id, folder_id)
    return await _add_child(container, scope, body.name)


@router.post(
    "/{project_id}/folders/{folder_id}/photos",
    status_code=status.HTTP_201_CREATED,
)
async def upload_folder_photo(
    project_id: str,
    folder_id: str,
    request: Request,
    identity: Identity = Depends(require_identity),
) -> dict[str, object]:
    """Upload the raw request body as a photo in a folder."""
    container = _container(request)
    scope = await _scope_or_404(container, project_id, folder_id)
    state = await container.folder_tree(scope, identity).upload_photo(
        await request.body()
    )
    raise_for_error(state.error)
    return {"photos": state.photos}


@router.delete("/{project_id}/folders/{folder_id}/photos/{photo_id}")
async def delete_folder_photo(
    project_id: str, folder_id: str, photo_id: str, request: Request
) -> dict[str, object]:
    """Delete a folder photo and its file."""
    container = _container(request)
    scope = await _scope_or_404(container, project_id, folder_id)
    photo = await _lookup(container.tree_store.get_photo(scope, photo_id))
    if photo is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    tree = container.folder_tree(scope)
    state = await tree.delete_photo(photo)
    return {"deleted": photo.id, "error": _error_text(state.error)}


@router.get("/{project_id}/photos")
async def list_project_photos(project_id: str, request: Request) -> dict[str, object]:
    """Return photos stored directly under a project."""
    container = _container(request)
    project = await _project_or_404(container, project_id)
    state = await container.project_photos(project).load()
    raise_for_error(state.error)
    return {"photos": state.photos}


@router.post("/{project_id}/photos", status_code=status.HTTP_201_CREATED)
async def upload_project_photo(
    project_id: str,
    request: Request,
    identity: Identity = Depends(require_identity),
) -> dict[str, object]:
    """Upload the raw request body as a project-level photo."""
    container = _container(request)
    project = await _project_or_404(container, project_id)
    photos = container.project_photos(project, identity)
    state = await photos.upload_photo(await request.body())
    raise_for_error(state.error)
    return {"photos": state.photos}


@router.delete("/{project_id}/photos/{photo_id}")
async def delete_project_photo(
    project_id: str, photo_id: str, request: Request
) -> dict[str, object]:
    """Delete a project-level photo and its file."""
    container = _container(request)
    project = await _project_or_404(container, project_id)
    photo = await _lookup(
        container.tree_store.get_photo(Scope(project=project), photo_id)
    )
    if photo is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    state = await container.project_photos(project).delete_photo(photo)
    return {"deleted": photo.id, "error": _error_text(state.error)}


def _container(request: Request) -> AppContainer:
    return request.app.state.container


async def _lookup(awaitable):  # type: ignore[no-untyped-def]
    try:
        return await awaitable
    except StoreError as exc:
        raise_for_error(exc)


async def _project_or_404(container: AppContainer, project_id: str) -> Project:
    project = await _lookup(container.tree_store.get_project(project_id))
    if project is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return project


async def _scope_or_404(
    container: AppContainer, project_id: str, folder_id: str | None = None
) -> Scope:
    project = await _project_or_404(container, project_id)
    if folder_id is None:
        return Scope(project=project)
    folder = await _lookup(container.tree_store.get_folder(project, folder_id))
    if folder is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return Scope(project=project, folder=folder)


async def _add_child(
    container: AppContainer, scope: Scope, name: str
) -> dict[str, object]:
    tree = container.folder_tree(scope)
    state = await tree.load()
    raise_for_error(state.error)
    state = await tree.add_subfolder(name)
    raise_for_error(state.error)
    return {"folders": state.subfolders}


def _deletion_payload(report: DeletionReport) -> dict[str, object]:
    if report.error is not None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "message": report.error.message,
                "completed": [step.path for step in report.completed],
                "pending": [step.path for step in report.pending],
            },
        )
    return {"deleted": report.documents_deleted()}


def _error_text(error: TreeError | None) -> str | None:
    return error.message if error else None
