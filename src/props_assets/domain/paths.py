"""Store path scheme for the asset tree.

Documents are addressed by generated ids, blobs by human-readable names.
Both schemes must stay stable for data that already exists in the store.
"""

from dataclasses import dataclass
from urllib.parse import unquote, urlparse

from props_assets.domain.models import Folder, Project

PROJECTS = "projects"
FOLDERS = "folders"
SUBFOLDERS = "subfolders"
PHOTOS = "photos"


@dataclass(frozen=True)
class Scope:
    """Project and optional folder an operation applies to."""

    project: Project
    folder: Folder | None = None

    @property
    def is_root(self) -> bool:
        return self.folder is None


def join(*segments: str) -> str:
    return "/".join(segments)


def project_document(project_id: str) -> str:
    return join(PROJECTS, project_id)


def folders_collection(project_id: str) -> str:
    return join(PROJECTS, project_id, FOLDERS)


def folder_document(project_id: str, folder_id: str) -> str:
    return join(folders_collection(project_id), folder_id)


def subfolders_collection(project_id: str, folder_id: str) -> str:
    return join(folder_document(project_id, folder_id), SUBFOLDERS)


def folder_photos_collection(project_id: str, folder_id: str) -> str:
    return join(folder_document(project_id, folder_id), PHOTOS)


def root_photos_collection(project_id: str) -> str:
    return join(PROJECTS, project_id, PHOTOS)


def children_collection(scope: Scope) -> str:
    """Collection holding the direct child folders of a scope."""
    if scope.folder is None:
        return folders_collection(scope.project.id)
    return subfolders_collection(scope.project.id, scope.folder.id)


def photos_collection(scope: Scope) -> str:
    """Collection holding the photos directly under a scope."""
    if scope.folder is None:
        return root_photos_collection(scope.project.id)
    return folder_photos_collection(scope.project.id, scope.folder.id)


def folder_photo_blob(project_name: str, folder_name: str, filename: str) -> str:
    return join(PROJECTS, project_name, FOLDERS, folder_name, PHOTOS, filename)


def root_photo_blob(project_name: str, filename: str) -> str:
    return join(PROJECTS, project_name, PHOTOS, filename)


def blob_name_from_url(url: str) -> str | None:
    """Return the trailing path segment of a download URL, if any."""
    path = unquote(urlparse(url).path)
    name = path.rsplit("/", 1)[-1]
    return name or None
