"""Entity-level access to the remote document and blob stores."""

import logging
from dataclasses import dataclass
from typing import Protocol

from props_assets.domain.deletion import DeleteStep, DeletionReport, StepTarget
from props_assets.domain.errors import StoreError
from props_assets.domain.models import Folder, Photo, Project
from props_assets.domain.paths import (
    PROJECTS,
    Scope,
    blob_name_from_url,
    children_collection,
    folder_document,
    folder_photo_blob,
    folder_photos_collection,
    folders_collection,
    join,
    photos_collection,
    project_document,
    root_photo_blob,
    root_photos_collection,
    subfolders_collection,
)

_logger = logging.getLogger(__name__)

JPEG_CONTENT_TYPE = "image/jpeg"


@dataclass(frozen=True)
class Document:
    """Stored document with its id and raw fields."""

    id: str
    path: str
    fields: dict[str, object]


class DocumentStore(Protocol):
    """Path-addressed document service."""

    async def get(self, path: str) -> Document | None:
        """Return the document at a path, if present."""

    async def set(self, path: str, fields: dict[str, object]) -> None:
        """Create or replace the document at a path."""

    async def delete(self, path: str) -> None:
        """Delete the document at a path."""

    async def query(
        self,
        collection_path: str,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[Document]:
        """Return the documents directly inside a collection."""


class BlobStore(Protocol):
    """Path-addressed binary storage."""

    async def put(self, path: str, data: bytes, content_type: str) -> str:
        """Store bytes at a path and return a handle for them."""

    async def get_download_url(self, handle: str) -> str:
        """Return a URL the stored bytes can be fetched from."""

    async def delete(self, path: str) -> None:
        """Delete the bytes stored at a path."""


@dataclass
class TreeStore:
    """Maps projects, folders and photos onto store paths."""

    documents: DocumentStore
    blobs: BlobStore

    async def list_projects(self) -> list[Project]:
        rows = await self.documents.query(PROJECTS, order_by="name")
        return [Project.from_document(row.id, row.fields) for row in rows]

    async def get_project(self, project_id: str) -> Project | None:
        row = await self.documents.get(project_document(project_id))
        if row is None:
            return None
        return Project.from_document(row.id, row.fields)

    async def save_project(self, project: Project) -> None:
        await self.documents.set(project_document(project.id), project.to_document())

    async def list_folders(self, scope: Scope) -> list[Folder]:
        """List the direct child folders of a scope ordered by name."""
        rows = await self.documents.query(children_collection(scope), order_by="name")
        return [Folder.from_document(row.id, row.fields) for row in rows]

    async def get_folder(self, project: Project, folder_id: str) -> Folder | None:
        row = await self.documents.get(folder_document(project.id, folder_id))
        if row is None:
            return None
        return Folder.from_document(row.id, row.fields)

    async def save_folder(self, scope: Scope, folder: Folder) -> None:
        path = join(children_collection(scope), folder.id)
        await self.documents.set(path, folder.to_document())

    async def list_photos(self, scope: Scope) -> list[Photo]:
        """List the photos directly under a scope, newest first."""
        rows = await self.documents.query(
            photos_collection(scope), order_by="timestamp", descending=True
        )
        return [Photo.from_document(row.id, row.fields) for row in rows]

    async def get_photo(self, scope: Scope, photo_id: str) -> Photo | None:
        row = await self.documents.get(join(photos_collection(scope), photo_id))
        if row is None:
            return None
        return Photo.from_document(row.id, row.fields)

    async def save_photo(self, scope: Scope, photo: Photo) -> None:
        path = join(photos_collection(scope), photo.id)
        if scope.is_root:
            await self.documents.set(path, photo.to_root_document())
        else:
            await self.documents.set(path, photo.to_document())

    async def upload_image(self, blob_path: str, data: bytes) -> str:
        """Upload JPEG bytes and return their download URL."""
        handle = await self.blobs.put(blob_path, data, JPEG_CONTENT_TYPE)
        return await self.blobs.get_download_url(handle)

    async def delete_blob(self, blob_path: str) -> None:
        await self.blobs.delete(blob_path)

    async def delete_document(self, path: str) -> None:
        await self.documents.delete(path)

    async def plan_project_deletion(self, project: Project) -> list[DeleteStep]:
        """Build the children-first delete steps for a whole project."""
        folders = await self.documents.query(folders_collection(project.id))
        subfolder_steps: list[DeleteStep] = []
        photo_steps: list[DeleteStep] = []
        folder_steps: list[DeleteStep] = []
        for row in folders:
            folder = Folder.from_document(row.id, row.fields)
            subfolder_steps.extend(await self._subfolder_steps(project, folder))
            photo_steps.extend(await self._folder_photo_steps(project, folder))
            folder_steps.append(_document_step(row.path))

        root_photo_steps: list[DeleteStep] = []
        for row in await self.documents.query(root_photos_collection(project.id)):
            photo = Photo.from_document(row.id, row.fields)
            root_photo_steps.extend(root_photo_blob_steps(project, photo))
            root_photo_steps.append(_document_step(row.path))

        return [
            *subfolder_steps,
            *photo_steps,
            *folder_steps,
            *root_photo_steps,
            _document_step(project_document(project.id)),
        ]

    async def plan_folder_deletion(
        self, scope: Scope, folder: Folder
    ) -> list[DeleteStep]:
        """Build the delete steps for a child folder of a scope."""
        project = scope.project
        if not scope.is_root:
            # Subfolders have no children of their own in the path scheme.
            return [_document_step(join(children_collection(scope), folder.id))]
        return [
            *await self._subfolder_steps(project, folder),
            *await self._folder_photo_steps(project, folder),
            _document_step(folder_document(project.id, folder.id)),
        ]

    async def run_deletion(self, steps: list[DeleteStep]) -> DeletionReport:
        """Run delete steps in order, stopping at the first failure."""
        report = DeletionReport()
        for index, step in enumerate(steps):
            try:
                if step.target is StepTarget.BLOB:
                    await self.blobs.delete(step.path)
                else:
                    await self.documents.delete(step.path)
            except StoreError as exc:
                _logger.warning("Delete step failed at %s: %s", step.path, exc)
                report.failed = step
                report.pending = list(steps[index:])
                report.error = exc
                return report
            report.completed.append(step)
        return report

    async def _subfolder_steps(
        self, project: Project, folder: Folder
    ) -> list[DeleteStep]:
        rows = await self.documents.query(subfolders_collection(project.id, folder.id))
        return [_document_step(row.path) for row in rows]

    async def _folder_photo_steps(
        self, project: Project, folder: Folder
    ) -> list[DeleteStep]:
        steps: list[DeleteStep] = []
        rows = await self.documents.query(
            folder_photos_collection(project.id, folder.id)
        )
        for row in rows:
            steps.append(
                DeleteStep(
                    StepTarget.BLOB,
                    folder_photo_blob_path(project, folder, row.id),
                )
            )
            steps.append(_document_step(row.path))
        return steps


def folder_photo_blob_path(project: Project, folder: Folder, photo_id: str) -> str:
    """Blob path of a folder-scoped photo, keyed by its id."""
    return folder_photo_blob(project.name, folder.name, f"{photo_id}.jpg")


def root_photo_blob_steps(project: Project, photo: Photo) -> list[DeleteStep]:
    """Blob step for a root photo, keyed by the file name in its URL."""
    name = blob_name_from_url(photo.url)
    if name is None:
        return []
    return [DeleteStep(StepTarget.BLOB, root_photo_blob(project.name, name))]


def _document_step(path: str) -> DeleteStep:
    return DeleteStep(StepTarget.DOCUMENT, path)
