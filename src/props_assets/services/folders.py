"""Folder tree browsing and folder-scoped photos."""

import asyncio
import logging
from dataclasses import dataclass, field

from props_assets.domain.deletion import DeletionReport
from props_assets.domain.errors import DuplicateNameError, StoreError, TreeError
from props_assets.domain.models import Folder, Photo, default_folders, new_id
from props_assets.domain.paths import (
    Scope,
    children_collection,
    join,
    photos_collection,
)
from props_assets.services.auth import Identity
from props_assets.services.gates import ScopeGate
from props_assets.services.images import DEFAULT_JPEG_QUALITY, encode_jpeg
from props_assets.services.naming import clean_name, ensure_unique
from props_assets.services.tree_store import TreeStore, folder_photo_blob_path

_logger = logging.getLogger(__name__)


@dataclass
class FolderState:
    """Direct children of a scope as last loaded."""

    subfolders: list[Folder] = field(default_factory=list)
    photos: list[Photo] = field(default_factory=list)
    is_loading: bool = False
    error: TreeError | None = None


@dataclass
class FolderTreeService:
    """Manages one level of the tree under a project or folder."""

    scope: Scope
    store: TreeStore
    gate: ScopeGate
    identity: Identity | None = None
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    state: FolderState = field(default_factory=FolderState)

    async def load(self) -> FolderState:
        """Fetch subfolders and, inside a folder, its photos."""
        self.state.is_loading = True
        self.state.error = None
        try:
            await asyncio.gather(self._load_subfolders(), self._load_photos())
        finally:
            self.state.is_loading = False
        return self.state

    async def add_subfolder(self, name: str) -> FolderState:
        """Validate, persist and insert a new child folder in name order."""
        try:
            cleaned = clean_name(name)
            ensure_unique(cleaned, (folder.name for folder in self.state.subfolders))
            folder = Folder(id=new_id(), name=cleaned)
            await self.store.save_folder(self.scope, folder)
        except DuplicateNameError as exc:
            self._fail("Folder with this name already exists", exc)
            return self.state
        except TreeError as exc:
            self._fail("Failed to create folder", exc)
            return self.state
        self.state.subfolders.append(folder)
        self.state.subfolders.sort(key=lambda item: item.name)
        self.state.error = None
        return self.state

    async def upload_photo(self, image_bytes: bytes) -> FolderState:
        """Upload an image into the scoped folder, then reload its photos."""
        if self.scope.folder is None:
            return self.state
        folder = self.scope.folder
        self.state.is_loading = True
        try:
            try:
                data = encode_jpeg(image_bytes, self.jpeg_quality)
                # Blob name is the photo id so deletion can derive it.
                photo_id = new_id()
                blob_path = folder_photo_blob_path(self.scope.project, folder, photo_id)
                url = await self.store.upload_image(blob_path, data)
                photo = Photo(id=photo_id, url=url, uploaded_by=self._uploader())
                await self.store.save_photo(self.scope, photo)
            except TreeError as exc:
                self._fail("Failed to upload photo", exc)
                return self.state
            self.state.error = None
            await self._load_photos()
        finally:
            self.state.is_loading = False
        return self.state

    async def delete_photo(self, photo: Photo) -> FolderState:
        """Delete a photo's blob and metadata, then drop it from the list."""
        if self.scope.folder is None:
            return self.state
        self.state.is_loading = True
        try:
            blob_failed = False
            try:
                await self.store.delete_blob(
                    folder_photo_blob_path(
                        self.scope.project, self.scope.folder, photo.id
                    )
                )
            except StoreError as exc:
                blob_failed = True
                self._fail("Failed to delete photo file", exc)
            try:
                await self.store.delete_document(
                    join(photos_collection(self.scope), photo.id)
                )
            except StoreError as exc:
                self._fail("Failed to delete photo", exc)
                return self.state
            self.state.photos = [item for item in self.state.photos if item != photo]
            if not blob_failed:
                self.state.error = None
        finally:
            self.state.is_loading = False
        return self.state

    async def delete_subfolder(self, folder: Folder) -> DeletionReport:
        """Delete a child folder together with its subfolders and photos."""
        self.state.is_loading = True
        try:
            steps = await self.store.plan_folder_deletion(self.scope, folder)
            report = await self.store.run_deletion(steps)
        except StoreError as exc:
            self._fail("Failed to delete folder", exc)
            return DeletionReport(error=exc)
        finally:
            self.state.is_loading = False
        self._apply_deletion(folder, report)
        return report

    async def resume_deletion(
        self, folder: Folder, report: DeletionReport
    ) -> DeletionReport:
        """Retry the steps a failed folder deletion left behind."""
        resumed = await self.store.run_deletion(report.pending)
        resumed.completed = [*report.completed, *resumed.completed]
        self._apply_deletion(folder, resumed)
        return resumed

    def _apply_deletion(self, folder: Folder, report: DeletionReport) -> None:
        if report.error is not None:
            self._fail("Failed to delete folder", report.error)
            return
        self.state.subfolders = [
            item for item in self.state.subfolders if item != folder
        ]
        self.state.error = None

    async def _load_subfolders(self) -> None:
        try:
            async with self.gate.lock_for(children_collection(self.scope)):
                subfolders = await self.store.list_folders(self.scope)
                self.state.subfolders = subfolders
                if not subfolders and self.scope.is_root:
                    await self._seed_defaults()
        except StoreError as exc:
            self._fail("Failed to load folders", exc)

    async def _load_photos(self) -> None:
        if self.scope.is_root:
            return
        try:
            self.state.photos = await self.store.list_photos(self.scope)
        except StoreError as exc:
            self._fail("Failed to load photos", exc)

    async def _seed_defaults(self) -> None:
        for folder in default_folders():
            try:
                await self.store.save_folder(self.scope, folder)
            except StoreError as exc:
                self._fail("Failed to create default folder", exc)
                continue
            self.state.subfolders.append(folder)
        self.state.subfolders.sort(key=lambda item: item.name)
        _logger.info(
            "Seeded default folders for project %s", self.scope.project.id
        )

    def _uploader(self) -> str:
        return self.identity.email if self.identity else ""

    def _fail(self, context: str, exc: TreeError) -> None:
        _logger.warning("%s: %s", context, exc)
        self.state.error = exc
