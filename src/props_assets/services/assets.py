"""Photos stored directly under a project."""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from props_assets.domain.errors import StoreError, TreeError
from props_assets.domain.models import Photo, Project, new_id
from props_assets.domain.paths import (
    Scope,
    join,
    photos_collection,
    root_photo_blob,
)
from props_assets.services.auth import Identity
from props_assets.services.images import DEFAULT_JPEG_QUALITY, encode_jpeg
from props_assets.services.tree_store import TreeStore, root_photo_blob_steps

_logger = logging.getLogger(__name__)


class PhotoDownloader(Protocol):
    """Fetches photo bytes from their download URL."""

    async def download(self, url: str) -> bytes:
        """Return the bytes served at a URL."""


@dataclass
class AssetState:
    """Project-root photos as last loaded."""

    photos: list[Photo] = field(default_factory=list)
    is_loading: bool = False
    error: TreeError | None = None


@dataclass
class AssetTransferService:
    """Uploads, lists, downloads and deletes project-root photos."""

    project: Project
    store: TreeStore
    downloader: PhotoDownloader
    identity: Identity | None = None
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    state: AssetState = field(default_factory=AssetState)

    @property
    def scope(self) -> Scope:
        return Scope(project=self.project)

    async def load(self) -> AssetState:
        self.state.is_loading = True
        try:
            self.state.photos = await self.store.list_photos(self.scope)
            self.state.error = None
        except StoreError as exc:
            self._fail("Error loading photos", exc)
        finally:
            self.state.is_loading = False
        return self.state

    async def upload_photo(self, image_bytes: bytes) -> AssetState:
        """Upload an image under the project and reload the photo list."""
        self.state.is_loading = True
        try:
            try:
                data = encode_jpeg(image_bytes, self.jpeg_quality)
                filename = _timestamped_filename()
                url = await self.store.upload_image(
                    root_photo_blob(self.project.name, f"{filename}.jpg"), data
                )
                photo = Photo(
                    id=new_id(),
                    url=url,
                    uploaded_by=self._uploader(),
                    filename=filename,
                )
                await self.store.save_photo(self.scope, photo)
            except TreeError as exc:
                self._fail("Error uploading photo", exc)
                return self.state
            self.state.error = None
            self.state.photos = await self.store.list_photos(self.scope)
        except StoreError as exc:
            self._fail("Error loading photos", exc)
        finally:
            self.state.is_loading = False
        return self.state

    async def delete_photo(self, photo: Photo) -> AssetState:
        """Delete the blob named in the photo URL, then its metadata."""
        self.state.is_loading = True
        try:
            blob_failed = False
            for step in root_photo_blob_steps(self.project, photo):
                try:
                    await self.store.delete_blob(step.path)
                except StoreError as exc:
                    blob_failed = True
                    self._fail("Error deleting photo file", exc)
            try:
                await self.store.delete_document(
                    join(photos_collection(self.scope), photo.id)
                )
            except StoreError as exc:
                self._fail("Error deleting photo", exc)
                return self.state
            self.state.photos = [item for item in self.state.photos if item != photo]
            if not blob_failed:
                self.state.error = None
        finally:
            self.state.is_loading = False
        return self.state

    async def download_photo(self, photo: Photo) -> bytes | None:
        """Fetch a photo's bytes, e.g. to save it on the device."""
        try:
            return await self.downloader.download(photo.url)
        except StoreError as exc:
            self._fail("Error downloading photo", exc)
            return None

    def _uploader(self) -> str:
        return self.identity.email if self.identity else ""

    def _fail(self, context: str, exc: TreeError) -> None:
        _logger.warning("%s: %s", context, exc)
        self.state.error = exc


def _timestamped_filename() -> str:
    seconds = int(datetime.now(tz=UTC).timestamp())
    return f"{seconds}_{str(uuid4()).upper()}"
