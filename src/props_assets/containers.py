"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import ClientOptions, create_client

from props_assets.adapters.photo_downloader import HttpxPhotoDownloader
from props_assets.adapters.supabase_blob_store import SupabaseBlobStore
from props_assets.adapters.supabase_document_store import SupabaseDocumentStore
from props_assets.adapters.supabase_identity_provider import (
    SupabaseIdentityProvider,
)
from props_assets.config import Settings
from props_assets.domain.models import Project
from props_assets.domain.paths import Scope
from props_assets.services.assets import AssetTransferService, PhotoDownloader
from props_assets.services.auth import AuthService, Identity
from props_assets.services.folders import FolderTreeService
from props_assets.services.gates import InMemoryScopeGate, ScopeGate
from props_assets.services.projects import ProjectCatalogService
from props_assets.services.tree_store import TreeStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies and builds scoped services."""

    settings: Settings
    tree_store: TreeStore
    auth_service: AuthService
    photo_downloader: PhotoDownloader
    gate: ScopeGate
    close_resources: Callable[[], Awaitable[None]]

    def catalog(self) -> ProjectCatalogService:
        return ProjectCatalogService(store=self.tree_store, gate=self.gate)

    def folder_tree(
        self, scope: Scope, identity: Identity | None = None
    ) -> FolderTreeService:
        return FolderTreeService(
            scope=scope,
            store=self.tree_store,
            gate=self.gate,
            identity=identity,
            jpeg_quality=self.settings.jpeg_quality,
        )

    def project_photos(
        self, project: Project, identity: Identity | None = None
    ) -> AssetTransferService:
        return AssetTransferService(
            project=project,
            store=self.tree_store,
            downloader=self.photo_downloader,
            identity=identity,
            jpeg_quality=self.settings.jpeg_quality,
        )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_key
    )
    tree_store = TreeStore(
        documents=SupabaseDocumentStore(
            supabase_client, table=resolved_settings.documents_table
        ),
        blobs=SupabaseBlobStore(
            supabase_client, bucket=resolved_settings.storage_bucket
        ),
    )
    # Sessions stay off the shared data client; requests carry their own token.
    auth_client = create_client(
        resolved_settings.supabase_url,
        resolved_settings.supabase_key,
        options=ClientOptions(persist_session=False, auto_refresh_token=False),
    )
    auth_service = AuthService(SupabaseIdentityProvider(auth_client))
    photo_downloader = HttpxPhotoDownloader.create(
        timeout_seconds=resolved_settings.download_timeout_seconds
    )

    async def close_resources() -> None:
        await photo_downloader.close()

    return AppContainer(
        settings=resolved_settings,
        tree_store=tree_store,
        auth_service=auth_service,
        photo_downloader=photo_downloader,
        gate=InMemoryScopeGate(),
        close_resources=close_resources,
    )
