"""Tests for the project catalog."""

import asyncio
from urllib.parse import quote

from props_assets.domain.deletion import StepTarget
from props_assets.domain.errors import DuplicateNameError, StoreError, ValidationError
from props_assets.domain.models import DEFAULT_PROJECT_NAMES, Folder, Photo, Project
from props_assets.domain.paths import Scope
from props_assets.services.gates import InMemoryScopeGate
from props_assets.services.projects import ProjectCatalogService
from props_assets.services.tree_store import TreeStore
from tests.conftest import STORAGE_URL, InMemoryBlobStore, build_tree_store


def _project_names(catalog: ProjectCatalogService) -> list[str]:
    return [project.name for project in catalog.state.projects]


def test_empty_catalog_is_seeded_once() -> None:
    store, documents, _blobs = build_tree_store()
    gate = InMemoryScopeGate()

    async def scenario() -> None:
        first = ProjectCatalogService(store, gate)
        second = ProjectCatalogService(store, gate)
        await asyncio.gather(first.list_projects(), second.list_projects())
        await ProjectCatalogService(store, gate).list_projects()

    asyncio.run(scenario())

    names = sorted(str(fields["name"]) for fields in documents.documents.values())
    assert names == sorted(DEFAULT_PROJECT_NAMES)


def test_list_projects_is_sorted_by_name() -> None:
    store, _documents, _blobs = build_tree_store()
    catalog = ProjectCatalogService(store, InMemoryScopeGate())

    state = asyncio.run(catalog.list_projects())

    assert state.error is None
    assert not state.is_loading
    assert _project_names(catalog) == sorted(DEFAULT_PROJECT_NAMES)


def test_list_projects_failure_is_captured() -> None:
    store, documents, _blobs = build_tree_store()
    documents.failing_queries.add("projects")
    catalog = ProjectCatalogService(store, InMemoryScopeGate())

    state = asyncio.run(catalog.list_projects())

    assert isinstance(state.error, StoreError)
    assert state.projects == []
    assert not state.is_loading


def test_seeding_continues_past_failed_writes() -> None:
    store, documents, _blobs = build_tree_store()
    documents.fail_write_if = lambda _path, fields: fields.get("name") == "Райки"
    catalog = ProjectCatalogService(store, InMemoryScopeGate())

    state = asyncio.run(catalog.list_projects())

    assert len(state.projects) == 3
    assert "Райки" not in _project_names(catalog)
    assert isinstance(state.error, StoreError)


def test_create_project_trims_and_sorts() -> None:
    store, documents, _blobs = build_tree_store()
    catalog = ProjectCatalogService(store, InMemoryScopeGate())

    async def scenario() -> None:
        await catalog.list_projects()
        await catalog.create_project("  Анна  ")

    asyncio.run(scenario())

    assert _project_names(catalog)[0] == "Анна"
    assert catalog.state.error is None
    created = catalog.state.projects[0]
    assert documents.documents[f"projects/{created.id}"]["name"] == "Анна"


def test_create_project_rejects_duplicate_ignoring_case() -> None:
    store, documents, _blobs = build_tree_store()
    catalog = ProjectCatalogService(store, InMemoryScopeGate())

    async def scenario() -> None:
        await catalog.list_projects()
        await catalog.create_project("РАЙКИ")

    asyncio.run(scenario())

    assert isinstance(catalog.state.error, DuplicateNameError)
    assert len(catalog.state.projects) == 4
    assert len(documents.documents) == 4


def test_create_project_rejects_unusable_names() -> None:
    store, documents, _blobs = build_tree_store()
    catalog = ProjectCatalogService(store, InMemoryScopeGate())

    asyncio.run(catalog.create_project("   "))
    assert isinstance(catalog.state.error, ValidationError)

    asyncio.run(catalog.create_project("a/b"))
    assert isinstance(catalog.state.error, ValidationError)
    assert documents.documents == {}


def test_create_project_clears_previous_error() -> None:
    store, _documents, _blobs = build_tree_store()
    catalog = ProjectCatalogService(store, InMemoryScopeGate())

    asyncio.run(catalog.create_project(""))
    asyncio.run(catalog.create_project("Новый"))

    assert catalog.state.error is None


def _populate_project(store: TreeStore, blobs: InMemoryBlobStore) -> Project:
    project = Project(id="P", name="Райки")
    first = Folder(id="A", name="Локации")
    second = Folder(id="B", name="Съемки")
    root_blob = "projects/Райки/photos/1700000000_R.jpg"

    async def scenario() -> None:
        await store.save_project(project)
        await store.save_folder(Scope(project), first)
        await store.save_folder(Scope(project), second)
        await store.save_folder(Scope(project, first), Folder(id="S1", name="Дом"))
        await store.save_folder(Scope(project, first), Folder(id="S2", name="Лес"))
        await store.save_photo(
            Scope(project, first), Photo(id="X", url="x", uploaded_by="a@b.c")
        )
        await store.save_photo(
            Scope(project, second), Photo(id="Y", url="y", uploaded_by="a@b.c")
        )
        await store.save_photo(
            Scope(project),
            Photo(
                id="R",
                url=STORAGE_URL + quote(root_blob),
                uploaded_by="a@b.c",
                filename="1700000000_R",
            ),
        )
        await blobs.put("projects/Райки/folders/Локации/photos/X.jpg", b"x", "")
        await blobs.put("projects/Райки/folders/Съемки/photos/Y.jpg", b"y", "")
        await blobs.put(root_blob, b"r", "")

    asyncio.run(scenario())
    return project


def test_delete_project_removes_subtree_children_first() -> None:
    store, documents, blobs = build_tree_store()
    project = _populate_project(store, blobs)
    catalog = ProjectCatalogService(store, InMemoryScopeGate())
    asyncio.run(catalog.list_projects())

    report = asyncio.run(catalog.delete_project(project))

    assert report.ok
    assert documents.deleted == [
        "projects/P/folders/A/subfolders/S1",
        "projects/P/folders/A/subfolders/S2",
        "projects/P/folders/A/photos/X",
        "projects/P/folders/B/photos/Y",
        "projects/P/folders/A",
        "projects/P/folders/B",
        "projects/P/photos/R",
        "projects/P",
    ]
    assert blobs.deleted == [
        "projects/Райки/folders/Локации/photos/X.jpg",
        "projects/Райки/folders/Съемки/photos/Y.jpg",
        "projects/Райки/photos/1700000000_R.jpg",
    ]
    assert documents.documents == {}
    assert blobs.blobs == {}
    assert catalog.state.projects == []
    assert catalog.state.error is None


def test_delete_project_reports_partial_failure_and_resumes() -> None:
    store, documents, blobs = build_tree_store()
    project = _populate_project(store, blobs)
    catalog = ProjectCatalogService(store, InMemoryScopeGate())
    asyncio.run(catalog.list_projects())
    documents.failing_deletes.add("projects/P/folders/B/photos/Y")

    report = asyncio.run(catalog.delete_project(project))

    assert not report.ok
    assert report.failed is not None
    assert report.failed.path == "projects/P/folders/B/photos/Y"
    assert report.pending[0] == report.failed
    assert report.pending[-1].path == "projects/P"
    assert [step.target for step in report.completed].count(StepTarget.BLOB) == 2
    assert isinstance(catalog.state.error, StoreError)
    assert catalog.state.projects == [project]
    assert "projects/P" in documents.documents

    documents.failing_deletes.clear()
    resumed = asyncio.run(catalog.resume_deletion(project, report))

    assert resumed.ok
    assert resumed.documents_deleted()[-1] == "projects/P"
    assert documents.documents == {}
    assert catalog.state.projects == []
    assert catalog.state.error is None


def test_delete_project_planning_failure() -> None:
    store, documents, blobs = build_tree_store()
    project = _populate_project(store, blobs)
    documents.failing_queries.add("projects/P/folders")
    catalog = ProjectCatalogService(store, InMemoryScopeGate())

    report = asyncio.run(catalog.delete_project(project))

    assert not report.ok
    assert report.completed == []
    assert isinstance(catalog.state.error, StoreError)
    assert documents.deleted == []


def test_delete_project_counts_by_kind() -> None:
    store, documents, blobs = build_tree_store()
    project = Project(id="P", name="Райки")

    async def scenario() -> None:
        await store.save_project(project)
        for folder_id in ("A", "B"):
            folder = Folder(id=folder_id, name=f"Папка {folder_id}")
            await store.save_folder(Scope(project), folder)
            await store.save_folder(
                Scope(project, folder), Folder(id=f"{folder_id}S", name="Дом")
            )
            for index in range(2):
                await store.save_photo(
                    Scope(project, folder),
                    Photo(id=f"{folder_id}{index}", url="u", uploaded_by="a@b.c"),
                )

    asyncio.run(scenario())
    catalog = ProjectCatalogService(store, InMemoryScopeGate())
    report = asyncio.run(catalog.delete_project(project))

    deleted = report.documents_deleted()
    kinds = [path.split("/")[-2] for path in deleted]
    assert kinds == [
        *["subfolders"] * 2, *["photos"] * 4, *["folders"] * 2, "projects"
    ]
    assert len(blobs.deleted) == 4
    assert documents.documents == {}
