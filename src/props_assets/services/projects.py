"""Top-level project catalog."""

import logging
from dataclasses import dataclass, field

from props_assets.domain.deletion import DeletionReport
from props_assets.domain.errors import DuplicateNameError, StoreError, TreeError
from props_assets.domain.models import Project, default_projects, new_id
from props_assets.domain.paths import PROJECTS
from props_assets.services.gates import ScopeGate
from props_assets.services.naming import clean_name, ensure_unique
from props_assets.services.tree_store import TreeStore

_logger = logging.getLogger(__name__)


@dataclass
class CatalogState:
    """Projects as last seen by the catalog."""

    projects: list[Project] = field(default_factory=list)
    is_loading: bool = False
    error: TreeError | None = None


@dataclass
class ProjectCatalogService:
    """Lists, creates and deletes projects."""

    store: TreeStore
    gate: ScopeGate
    state: CatalogState = field(default_factory=CatalogState)

    async def list_projects(self) -> CatalogState:
        """Fetch projects, seeding the defaults into an empty catalog."""
        self.state.is_loading = True
        try:
            async with self.gate.lock_for(PROJECTS):
                self.state.error = None
                projects = await self.store.list_projects()
                self.state.projects = projects or await self._seed_defaults()
        except StoreError as exc:
            self._fail("Failed to load projects", exc)
        finally:
            self.state.is_loading = False
        return self.state

    async def create_project(self, name: str) -> CatalogState:
        """Validate, persist and insert a new project in name order."""
        try:
            cleaned = clean_name(name)
            ensure_unique(cleaned, (project.name for project in self.state.projects))
            project = Project(id=new_id(), name=cleaned)
            await self.store.save_project(project)
        except DuplicateNameError as exc:
            self._fail("Project with this name already exists", exc)
            return self.state
        except TreeError as exc:
            self._fail("Failed to add project", exc)
            return self.state
        self.state.projects.append(project)
        self.state.projects.sort(key=lambda item: item.name)
        self.state.error = None
        return self.state

    async def delete_project(self, project: Project) -> DeletionReport:
        """Delete a project and everything stored beneath it."""
        self.state.is_loading = True
        try:
            steps = await self.store.plan_project_deletion(project)
            report = await self.store.run_deletion(steps)
        except StoreError as exc:
            self._fail("Failed to delete project", exc)
            return DeletionReport(error=exc)
        finally:
            self.state.is_loading = False
        self._apply_deletion(project, report)
        return report

    async def resume_deletion(
        self, project: Project, report: DeletionReport
    ) -> DeletionReport:
        """Retry the steps a failed project deletion left behind."""
        resumed = await self.store.run_deletion(report.pending)
        resumed.completed = [*report.completed, *resumed.completed]
        self._apply_deletion(project, resumed)
        return resumed

    def _apply_deletion(self, project: Project, report: DeletionReport) -> None:
        if report.error is not None:
            self._fail("Failed to delete project", report.error)
            return
        self.state.projects = [item for item in self.state.projects if item != project]
        self.state.error = None
        _logger.info("Deleted project %s (%s)", project.name, project.id)

    async def _seed_defaults(self) -> list[Project]:
        seeded: list[Project] = []
        for project in default_projects():
            try:
                await self.store.save_project(project)
            except StoreError as exc:
                self._fail("Failed to create default project", exc)
                continue
            seeded.append(project)
        _logger.info("Seeded %s default projects", len(seeded))
        return sorted(seeded, key=lambda item: item.name)

    def _fail(self, context: str, exc: TreeError) -> None:
        _logger.warning("%s: %s", context, exc)
        self.state.error = exc
