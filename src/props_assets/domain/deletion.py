"""Ordered deletion plans for cascades the store cannot do itself."""

from dataclasses import dataclass, field
from enum import Enum

from props_assets.domain.errors import StoreError


class StepTarget(str, Enum):
    """Which service a deletion step talks to."""

    DOCUMENT = "document"
    BLOB = "blob"


@dataclass(frozen=True)
class DeleteStep:
    """Single remote delete call."""

    target: StepTarget
    path: str


@dataclass
class DeletionReport:
    """Outcome of running a deletion plan."""

    completed: list[DeleteStep] = field(default_factory=list)
    failed: DeleteStep | None = None
    pending: list[DeleteStep] = field(default_factory=list)
    error: StoreError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def documents_deleted(self) -> list[str]:
        return [
            step.path for step in self.completed if step.target is StepTarget.DOCUMENT
        ]
