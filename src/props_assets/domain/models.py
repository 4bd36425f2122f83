"""Domain models for the asset tree."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

_NO_DATE = "Нет даты"

DEFAULT_PROJECT_NAMES = (
    "Солдатская мать",
    "Тень Чикатило",
    "Райки",
    "След Чикатило",
)

DEFAULT_FOLDER_NAMES = (
    "Локации",
    "Персонажи",
    "Съемки",
    "Полиграфия",
    "Стыки",
)


class _ServerTimestamp:
    """Marker replaced by the document store's clock at write time."""

    _instance: "_ServerTimestamp | None" = None

    def __new__(cls) -> "_ServerTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def new_id() -> str:
    """Generate a client-side document id."""
    return str(uuid4()).upper()


@dataclass(frozen=True)
class Project:
    """Top-level production project."""

    id: str
    name: str = field(compare=False)
    created_at: datetime | None = field(default=None, compare=False)

    def to_document(self) -> dict[str, object]:
        return {"id": self.id, "name": self.name, "createdAt": SERVER_TIMESTAMP}

    @classmethod
    def from_document(cls, document_id: str, fields: dict[str, object]) -> "Project":
        return cls(
            id=document_id,
            name=str(fields.get("name", "")),
            created_at=parse_timestamp(fields.get("createdAt")),
        )


@dataclass(frozen=True)
class Photo:
    """Uploaded photo metadata."""

    id: str
    url: str = field(compare=False)
    uploaded_by: str = field(compare=False)
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(tz=UTC), compare=False
    )
    filename: str | None = field(default=None, compare=False)

    def to_document(self) -> dict[str, object]:
        """Serialize a folder-scoped photo."""
        return {
            "id": self.id,
            "url": self.url,
            "uploadedBy": self.uploaded_by,
            "timestamp": SERVER_TIMESTAMP,
        }

    def to_root_document(self) -> dict[str, object]:
        """Serialize a project-root photo, which records its blob filename."""
        return {
            "url": self.url,
            "uploadedBy": self.uploaded_by,
            "timestamp": SERVER_TIMESTAMP,
            "filename": self.filename,
        }

    @classmethod
    def from_document(cls, document_id: str, fields: dict[str, object]) -> "Photo":
        filename = fields.get("filename")
        return cls(
            id=document_id,
            url=str(fields.get("url", "")),
            uploaded_by=str(fields.get("uploadedBy", "")),
            timestamp=parse_timestamp(fields.get("timestamp"))
            or datetime.now(tz=UTC),
            filename=str(filename) if filename else None,
        )


@dataclass(frozen=True)
class Folder:
    """Folder or subfolder; children are loaded one level at a time."""

    id: str
    name: str = field(compare=False)
    created_at: datetime | None = field(default=None, compare=False)
    subfolders: list["Folder"] = field(default_factory=list, compare=False)
    photos: list[Photo] = field(default_factory=list, compare=False)

    def to_document(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "subfolders": [],
            "createdAt": SERVER_TIMESTAMP,
        }

    @classmethod
    def from_document(cls, document_id: str, fields: dict[str, object]) -> "Folder":
        # Older folder documents were stamped under "timestamp".
        created_raw = fields.get("createdAt", fields.get("timestamp"))
        return cls(
            id=document_id,
            name=str(fields.get("name", "")),
            created_at=parse_timestamp(created_raw),
        )

    def contains_subfolder(self, name: str) -> bool:
        """Return True if a loaded subfolder has this name, ignoring case."""
        return any(same_name(folder.name, name) for folder in self.subfolders)

    @property
    def total_photos_count(self) -> int:
        """Count photos here and in all loaded subfolders."""
        return len(self.photos) + sum(
            folder.total_photos_count for folder in self.subfolders
        )

    @property
    def formatted_created_at(self) -> str:
        if self.created_at is None:
            return _NO_DATE
        return self.created_at.strftime("%d.%m.%Y %H:%M")


def default_projects() -> list[Project]:
    """Build the projects seeded into an empty catalog."""
    return [Project(id=new_id(), name=name) for name in DEFAULT_PROJECT_NAMES]


def default_folders() -> list[Folder]:
    """Build the folders seeded into an empty project."""
    return [Folder(id=new_id(), name=name) for name in DEFAULT_FOLDER_NAMES]


def same_name(left: str, right: str) -> bool:
    """Compare sibling names the way uniqueness is enforced."""
    return left.casefold() == right.casefold()


def parse_timestamp(value: object) -> datetime | None:
    """Parse a stored timestamp, accepting datetimes and ISO strings."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None
