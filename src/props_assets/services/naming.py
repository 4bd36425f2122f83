"""Name rules shared by projects and folders."""

from collections.abc import Iterable

from props_assets.domain.errors import DuplicateNameError, ValidationError
from props_assets.domain.models import same_name


def clean_name(name: str) -> str:
    """Trim a name and reject values that cannot become a path segment."""
    cleaned = name.strip()
    if not cleaned:
        raise ValidationError("Name cannot be empty")
    if "/" in cleaned:
        raise ValidationError("Name cannot contain '/'")
    return cleaned


def ensure_unique(name: str, siblings: Iterable[str]) -> None:
    """Raise if a sibling already uses the name, ignoring case."""
    if any(same_name(name, sibling) for sibling in siblings):
        raise DuplicateNameError(name)
