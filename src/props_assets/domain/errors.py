"""Error taxonomy for tree operations."""


class TreeError(Exception):
    """Base class for errors captured by the managers."""

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(TreeError):
    """Empty or otherwise unusable input."""


class DuplicateNameError(TreeError):
    """A sibling with the same name already exists."""

    def __init__(self, name: str) -> None:
        super().__init__(f"An item named {name!r} already exists")
        self.name = name


class StoreError(TreeError):
    """A document or blob operation failed."""


class AuthError(TreeError):
    """The identity provider rejected a request."""

    def __init__(self, message: str, localized: str | None = None) -> None:
        super().__init__(message)
        self.localized = localized or message
