"""Translation of captured tree errors into HTTP errors."""

from fastapi import HTTPException, status

from props_assets.domain.errors import (
    AuthError,
    DuplicateNameError,
    TreeError,
    ValidationError,
)


def raise_for_error(error: TreeError | None) -> None:
    """Translate a captured manager error into an HTTP error."""
    if error is None:
        return
    if isinstance(error, ValidationError):
        code = 422
    elif isinstance(error, DuplicateNameError):
        code = status.HTTP_409_CONFLICT
    elif isinstance(error, AuthError):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, detail=error.localized)
    else:
        code = status.HTTP_502_BAD_GATEWAY
    raise HTTPException(status_code=code, detail=error.message)
