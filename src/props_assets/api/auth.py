"""Sign-in endpoints and bearer token identification."""

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from props_assets.api.errors import raise_for_error
from props_assets.api.models import CredentialsRequest
from props_assets.containers import AppContainer
from props_assets.domain.errors import AuthError, ValidationError
from props_assets.services.auth import Identity

router = APIRouter(prefix="/auth", tags=["auth"])


def bearer_token(authorization: str | None = Header(default=None)) -> str:
    """Extract the access token from an ``Authorization: Bearer`` header."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return token.strip()


async def require_identity(
    request: Request, access_token: str = Depends(bearer_token)
) -> Identity:
    """Resolve the user the request's access token belongs to."""
    container: AppContainer = request.app.state.container
    try:
        return await container.auth_service.identify(access_token)
    except AuthError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.localized,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


@router.post("/sign-in")
async def sign_in(body: CredentialsRequest, request: Request) -> dict[str, object]:
    """Sign in with email and password."""
    container: AppContainer = request.app.state.container
    try:
        identity = await container.auth_service.sign_in(body.email, body.password)
    except (AuthError, ValidationError) as exc:
        raise_for_error(exc)
    return _identity_payload(identity)


@router.post("/sign-up", status_code=status.HTTP_201_CREATED)
async def sign_up(body: CredentialsRequest, request: Request) -> dict[str, object]:
    """Register a new account."""
    container: AppContainer = request.app.state.container
    try:
        identity = await container.auth_service.sign_up(body.email, body.password)
    except (AuthError, ValidationError) as exc:
        raise_for_error(exc)
    return _identity_payload(identity)


@router.post("/sign-out")
async def sign_out(
    request: Request, access_token: str = Depends(bearer_token)
) -> dict[str, str]:
    """Revoke the session behind the request's access token."""
    container: AppContainer = request.app.state.container
    try:
        await container.auth_service.sign_out(access_token)
    except AuthError as exc:
        raise_for_error(exc)
    return {"status": "signed_out"}


@router.get("/me")
async def me(identity: Identity = Depends(require_identity)) -> dict[str, object]:
    """Return the user the access token belongs to."""
    return _identity_payload(identity)


def _identity_payload(identity: Identity) -> dict[str, object]:
    return {
        "email": identity.email,
        "access_token": identity.access_token,
        "signed_in": identity.access_token is not None,
    }
