"""Supabase Auth identity provider."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

import httpx
from supabase import Client
from supabase_auth.errors import AuthError as SupabaseAuthError

from props_assets.adapters.supabase_calls import error_message
from props_assets.domain.errors import AuthError
from props_assets.services.auth import (
    Identity,
    IdentityProvider,
    localize_auth_message,
)


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Email/password authentication through Supabase Auth.

    The client is dedicated to auth calls. Sessions are never read back from
    it; every request is identified by the access token it carries.
    """

    client: Client

    async def sign_in(self, email: str, password: str) -> Identity:
        """Sign in and return the identity with its access token."""
        response = await _auth_call(
            lambda: self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        )
        return _identity_from_response(response, email)

    async def sign_up(self, email: str, password: str) -> Identity:
        """Create an account; the token is absent until email confirmation."""
        response = await _auth_call(
            lambda: self.client.auth.sign_up({"email": email, "password": password})
        )
        return _identity_from_response(response, email)

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session behind an access token."""
        await _auth_call(lambda: self.client.auth.admin.sign_out(access_token))

    async def resolve(self, access_token: str) -> Identity:
        """Look up the user an access token was issued to."""
        response = await _auth_call(lambda: self.client.auth.get_user(access_token))
        user = getattr(response, "user", None)
        email = getattr(user, "email", None)
        if not email:
            raise AuthError("Invalid access token", "Требуется вход")
        return Identity(email=email, access_token=access_token)


async def _auth_call(operation: Callable[[], object]) -> object:
    try:
        return await asyncio.to_thread(operation)
    except SupabaseAuthError as exc:
        message = error_message(exc)
        raise AuthError(message, localize_auth_message(message)) from exc
    except httpx.HTTPError as exc:
        message = f"network error: {exc}"
        raise AuthError(message, localize_auth_message(message)) from exc


def _identity_from_response(response: object, email: str) -> Identity:
    user = getattr(response, "user", None)
    if user is None:
        raise AuthError("Authentication returned no user")
    session = getattr(response, "session", None)
    return Identity(
        email=getattr(user, "email", None) or email,
        access_token=getattr(session, "access_token", None),
    )
