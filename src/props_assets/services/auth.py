"""Sign-in state and credential checks."""

import logging
from dataclasses import dataclass
from typing import Protocol

from props_assets.domain.errors import AuthError, ValidationError

_logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

_LOCALIZED_MESSAGES = (
    (
        ("badly formatted", "invalid format", "invalid email"),
        "Неверный формат email адреса",
    ),
    (("password is invalid", "invalid login credentials"), "Неверный пароль"),
    (("no user record", "user not found"), "Пользователь не найден"),
    (("already in use", "already registered"), "Этот email уже используется"),
    (
        ("network error", "connection"),
        "Ошибка сети. Проверьте подключение к интернету",
    ),
)


@dataclass(frozen=True)
class Identity:
    """Signed-in user as seen by the asset tree."""

    email: str
    access_token: str | None = None


class IdentityProvider(Protocol):
    """External authentication service."""

    async def sign_in(self, email: str, password: str) -> Identity:
        """Sign in with email and password."""

    async def sign_up(self, email: str, password: str) -> Identity:
        """Register a new account and sign it in."""

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session an access token belongs to."""

    async def resolve(self, access_token: str) -> Identity:
        """Return the user an access token was issued to."""


def localize_auth_message(message: str) -> str:
    """Translate known provider messages, passing others through verbatim."""
    lowered = message.lower()
    for needles, localized in _LOCALIZED_MESSAGES:
        if any(needle in lowered for needle in needles):
            return localized
    return message


def validate_credentials(email: str, password: str) -> tuple[str, str]:
    """Apply the sign-in form rules before calling the provider."""
    cleaned_email = email.strip()
    if not cleaned_email or "@" not in cleaned_email:
        raise ValidationError("Enter a valid email address")
    if not password.strip() or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    return cleaned_email, password


@dataclass
class AuthService:
    """Signs users in and resolves the bearer of an access token."""

    provider: IdentityProvider

    async def sign_in(self, email: str, password: str) -> Identity:
        email, password = validate_credentials(email, password)
        try:
            return await self.provider.sign_in(email, password)
        except AuthError as exc:
            _logger.warning("Sign-in failed for %s: %s", email, exc)
            raise

    async def sign_up(self, email: str, password: str) -> Identity:
        email, password = validate_credentials(email, password)
        try:
            return await self.provider.sign_up(email, password)
        except AuthError as exc:
            _logger.warning("Sign-up failed for %s: %s", email, exc)
            raise

    async def sign_out(self, access_token: str) -> None:
        await self.provider.sign_out(access_token)

    async def identify(self, access_token: str) -> Identity:
        """Return the user an access token was issued to."""
        if not access_token.strip():
            raise AuthError("Missing access token", "Требуется вход")
        return await self.provider.resolve(access_token)
