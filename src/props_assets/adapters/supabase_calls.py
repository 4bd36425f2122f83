"""Helpers for running blocking Supabase calls."""

import asyncio
from collections.abc import Callable
from typing import TypeVar

import httpx
from postgrest.exceptions import APIError
from storage3.utils import StorageException

from props_assets.domain.errors import StoreError

T = TypeVar("T")


async def run_store_call(operation: Callable[[], T], action: str) -> T:
    """Run a Supabase call off the event loop, mapping failures to StoreError."""
    try:
        return await asyncio.to_thread(operation)
    except (APIError, StorageException, httpx.HTTPError) as exc:
        raise StoreError(f"{action} failed: {error_message(exc)}") from exc


def error_message(exc: Exception) -> str:
    """Extract the most readable message a Supabase exception carries."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    if exc.args and isinstance(exc.args[0], dict):
        detail = exc.args[0].get("message") or exc.args[0].get("error")
        if detail:
            return str(detail)
    return str(exc) or exc.__class__.__name__
