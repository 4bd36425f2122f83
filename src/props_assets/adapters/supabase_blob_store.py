"""Supabase Storage-backed blob store."""

from dataclasses import dataclass
from urllib.parse import quote

from supabase import Client

from props_assets.adapters.supabase_calls import run_store_call
from props_assets.services.tree_store import BlobStore


def storage_key(path: str) -> str:
    """Map a logical blob path to a key Supabase Storage accepts.

    Storage keys are limited to ASCII word characters and a little
    punctuation, while blob paths carry project and folder names verbatim.
    Each segment is percent-encoded with ``!`` standing in for ``%``; a
    literal ``!`` encodes to ``!21``, so distinct paths never share a key.
    """
    return "/".join(
        quote(segment, safe="").replace("%", "!").replace("~", "!7E")
        for segment in path.split("/")
    )


@dataclass
class SupabaseBlobStore(BlobStore):
    """Stores photo bytes in a Supabase Storage bucket."""

    client: Client
    bucket: str

    async def put(self, path: str, data: bytes, content_type: str) -> str:
        """Upload bytes and return the logical path as the handle."""
        key = storage_key(path)
        await run_store_call(
            lambda: self._bucket().upload(
                key, data, {"content-type": content_type, "upsert": "true"}
            ),
            f"Uploading {path}",
        )
        return path

    async def get_download_url(self, handle: str) -> str:
        """Return the public URL of a stored object."""
        url = await run_store_call(
            lambda: self._bucket().get_public_url(storage_key(handle)),
            f"Resolving URL for {handle}",
        )
        return str(url).rstrip("?")

    async def delete(self, path: str) -> None:
        """Remove a stored object."""
        await run_store_call(
            lambda: self._bucket().remove([storage_key(path)]),
            f"Deleting {path}",
        )

    def _bucket(self):  # type: ignore[no-untyped-def]
        return self.client.storage.from_(self.bucket)
