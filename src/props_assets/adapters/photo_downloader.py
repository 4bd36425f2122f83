"""Photo download client."""

from dataclasses import dataclass

import httpx

from props_assets.domain.errors import StoreError
from props_assets.services.assets import PhotoDownloader


@dataclass
class HttpxPhotoDownloader(PhotoDownloader):
    """Downloads photo bytes from public storage URLs using httpx."""

    http_client: httpx.AsyncClient
    timeout_seconds: float = 20

    @classmethod
    def create(cls, timeout_seconds: float = 20) -> "HttpxPhotoDownloader":
        """Create a downloader with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(), timeout_seconds=timeout_seconds)

    async def download(self, url: str) -> bytes:
        """Download the bytes served at a photo URL."""
        try:
            response = await self.http_client.get(
                url, timeout=self.timeout_seconds, follow_redirects=True
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StoreError(f"Failed to download {url}: {exc}") from exc
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
