"""Local Image Storage - persists generated images so rounds never keep provider URLs.

Invariants:
    - persist() writes <uuid>.png under the storage directory and returns
      "<public_prefix>/<file>"
    - Inline bytes are written directly; URLs are downloaded first
    - Download or write failures raise ImageStorageError
"""

import asyncio
import logging
import uuid
from pathlib import Path

import httpx

from slopguess.core.domain_types import GeneratedImage
from slopguess.core.errors import ImageStorageError, ProviderErrorType

logger = logging.getLogger(__name__)


class LocalImageStorage:
    def __init__(
        self,
        directory: str | Path,
        public_prefix: str = "/images",
        http_client: httpx.AsyncClient | None = None,
        download_timeout_seconds: float = 60.0,
    ):
        self.directory = Path(directory)
        self.public_prefix = public_prefix.rstrip("/")
        self._http = http_client
        self._timeout = download_timeout_seconds

    async def persist(self, image: GeneratedImage) -> str:
        if image.image_bytes is not None:
            data = image.image_bytes
        elif image.image_url:
            data = await self._download(image.image_url)
        else:
            raise ImageStorageError(
                "Generated image carries neither bytes nor URL",
                ProviderErrorType.BAD_REQUEST,
            )

        filename = f"{uuid.uuid4()}.png"
        try:
            await asyncio.to_thread(self._write, filename, data)
        except OSError as e:
            raise ImageStorageError(f"Failed to write image: {e}", ProviderErrorType.SERVER_ERROR) from e

        logger.info(f"Stored image {filename} ({len(data)} bytes)")
        return f"{self.public_prefix}/{filename}"

    def _write(self, filename: str, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        (self.directory / filename).write_bytes(data)

    async def _download(self, url: str) -> bytes:
        try:
            if self._http is not None:
                response = await self._http.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            raise ImageStorageError(f"Image download failed: {e}") from e

        if response.status_code != 200:
            raise ImageStorageError(
                f"Image download returned HTTP {response.status_code}",
                ProviderErrorType.SERVER_ERROR,
            )
        return response.content
