"""Storage access for logos, social icons and job photos."""
import logging

import httpx
from PIL import Image

from docgen.config import settings
from docgen.exceptions import AssetUnavailable, PartialDataUnavailable
from docgen.utils.images import decode_data_url, decode_image

logger = logging.getLogger(__name__)


def is_absolute_url(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


class StorageClient:
    """Thin client over the backend-as-a-service storage REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        service_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = (base_url or settings.storage_url).rstrip("/")
        self.service_key = service_key if service_key is not None else settings.storage_service_key
        self.base_api_url = f"{self.url}/storage/v1"
        self.timeout = timeout or settings.http_timeout
        self.headers = {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
        }
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def public_url(self, bucket: str, path: str) -> str:
        if is_absolute_url(path) or path.startswith("data:"):
            return path
        return f"{self.base_api_url}/object/public/{bucket}/{path.lstrip('/')}"

    async def create_signed_url(self, bucket: str, path: str, expires_in: int | None = None) -> str:
        """Short-lived URL for a private object.

        Raises:
            PartialDataUnavailable: the storage API refused or failed the request.
        """
        if is_absolute_url(path):
            return path
        expires_in = expires_in or settings.signed_url_ttl_seconds
        url = f"{self.base_api_url}/object/sign/{bucket}/{path.lstrip('/')}"
        try:
            async with self._client() as client:
                response = await client.post(url, headers=self.headers, json={"expiresIn": expires_in})
        except httpx.HTTPError as exc:
            raise PartialDataUnavailable(f"Signed URL request failed for {bucket}/{path}", original_error=exc)

        if response.status_code != 200:
            raise PartialDataUnavailable(
                f"Signed URL generation failed for {bucket}/{path}: HTTP {response.status_code}"
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise PartialDataUnavailable("Storage response was not JSON", original_error=exc)
        signed_path = data.get("signedURL") or data.get("signedUrl")
        if not signed_path:
            raise PartialDataUnavailable("Storage response did not contain signedURL")

        # Relative paths come back as /object/sign/<bucket>/<path>?token=...
        if signed_path.startswith("/storage/"):
            return f"{self.url}{signed_path}"
        if signed_path.startswith("/"):
            return f"{self.base_api_url}{signed_path}"
        return signed_path

    async def fetch_bytes(self, url: str) -> bytes:
        # Signature pads store data URLs or bare base64 rather than links
        if not is_absolute_url(url):
            return decode_data_url(url)
        try:
            async with self._client() as client:
                response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            raise AssetUnavailable(f"Fetch failed for {url}", original_error=exc)
        if response.status_code >= 300:
            raise AssetUnavailable(f"Fetch failed for {url}: HTTP {response.status_code}")
        if len(response.content) > settings.max_image_bytes:
            raise AssetUnavailable(f"Image too large: {url}")
        return response.content

    async def fetch_image(self, url: str | None) -> Image.Image | None:
        """Fetch and decode an image; ``None`` when it is unavailable for any reason."""
        if not url:
            return None
        try:
            return decode_image(await self.fetch_bytes(url))
        except AssetUnavailable as exc:
            logger.warning("Image unavailable, skipping: %s", exc)
            return None


def get_storage() -> StorageClient:
    return StorageClient()
