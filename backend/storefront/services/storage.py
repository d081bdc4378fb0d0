"""
Product image storage on Supabase Storage.

Uploads go through the Storage REST API with the service role key; the
bucket is public, so the returned URL can be stored on the product as-is.
"""

import logging
import secrets
import time
from typing import Optional

import httpx

from storefront.core.exceptions import UpstreamServiceError
from storefront.core.retry import (
    TRANSIENT_HTTP_ERRORS,
    raise_for_retryable_status,
    retry_with_backoff,
)
from storefront.services.interfaces.image_storage import IImageStorage

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/avif": "avif",
}


def build_image_path(filename: Optional[str], content_type: Optional[str]) -> str:
    """
    Object key for an uploaded product image.

    Format: ``products/<epoch ms>-<random hex>.<ext>``. The extension comes
    from the original filename, falling back to the MIME type and then "jpg".
    """
    ext = ""
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[1].lower()
    if not ext or not ext.isalnum():
        ext = ALLOWED_IMAGE_TYPES.get(content_type or "", "jpg")
    return f"products/{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"


class SupabaseImageStorage(IImageStorage):
    """
    Supabase Storage client.

    Attributes:
        base_url: Project URL, e.g. "https://abcd.supabase.co"
        service_key: Service role key (bypasses bucket policies)
        bucket: Target bucket name
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        bucket: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self.timeout = timeout
        self._transport = transport

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    @retry_with_backoff(max_retries=2, base_delay=0.8, exceptions=TRANSIENT_HTTP_ERRORS)
    async def _put_object(self, path: str, content: bytes, content_type: str) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(
                f"{self.base_url}/storage/v1/object/{self.bucket}/{path}",
                content=content,
                headers={
                    "Authorization": f"Bearer {self.service_key}",
                    "apikey": self.service_key,
                    "Content-Type": content_type,
                    "x-upsert": "false",
                },
            )
        return raise_for_retryable_status(response)

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        try:
            response = await self._put_object(path, content, content_type)
        except TRANSIENT_HTTP_ERRORS as e:
            raise UpstreamServiceError(f"Image storage unavailable: {e}") from e

        if response.is_error:
            try:
                detail = response.json().get("message") or response.text
            except ValueError:
                detail = response.text
            logger.error(
                "Image upload rejected",
                extra={"status_code": response.status_code, "path": path}
            )
            raise UpstreamServiceError(f"Image upload failed: {detail}")

        logger.info("Image uploaded", extra={"path": path, "bytes": len(content)})
        return self.public_url(path)
