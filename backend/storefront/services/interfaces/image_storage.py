"""
Image Storage Interface (IImageStorage)

Object storage for product images uploaded from the admin panel.
"""

from abc import ABC, abstractmethod


class IImageStorage(ABC):
    """Abstract interface for public image storage."""

    @abstractmethod
    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        """
        Store ``content`` at ``path`` without overwriting.

        Args:
            path: Object key inside the bucket, e.g. "products/1700000000000-ab12cd.jpg"
            content: Raw file bytes
            content_type: MIME type sent to the storage service

        Returns:
            Public URL of the stored object

        Raises:
            UpstreamServiceError: If the storage service rejects the upload
        """
        pass
