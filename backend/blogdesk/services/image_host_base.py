"""
Blogdesk Backend: Abstract Image Host Interface
=================================================

What:  Contract for the media store that holds blog images.
How:   Concrete hosts implement `upload()` and `delete()`; upload validation
       (extension, emptiness, size, sniffed content type) is shared here and
       runs before any storage is touched.
Who:   BlogService during create/update; the app factory picks the concrete
       host from `IMAGE_HOST`.

Implementations:
    - CloudinaryImageHost: signed Cloudinary REST API (production)
    - LocalImageHost: files under STORAGE_ROOT served by /api/files (development)
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Optional

import magic

from blogdesk.exceptions import ImageHostError, ValidationError

logger = logging.getLogger(__name__)

# Content type detected from the file header, mapped to its canonical extension
ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


@dataclass(frozen=True)
class UploadedImage:
    """A stored image: public URL plus the handle used to delete it later."""

    url: str
    public_id: str

    def as_dict(self) -> Dict[str, str]:
        return asdict(self)


class ImageHost(ABC):
    """
    Abstract media store.

    Contract:
        - upload() returns an UploadedImage or raises ImageHostError
        - delete() removes the image behind a public_id or raises ImageHostError
        - No retries; the caller decides what a failure means
    """

    def __init__(self, folder: str, max_file_size: int):
        self.folder = folder.strip("/")
        self.max_file_size = max_file_size

    def validate_upload(self, filename: Optional[str], content: bytes) -> str:
        """
        Check an upload before it leaves the process.

        Returns: the normalized extension (lowercase, with dot).
        Raises:  ValidationError (field "images") for a bad extension, empty
                 or oversized file, or content that is not an image.
                 ImageHostError if the content type cannot be detected.
        """
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="images",
                location="form",
                context={"filename": filename, "extension": ext},
            )
        if not content:
            raise ValidationError(
                message=f"File '{filename}' is empty",
                field="images",
                location="form",
            )
        if len(content) > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"File '{filename}' exceeds maximum of {max_mb:.0f}MB",
                field="images",
                location="form",
                context={"size": len(content), "max_size": self.max_file_size},
            )
        self._check_content_type(filename, content)
        return ext

    @staticmethod
    def _check_content_type(filename: Optional[str], content: bytes) -> str:
        """Sniff the MIME type from the bytes; a renamed non-image fails here."""
        try:
            mime_type = magic.from_buffer(content, mime=True)
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise ImageHostError(
                message="Could not verify file type",
                context={"filename": filename, "error": str(e)},
            ) from e

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"The file must be a valid image."
                ),
                field="images",
                location="form",
                context={"filename": filename, "detected_mime": mime_type},
            )
        return mime_type

    @abstractmethod
    async def upload(self, content: bytes, filename: Optional[str]) -> UploadedImage:
        """Store one image under the configured folder."""
        ...

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        """Remove the image identified by `public_id`."""
        ...

    async def close(self) -> None:
        """Release network clients; called once at application shutdown."""
        return None
