"""
Blogdesk Backend: Local Filesystem Image Host
===============================================

What:  Stores blog images on local disk and exposes them under /api/files.
How:   Validated bytes are written with aiofiles to
       STORAGE_ROOT/<folder>/<uuid><ext>; the public_id is the path relative
       to the storage root, so delete() can find the file again.
Who:   Selected with IMAGE_HOST=local (development and tests).

Directory Structure:
    storage/
    └── blog-images/
        ├── a1b2c3d4-....jpg
        └── e5f6g7h8-....png
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles

from blogdesk.exceptions import ImageHostError, ValidationError
from blogdesk.services.image_host_base import ImageHost, UploadedImage

logger = logging.getLogger(__name__)

FILES_URL_PREFIX = "/api/files"


class LocalImageHost(ImageHost):
    def __init__(self, storage_root: str, folder: str, max_file_size: int):
        super().__init__(folder=folder, max_file_size=max_file_size)
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalImageHost initialized with storage_root=%s", self.storage_root)

    def resolve(self, relative_path: str) -> Path:
        """
        Map a public_id / URL path onto the storage root.

        Raises ValidationError when the path escapes the storage root.
        """
        path = (self.storage_root / relative_path).resolve()
        if path != self.storage_root and self.storage_root not in path.parents:
            raise ValidationError(
                message="Invalid file path",
                field="path",
                location="path",
                context={"path": relative_path},
            )
        return path

    async def upload(self, content: bytes, filename: Optional[str]) -> UploadedImage:
        ext = self.validate_upload(filename, content)
        public_id = f"{self.folder}/{uuid.uuid4()}{ext}"
        absolute_path = self.storage_root / public_id

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store image at %s: %s", absolute_path, str(e))
            raise ImageHostError(
                message="Failed to save uploaded image",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("Image stored: %s (%d bytes)", public_id, len(content))
        return UploadedImage(url=f"{FILES_URL_PREFIX}/{public_id}", public_id=public_id)

    async def delete(self, public_id: str) -> None:
        path = self.resolve(public_id)
        try:
            if path.exists():
                os.remove(path)
                logger.info("Deleted image: %s", public_id)
            else:
                logger.debug("Delete: image already gone: %s", public_id)
        except OSError as e:
            raise ImageHostError(
                message="Failed to delete image",
                context={"public_id": public_id, "os_error": str(e)},
            )
