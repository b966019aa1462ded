"""
Pressroom Backend: Local File Storage
=====================================

What:  ObjectStorage backed by a directory on the server's disk.
Why:   Zero-dependency default for development and single-host deployments.
How:   Stores each upload in a date-organized directory with a UUID filename and
       returns `{public_base_url}/files/{key}` as its durable URL (served by
       routes/files.py).

Directory Structure:
    storage/
    └── 2024/
        └── 01/
            └── 15/
                ├── a1b2c3d4-5678.jpg
                └── e5f6g7h8-9012.png

Security:
    - UUID filenames: no user input ever reaches the file system path
    - resolve_path() refuses keys that escape storage_root (../ traversal)
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

import aiofiles

from pressroom.exceptions import NotFoundError, UpstreamServiceError, ValidationError
from pressroom.services.storage_base import ObjectStorage, StoredObject, extension_for

logger = logging.getLogger(__name__)


class LocalFileStorage(ObjectStorage):

    def __init__(self, storage_root: str, public_base_url: str):
        self.storage_root = Path(storage_root).resolve()
        self.public_base_url = public_base_url.rstrip("/")
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalFileStorage initialized with storage_root=%s", self.storage_root)

    def _generate_key(self, extension: str) -> str:
        """YYYY/MM/DD/<uuid><ext>, relative to storage_root."""
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        return f"{date_dir}/{uuid.uuid4()}{extension}"

    def resolve_path(self, key: str) -> Path:
        """
        Map a storage key to an absolute path inside storage_root.

        Raises:
            ValidationError if the key points outside the storage root
        """
        path = (self.storage_root / key).resolve()
        if not path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path", field="path")
        return path

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/files/{key}"

    async def upload(self, content: bytes, filename: str, content_type: str) -> StoredObject:
        key = self._generate_key(extension_for(filename, content_type))
        path = self.resolve_path(key)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", path, str(e))
            raise UpstreamServiceError(
                service="storage",
                message="Failed to save uploaded image. Please try again.",
                context={"os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", key, len(content))
        return StoredObject(key=key, url=self.url_for(key))

    async def download(self, key: str) -> bytes:
        path = self.resolve_path(key)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            raise NotFoundError(resource="file", resource_id=key)
        except OSError as e:
            logger.error("Failed to read file %s: %s", path, str(e))
            raise UpstreamServiceError(
                service="storage",
                message="Failed to read stored image.",
                context={"os_error": str(e)},
            )

    async def delete(self, key: str) -> None:
        path = self.resolve_path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise UpstreamServiceError(
                service="storage",
                message="Failed to delete stored image.",
                context={"os_error": str(e)},
            )
        logger.info("File removed: %s", key)
