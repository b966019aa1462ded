"""
Pressroom Backend: Abstract Object Storage Interface
====================================================

What:  Contract for the service that keeps uploaded images and hands back a
       durable URL for them.
Why:   News handlers only need "bytes in, URL out" (plus read-back and cleanup).
       The concrete backend (local disk, S3-compatible bucket) is chosen in
       `create_app()` from settings.storage_backend; tests pass an in-memory fake.

Also home to the upload validation shared by news images and contact attachments.
"""

import mimetypes
from abc import ABC, abstractmethod

from pydantic import BaseModel

from pressroom.exceptions import ValidationError
from pressroom.schemas.news import ImageUpload


class StoredObject(BaseModel):
    """Result of an upload: backend key plus the public URL clients can load."""
    key: str
    url: str


class ObjectStorage(ABC):
    """
    Contract:
        - upload() stores the bytes under a fresh, collision-free key
        - download() returns the exact bytes that were uploaded
        - delete() is idempotent (missing keys are not an error)
        - backend failures are raised as UpstreamServiceError("storage", ...)
        - unknown keys on download raise NotFoundError
    """

    @abstractmethod
    async def upload(self, content: bytes, filename: str, content_type: str) -> StoredObject:
        ...

    @abstractmethod
    async def download(self, key: str) -> bytes:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...


def extension_for(filename: str, content_type: str) -> str:
    """
    Pick a file extension for a stored object.

    Prefers the MIME type (client filenames are untrusted), falls back to the
    original suffix, then to no extension at all.
    """
    guessed = mimetypes.guess_extension(content_type or "")
    if guessed:
        return ".jpg" if guessed in (".jpe", ".jpeg") else guessed
    if "." in filename:
        suffix = "." + filename.rsplit(".", 1)[-1].lower()
        if suffix[1:].isalnum() and len(suffix) <= 6:
            return suffix
    return ""


def validate_image_upload(upload: ImageUpload, max_file_size: int) -> None:
    """
    Validate an uploaded image before it is sent to storage or attached to mail.

    Checks, cheapest first:
        1. declared content type is image/*
        2. file is not empty
        3. file is within max_file_size

    Raises:
        ValidationError naming the offending file
    """
    if not (upload.content_type or "").startswith("image/"):
        raise ValidationError(
            message=f"File '{upload.filename}' is not an image (got '{upload.content_type}')",
            field="image",
            context={"content_type": upload.content_type},
        )

    if not upload.content:
        raise ValidationError(message=f"File '{upload.filename}' is empty", field="image")

    if len(upload.content) > max_file_size:
        max_mb = max_file_size / (1024 * 1024)
        raise ValidationError(
            message=f"File '{upload.filename}' exceeds the maximum size of {max_mb:.0f}MB",
            field="image",
            context={"max_size": max_file_size, "actual_size": len(upload.content)},
        )
