"""
Pressroom Backend: S3-Compatible Object Storage
===============================================

What:  ObjectStorage backed by an S3 bucket (AWS S3, MinIO, DigitalOcean Spaces).
Why:   Durable, CDN-friendly image URLs that survive redeploys of the API host.
How:   boto3 is synchronous, so every call runs in the default thread pool executor.

URL scheme:
    s3_public_url set      → {s3_public_url}/{key}
    custom endpoint_url    → {endpoint_url}/{bucket}/{key}   (path-style, MinIO)
    plain AWS              → https://{bucket}.s3.{region}.amazonaws.com/{key}
"""

import asyncio
import functools
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from pressroom.exceptions import NotFoundError, UpstreamServiceError
from pressroom.services.storage_base import ObjectStorage, StoredObject, extension_for

logger = logging.getLogger(__name__)


class S3Storage(ObjectStorage):

    def __init__(
        self,
        bucket_name: str,
        region_name: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        public_url: Optional[str] = None,
        client=None,
    ):
        """
        Args:
            bucket_name:  Target bucket (must already exist)
            public_url:   Override for the public base URL of stored objects
            client:       Pre-built boto3 S3 client (tests pass a stub)
        """
        self.bucket_name = bucket_name
        self.region_name = region_name
        self.endpoint_url = endpoint_url
        self.public_url = public_url.rstrip("/") if public_url else None

        self.s3_client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            # No retries: storage failures are reported to the caller immediately
            config=Config(region_name=region_name, retries={"max_attempts": 1}),
        )
        logger.info("S3Storage initialized for bucket=%s endpoint=%s", bucket_name, endpoint_url)

    async def _call(self, func, *args, **kwargs):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    def url_for(self, key: str) -> str:
        if self.public_url:
            return f"{self.public_url}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region_name}.amazonaws.com/{key}"

    async def upload(self, content: bytes, filename: str, content_type: str) -> StoredObject:
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        key = f"news/{date_dir}/{uuid.uuid4()}{extension_for(filename, content_type)}"

        try:
            await self._call(
                self.s3_client.put_object,
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Failed to upload '%s/%s': %s", self.bucket_name, key, e)
            raise UpstreamServiceError(
                service="storage",
                message=f"Error uploading image to object storage: {e}",
                context={"bucket": self.bucket_name},
            )

        logger.info("Uploaded %d bytes to '%s/%s'", len(content), self.bucket_name, key)
        return StoredObject(key=key, url=self.url_for(key))

    def _read_object(self, key: str) -> bytes:
        response = self.s3_client.get_object(Bucket=self.bucket_name, Key=key)
        return response["Body"].read()

    async def download(self, key: str) -> bytes:
        try:
            return await self._call(self._read_object, key)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in ("NoSuchKey", "404"):
                raise NotFoundError(resource="file", resource_id=key)
            logger.error("Failed to download '%s/%s': %s", self.bucket_name, key, e)
            raise UpstreamServiceError(
                service="storage",
                message=f"Error downloading image from object storage: {e}",
            )
        except BotoCoreError as e:
            raise UpstreamServiceError(
                service="storage",
                message=f"Error downloading image from object storage: {e}",
            )

    async def delete(self, key: str) -> None:
        try:
            await self._call(self.s3_client.delete_object, Bucket=self.bucket_name, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise UpstreamServiceError(
                service="storage",
                message=f"Error deleting image from object storage: {e}",
            )
        logger.info("Deleted '%s/%s'", self.bucket_name, key)
